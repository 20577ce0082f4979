from ninja_extra import ControllerBase, api_controller, route

from common.schema import ErrorResponse
from common.throttling import CheckInThrottle
from events import schema
from events.service import check_in_service


@api_controller("/check-in", tags=["Check-in"], throttle=CheckInThrottle())
class CheckInController(ControllerBase):
    """Gate scanning.

    The QR token is the only credential: whoever holds it can check the ticket
    in, exactly once.
    """

    @route.post(
        "/{qr_token}",
        url_name="check_in",
        response={200: schema.CheckInResultSchema, 404: ErrorResponse},
    )
    def check_in(self, qr_token: str) -> schema.CheckInResultSchema:
        """Check a ticket in; a repeat scan answers ``already_used`` instead of failing."""
        result = check_in_service.check_in(qr_token)
        ticket = result.ticket
        return schema.CheckInResultSchema(
            success=result.success,
            already_used=result.already_used,
            ticket=schema.CheckInTicketSchema(
                ticket_id=ticket.pk,
                attendee_name=ticket.attendee_name,
                attendee_email=ticket.attendee_email,
                event_id=ticket.transaction.event_id,
                event_name=ticket.transaction.event.name,
                ticket_type_name=ticket.transaction.ticket_type.name,
                checked_in_at=ticket.checked_in_at,
            ),
        )
