from django.db.models import QuerySet
from ninja import Query
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, paginate

from common.authentication import BaseJWTAuth
from common.controllers import UserAwareController
from events import schema
from events.filters import AttendeeFilterSchema
from events.models import Ticket, Transaction, Voucher
from events.service import check_in_service, promotion_service
from events.service.transaction_service import transactions_for_organizer


@api_controller("/organizer", auth=BaseJWTAuth(), tags=["Organizer"])
class OrganizerController(UserAwareController):
    @route.get(
        "/transactions",
        url_name="organizer_transactions",
        response=PageNumberPaginationExtra.get_response_schema(schema.TransactionSchema),
    )
    @paginate(PageNumberPaginationExtra, page_size=20)
    def organizer_transactions(
        self,
        params: schema.TransactionFilterSchema = Query(...),  # type: ignore[type-arg]
    ) -> QuerySet[Transaction]:
        """Transactions across the events you organize, optionally by status."""
        return transactions_for_organizer(self.user(), params.status)

    @route.get("/vouchers", url_name="organizer_vouchers", response=list[schema.VoucherSchema])
    def organizer_vouchers(self) -> QuerySet[Voucher]:
        """Vouchers across the events you organize."""
        return promotion_service.vouchers_for_organizer(self.user())

    @route.get(
        "/attendees",
        url_name="organizer_attendees",
        response=PageNumberPaginationExtra.get_response_schema(schema.OrganizerAttendeeSchema),
    )
    @paginate(PageNumberPaginationExtra, page_size=50)
    def organizer_attendees(
        self,
        params: AttendeeFilterSchema = Query(...),  # type: ignore[type-arg]
    ) -> QuerySet[Ticket]:
        """Minted tickets across the events you organize, optionally for one event or by check-in state."""
        return params.filter(check_in_service.attendees_for_organizer(self.user()))
