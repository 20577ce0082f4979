from uuid import UUID

from django.db.models import Q
from ninja import FilterSchema


class AttendeeFilterSchema(FilterSchema):
    event_id: UUID | None = None
    checked_in: bool | None = None

    def filter_event_id(self, event_id: UUID | None) -> Q:
        """Attendees of a single event."""
        if event_id:
            return Q(transaction__event_id=event_id)
        return Q()
