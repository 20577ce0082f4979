import typing as t

from django.conf import settings
from django.db import models
from django.db.models import Q

from common.models import TimeStampedModel

if t.TYPE_CHECKING:
    from accounts.models import MarketplaceUser


class EventQuerySet(models.QuerySet["Event"]):
    def published(self) -> t.Self:
        """Events currently selling tickets."""
        return self.filter(status=Event.EventStatus.PUBLISHED)

    def organized_by(self, user: "MarketplaceUser") -> t.Self:
        """Events owned by the given organizer."""
        return self.filter(organizer=user)


class Event(TimeStampedModel):
    """The catalog row a transaction is placed against.

    Only the fields the order lifecycle needs live here; browsing and search are
    served elsewhere.
    """

    class EventStatus(models.TextChoices):
        DRAFT = "draft", "Draft"
        PUBLISHED = "published", "Published"
        CANCELLED = "cancelled", "Cancelled"
        COMPLETED = "completed", "Completed"

    organizer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="organized_events")
    name = models.CharField(max_length=255, db_index=True)
    location = models.CharField(max_length=255, blank=True)
    start = models.DateTimeField(db_index=True)
    end = models.DateTimeField(null=True, blank=True)
    status = models.CharField(max_length=16, choices=EventStatus.choices, default=EventStatus.DRAFT, db_index=True)

    objects = EventQuerySet.as_manager()

    class Meta:
        ordering = ["start"]
        constraints = [
            models.CheckConstraint(
                condition=Q(end__isnull=True) | Q(end__gte=models.F("start")),
                name="event_end_after_start",
            ),
        ]

    def __str__(self) -> str:
        return self.name

    @property
    def is_on_sale(self) -> bool:
        return self.status == self.EventStatus.PUBLISHED
