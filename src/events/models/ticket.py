import secrets
import typing as t

from django.conf import settings
from django.db import models
from django.db.models import F, Q

from common.models import TimeStampedModel

if t.TYPE_CHECKING:
    from accounts.models import MarketplaceUser


def generate_qr_token() -> str:
    """Opaque, unguessable value printed into the ticket's QR code."""
    return secrets.token_urlsafe(settings.QR_TOKEN_BYTES)


class TicketType(TimeStampedModel):
    event = models.ForeignKey("events.Event", on_delete=models.CASCADE, related_name="ticket_types")
    name = models.CharField(max_length=255, db_index=True)
    unit_price = models.PositiveBigIntegerField(help_text="Price per seat in whole currency units.")
    total_seats = models.PositiveIntegerField()
    seats_remaining = models.PositiveIntegerField()

    class Meta:
        ordering = ["event", "name"]
        constraints = [
            models.UniqueConstraint(fields=["event", "name"], name="unique_ticket_type_name_per_event"),
            models.CheckConstraint(
                condition=Q(seats_remaining__gte=0) & Q(seats_remaining__lte=F("total_seats")),
                name="ticket_type_seats_within_capacity",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.event} - {self.name}"

    def save(self, *args: t.Any, **kwargs: t.Any) -> None:
        """A new ticket type starts with every seat available."""
        if self._state.adding and self.seats_remaining is None:
            self.seats_remaining = self.total_seats
        super().save(*args, **kwargs)


class TicketQuerySet(models.QuerySet["Ticket"]):
    def for_organizer(self, user: "MarketplaceUser") -> t.Self:
        return self.filter(transaction__event__organizer=user)

    def with_event_details(self) -> t.Self:
        return self.select_related("transaction__event", "transaction__ticket_type")


class Ticket(TimeStampedModel):
    """One admission, minted when its transaction is confirmed."""

    transaction = models.ForeignKey("events.Transaction", on_delete=models.CASCADE, related_name="tickets")
    attendee_name = models.CharField(max_length=255)
    attendee_email = models.EmailField(blank=True)
    qr_token = models.CharField(max_length=128, unique=True, default=generate_qr_token, editable=False)
    checked_in = models.BooleanField(default=False, db_index=True)
    checked_in_at = models.DateTimeField(null=True, blank=True)

    objects = TicketQuerySet.as_manager()

    class Meta:
        ordering = ["created_at"]

    def __str__(self) -> str:
        return f"{self.attendee_name} ({self.transaction_id})"
