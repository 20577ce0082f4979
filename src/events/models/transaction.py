import typing as t

from django.conf import settings
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from common.models import TimeStampedModel

if t.TYPE_CHECKING:
    from accounts.models import MarketplaceUser


class TransactionQuerySet(models.QuerySet["Transaction"]):
    def active(self) -> t.Self:
        """Transactions that still hold seats, points, vouchers or coupons."""
        return self.filter(status__in=Transaction.ACTIVE_STATUSES)

    def for_buyer(self, user: "MarketplaceUser") -> t.Self:
        return self.filter(buyer=user)

    def for_organizer(self, user: "MarketplaceUser") -> t.Self:
        return self.filter(event__organizer=user)

    def with_related(self) -> t.Self:
        return self.select_related("event", "ticket_type", "voucher", "coupon", "buyer")


class Transaction(TimeStampedModel):
    """A purchase of one or more seats of a single ticket type.

    Only the lifecycle operations in ``events.service.transaction_service`` may
    change ``status``; every change is a conditional update on the current value.
    """

    class Status(models.TextChoices):
        WAITING_PAYMENT = "waiting_payment", "Waiting for payment"
        WAITING_CONFIRMATION = "waiting_confirmation", "Waiting for confirmation"
        DONE = "done", "Done"
        REJECTED = "rejected", "Rejected"
        EXPIRED = "expired", "Expired"
        CANCELLED = "cancelled", "Cancelled"

    ACTIVE_STATUSES: t.ClassVar[tuple[str, ...]] = (Status.WAITING_PAYMENT, Status.WAITING_CONFIRMATION)
    TERMINAL_STATUSES: t.ClassVar[tuple[str, ...]] = (
        Status.DONE,
        Status.REJECTED,
        Status.EXPIRED,
        Status.CANCELLED,
    )

    buyer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="transactions")
    event = models.ForeignKey("events.Event", on_delete=models.PROTECT, related_name="transactions")
    ticket_type = models.ForeignKey("events.TicketType", on_delete=models.PROTECT, related_name="transactions")
    quantity = models.PositiveIntegerField()
    attendees = models.JSONField(default=list, blank=True, help_text="Attendee names and emails, one per seat.")

    unit_price = models.PositiveBigIntegerField()
    subtotal = models.PositiveBigIntegerField()
    voucher = models.ForeignKey(
        "events.Voucher", on_delete=models.PROTECT, null=True, blank=True, related_name="transactions"
    )
    voucher_discount = models.PositiveBigIntegerField(default=0)
    coupon = models.ForeignKey(
        "events.Coupon", on_delete=models.PROTECT, null=True, blank=True, related_name="transactions"
    )
    coupon_discount = models.PositiveBigIntegerField(default=0)
    points_used = models.PositiveBigIntegerField(default=0)
    final_price = models.PositiveBigIntegerField()

    status = models.CharField(max_length=32, choices=Status.choices, default=Status.WAITING_PAYMENT, db_index=True)
    payment_proof = models.CharField(max_length=512, blank=True)
    rejection_reason = models.TextField(blank=True)

    expired_at = models.DateTimeField(db_index=True)
    submitted_at = models.DateTimeField(null=True, blank=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    objects = TransactionQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "expired_at"], name="transaction_status_expiry_idx"),
        ]
        constraints = [
            models.CheckConstraint(condition=Q(quantity__gte=1), name="transaction_quantity_positive"),
            models.CheckConstraint(
                condition=Q(subtotal=F("unit_price") * F("quantity")),
                name="transaction_subtotal_matches_quantity",
            ),
            models.CheckConstraint(
                condition=Q(final_price__lte=F("subtotal")), name="transaction_final_within_subtotal"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.id} ({self.status})"

    @property
    def is_terminal(self) -> bool:
        return self.status in self.TERMINAL_STATUSES

    @property
    def seconds_remaining(self) -> int:
        """Seconds left in the payment window; 0 when closed or no longer relevant."""
        if self.status != self.Status.WAITING_PAYMENT:
            return 0
        return max(0, int((self.expired_at - timezone.now()).total_seconds()))
