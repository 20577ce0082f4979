import typing as t

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from common.models import TimeStampedModel


class PointsLedgerEntryQuerySet(models.QuerySet["PointsLedgerEntry"]):
    def spendable(self) -> t.Self:
        """Earned entries with an unconsumed, unexpired remainder, oldest first."""
        return (
            self.filter(reason=PointsLedgerEntry.Reason.EARNED, remaining__gt=0)
            .filter(Q(expires_at__isnull=True) | Q(expires_at__gt=timezone.now()))
            .order_by("created_at", "id")
        )


class PointsLedgerEntry(TimeStampedModel):
    """Append-only points movement; 1 point is worth 1 currency unit.

    Earned entries track how much of them is still unconsumed in ``remaining``.
    """

    class Reason(models.TextChoices):
        EARNED = "earned", "Earned"
        USED = "used", "Used"
        EXPIRED = "expired", "Expired"

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="points_entries")
    amount = models.BigIntegerField()
    reason = models.CharField(max_length=16, choices=Reason.choices, db_index=True)
    remaining = models.PositiveBigIntegerField(default=0)
    expires_at = models.DateTimeField(null=True, blank=True, db_index=True)
    transaction = models.ForeignKey(
        "events.Transaction", on_delete=models.SET_NULL, null=True, blank=True, related_name="points_entries"
    )
    description = models.CharField(max_length=255, blank=True)

    objects = PointsLedgerEntryQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        verbose_name_plural = "points ledger entries"
        constraints = [
            models.CheckConstraint(
                condition=(Q(reason="earned") & Q(amount__gt=0)) | (~Q(reason="earned") & Q(amount__lt=0)),
                name="points_entry_sign_matches_reason",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.user_id} {self.reason} {self.amount}"
