import typing as t
from datetime import datetime, timedelta

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from common.models import TimeStampedModel


class Voucher(TimeStampedModel):
    """An event-scoped discount code created by the event's organizer."""

    class DiscountType(models.TextChoices):
        PERCENTAGE = "percentage", "Percentage"
        FIXED = "fixed", "Fixed amount"

    class VoucherStatus(models.TextChoices):
        SCHEDULED = "scheduled", "Scheduled"
        ACTIVE = "active", "Active"
        EXPIRED = "expired", "Expired"
        EXHAUSTED = "exhausted", "Exhausted"

    event = models.ForeignKey("events.Event", on_delete=models.CASCADE, related_name="vouchers")
    code = models.CharField(max_length=64, db_index=True)
    discount_type = models.CharField(max_length=16, choices=DiscountType.choices)
    discount_amount = models.PositiveBigIntegerField()
    usage_limit = models.PositiveIntegerField()
    used_count = models.PositiveIntegerField(default=0)
    valid_from = models.DateTimeField()
    valid_until = models.DateTimeField()

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(fields=["event", "code"], name="unique_voucher_code_per_event"),
            models.CheckConstraint(condition=Q(used_count__lte=F("usage_limit")), name="voucher_usage_within_limit"),
            models.CheckConstraint(
                condition=~Q(discount_type="percentage") | Q(discount_amount__gte=1, discount_amount__lte=100),
                name="voucher_percentage_in_range",
            ),
            models.CheckConstraint(condition=Q(valid_until__gt=F("valid_from")), name="voucher_window_ordered"),
        ]

    def __str__(self) -> str:
        return f"{self.code} ({self.event})"

    def clean(self) -> None:
        """Normalize the code and validate the percentage range."""
        self.code = self.code.strip().upper()
        if self.discount_type == self.DiscountType.PERCENTAGE and not 1 <= self.discount_amount <= 100:
            raise ValidationError({"discount_amount": "Percentage vouchers must be between 1 and 100."})

    def status_at(self, now: datetime | None = None) -> str:
        now = now or timezone.now()
        if self.used_count >= self.usage_limit:
            return self.VoucherStatus.EXHAUSTED
        if now < self.valid_from:
            return self.VoucherStatus.SCHEDULED
        if now > self.valid_until:
            return self.VoucherStatus.EXPIRED
        return self.VoucherStatus.ACTIVE


class CouponQuerySet(models.QuerySet["Coupon"]):
    def usable(self) -> t.Self:
        return self.filter(used_at__isnull=True, expires_at__gt=timezone.now())


class Coupon(TimeStampedModel):
    """A personal fixed-amount discount, usable once by its owner on any event."""

    owner = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="coupons")
    code = models.CharField(max_length=64, unique=True)
    discount_amount = models.PositiveBigIntegerField()
    expires_at = models.DateTimeField(db_index=True)
    used_at = models.DateTimeField(null=True, blank=True)
    used_by_transaction = models.OneToOneField(
        "events.Transaction", on_delete=models.SET_NULL, null=True, blank=True, related_name="consumed_coupon"
    )

    objects = CouponQuerySet.as_manager()

    class Meta:
        ordering = ["expires_at"]

    def __str__(self) -> str:
        return self.code

    def clean(self) -> None:
        self.code = self.code.strip().upper()

    @property
    def is_expiring_soon(self) -> bool:
        return self.expires_at - timezone.now() <= timedelta(days=settings.COUPON_EXPIRING_SOON_DAYS)
