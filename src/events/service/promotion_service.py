"""Voucher and coupon management."""

import secrets
from datetime import datetime, timedelta
from uuid import UUID

import structlog
from django.conf import settings
from django.db.models import QuerySet
from django.utils import timezone

from accounts.models import MarketplaceUser
from events.exceptions import Forbidden, NotFound
from events.models import Coupon, Event, Transaction, Voucher

logger = structlog.get_logger(__name__)


def create_voucher(
    event_id: UUID,
    organizer: MarketplaceUser,
    *,
    code: str,
    discount_type: str,
    discount_amount: int,
    usage_limit: int,
    valid_from: datetime,
    valid_until: datetime,
) -> Voucher:
    """Create a voucher for one of the organizer's events.

    Raises:
        NotFound: no such event.
        Forbidden: the event belongs to someone else.
        ValidationError: duplicate code for the event or invalid amounts.
    """
    try:
        event = Event.objects.get(pk=event_id)
    except Event.DoesNotExist as e:
        raise NotFound("Event not found.") from e
    if event.organizer_id != organizer.pk:
        raise Forbidden("Only the event organizer can create vouchers for it.")
    voucher = Voucher(
        event=event,
        code=code,
        discount_type=discount_type,
        discount_amount=discount_amount,
        usage_limit=usage_limit,
        valid_from=valid_from,
        valid_until=valid_until,
    )
    voucher.save()
    logger.info("voucher_created", voucher_id=str(voucher.pk), event_id=str(event.pk), code=voucher.code)
    return voucher


def vouchers_for_organizer(organizer: MarketplaceUser) -> QuerySet[Voucher]:
    return Voucher.objects.filter(event__organizer=organizer).select_related("event").order_by("-created_at")


def issue_coupon(
    owner: MarketplaceUser,
    discount_amount: int,
    *,
    code: str | None = None,
    expires_at: datetime | None = None,
) -> Coupon:
    """Issue a personal single-use coupon, valid for POINTS_VALIDITY_DAYS by default."""
    coupon = Coupon(
        owner=owner,
        code=code or f"CPN-{secrets.token_hex(4).upper()}",
        discount_amount=discount_amount,
        expires_at=expires_at or timezone.now() + timedelta(days=settings.POINTS_VALIDITY_DAYS),
    )
    coupon.save()
    logger.info("coupon_issued", coupon_id=str(coupon.pk), owner_id=str(owner.pk), amount=discount_amount)
    return coupon


def usable_coupons(owner: MarketplaceUser) -> QuerySet[Coupon]:
    """Unused, unexpired coupons not held by a pending transaction."""
    return (
        Coupon.objects.usable()
        .filter(owner=owner)
        .exclude(transactions__status__in=Transaction.ACTIVE_STATUSES)
        .order_by("expires_at")
    )
