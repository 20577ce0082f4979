"""Price computation for a cart.

``price`` is the only place discounts are stacked. It is pure: eligibility is
checked by the ``ensure_*`` helpers against already-loaded rows, and the
numeric rules below only ever clamp amounts.

Order of application is fixed:

1. voucher (percentage is floored, fixed is capped at the subtotal)
2. coupon (capped at what is left)
3. points (capped at the requested amount, the balance and what is left)
"""

import typing as t
from dataclasses import dataclass
from datetime import datetime

from events.exceptions import InsufficientPoints, InvalidCoupon, InvalidVoucher

if t.TYPE_CHECKING:
    from accounts.models import MarketplaceUser
    from events.models import Coupon, Event, Voucher

PERCENTAGE = "percentage"
FIXED = "fixed"


@dataclass(frozen=True)
class VoucherTerms:
    discount_type: str
    amount: int


@dataclass(frozen=True)
class PriceBreakdown:
    subtotal: int
    voucher_discount: int
    coupon_discount: int
    points_used: int
    final_price: int


def voucher_discount(subtotal: int, voucher: VoucherTerms | None) -> int:
    if voucher is None:
        return 0
    if voucher.discount_type == PERCENTAGE:
        percent = min(max(voucher.amount, 0), 100)
        return subtotal * percent // 100
    return min(max(voucher.amount, 0), subtotal)


def price(
    subtotal: int,
    voucher: VoucherTerms | None = None,
    coupon_amount: int | None = None,
    points_requested: int = 0,
    points_available: int = 0,
) -> PriceBreakdown:
    """Compute the final price of a cart.

    Args:
        subtotal: unit price times quantity, in whole currency units.
        voucher: terms of an already validated voucher.
        coupon_amount: face value of an already validated coupon.
        points_requested: points the buyer wants to redeem.
        points_available: the buyer's spendable balance.

    Returns:
        The full breakdown. ``final_price`` is always within ``0..subtotal``.
    """
    subtotal = max(subtotal, 0)
    from_voucher = voucher_discount(subtotal, voucher)
    after_voucher = subtotal - from_voucher
    from_coupon = min(max(coupon_amount or 0, 0), after_voucher)
    after_coupon = after_voucher - from_coupon
    points_used = max(min(points_requested, points_available, after_coupon), 0)
    return PriceBreakdown(
        subtotal=subtotal,
        voucher_discount=from_voucher,
        coupon_discount=from_coupon,
        points_used=points_used,
        final_price=max(0, after_coupon - points_used),
    )


def ensure_voucher_usable(voucher: "Voucher", event: "Event", now: datetime, held_uses: int = 0) -> VoucherTerms:
    """Check that a voucher may be applied to a new transaction for ``event``.

    ``held_uses`` counts non-terminal transactions already holding the voucher;
    they are only added to ``used_count`` when confirmed.

    Raises:
        InvalidVoucher: wrong event, outside the validity window, or no uses left.
    """
    if voucher.event_id != event.pk:
        raise InvalidVoucher("This voucher is not valid for this event.")
    if now < voucher.valid_from:
        raise InvalidVoucher("This voucher is not active yet.")
    if now > voucher.valid_until:
        raise InvalidVoucher("This voucher has expired.")
    if voucher.used_count + held_uses >= voucher.usage_limit:
        raise InvalidVoucher("This voucher has reached its usage limit.")
    return VoucherTerms(discount_type=voucher.discount_type, amount=voucher.discount_amount)


def ensure_coupon_usable(coupon: "Coupon", buyer: "MarketplaceUser", now: datetime, is_held: bool = False) -> int:
    """Check that a coupon may be redeemed by ``buyer``; returns its face value.

    Raises:
        InvalidCoupon: someone else's coupon, expired, already used or held.
    """
    if coupon.owner_id != buyer.pk:
        raise InvalidCoupon("This coupon belongs to another user.")
    if coupon.expires_at <= now:
        raise InvalidCoupon("This coupon has expired.")
    if coupon.used_at is not None:
        raise InvalidCoupon("This coupon has already been used.")
    if is_held:
        raise InvalidCoupon("This coupon is already applied to a pending transaction.")
    return coupon.discount_amount


def ensure_points_available(points_requested: int, points_available: int) -> None:
    """Raises InsufficientPoints when asking for more than the spendable balance."""
    if points_requested < 0:
        raise InsufficientPoints("Points to redeem cannot be negative.")
    if points_requested > points_available:
        raise InsufficientPoints(f"Requested {points_requested} points but only {points_available} are available.")
