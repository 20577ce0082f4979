"""Tests for voucher and coupon management."""

import typing as t
from datetime import timedelta

import pytest
from django.core.exceptions import ValidationError
from django.utils import timezone

from accounts.models import MarketplaceUser
from events.exceptions import Forbidden
from events.models import Coupon, Event, Transaction, Voucher
from events.service import promotion_service

pytestmark = pytest.mark.django_db


def _voucher_kwargs(**overrides: t.Any) -> dict[str, t.Any]:
    now = timezone.now()
    kwargs: dict[str, t.Any] = {
        "code": "early-bird",
        "discount_type": Voucher.DiscountType.FIXED,
        "discount_amount": 10_000,
        "usage_limit": 50,
        "valid_from": now,
        "valid_until": now + timedelta(days=14),
    }
    kwargs.update(overrides)
    return kwargs


class TestCreateVoucher:
    def test_code_is_normalized(self, event: Event, organizer: MarketplaceUser) -> None:
        voucher = promotion_service.create_voucher(event.pk, organizer, **_voucher_kwargs())

        assert voucher.code == "EARLY-BIRD"
        assert voucher.used_count == 0
        assert list(promotion_service.vouchers_for_organizer(organizer)) == [voucher]

    def test_only_the_organizer(self, event: Event, other_user: MarketplaceUser) -> None:
        with pytest.raises(Forbidden):
            promotion_service.create_voucher(event.pk, other_user, **_voucher_kwargs())

    def test_percentage_above_hundred(self, event: Event, organizer: MarketplaceUser) -> None:
        with pytest.raises(ValidationError):
            promotion_service.create_voucher(
                event.pk,
                organizer,
                **_voucher_kwargs(discount_type=Voucher.DiscountType.PERCENTAGE, discount_amount=150),
            )

    def test_duplicate_code_for_event(self, event: Event, organizer: MarketplaceUser) -> None:
        promotion_service.create_voucher(event.pk, organizer, **_voucher_kwargs())

        with pytest.raises(ValidationError):
            promotion_service.create_voucher(event.pk, organizer, **_voucher_kwargs(code="EARLY-BIRD"))


class TestCoupons:
    def test_issue_generates_code(self, buyer: MarketplaceUser) -> None:
        coupon = promotion_service.issue_coupon(buyer, 5_000)

        assert coupon.code.startswith("CPN-")
        assert coupon.expires_at > timezone.now() + timedelta(days=89)

    def test_usable_excludes_used_expired_and_held(
        self, buyer: MarketplaceUser, coupon: Coupon, pending_transaction: Transaction
    ) -> None:
        free = promotion_service.issue_coupon(buyer, 1_000, code="FREE")
        promotion_service.issue_coupon(buyer, 1_000, code="OLD", expires_at=timezone.now() - timedelta(days=1))
        Transaction.objects.filter(pk=pending_transaction.pk).update(coupon=coupon)

        assert list(promotion_service.usable_coupons(buyer)) == [free]
