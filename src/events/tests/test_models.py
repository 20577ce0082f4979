"""Tests for model-level rules of the order lifecycle."""

from datetime import timedelta

import pytest
from django.core.exceptions import ValidationError
from django.utils import timezone

from events.models import Coupon, Event, TicketType, Transaction, Voucher

pytestmark = pytest.mark.django_db


class TestTicketType:
    def test_starts_fully_available(self, ticket_type: TicketType) -> None:
        assert ticket_type.seats_remaining == ticket_type.total_seats == 10

    def test_remaining_cannot_exceed_total(self, ticket_type: TicketType) -> None:
        ticket_type.seats_remaining = 11

        with pytest.raises(ValidationError):
            ticket_type.save()


class TestVoucherStatus:
    def test_statuses(self, percent_voucher: Voucher) -> None:
        now = timezone.now()

        assert percent_voucher.status_at(now) == Voucher.VoucherStatus.ACTIVE
        assert percent_voucher.status_at(now - timedelta(days=2)) == Voucher.VoucherStatus.SCHEDULED
        assert percent_voucher.status_at(now + timedelta(days=31)) == Voucher.VoucherStatus.EXPIRED

        percent_voucher.used_count = percent_voucher.usage_limit
        assert percent_voucher.status_at(now) == Voucher.VoucherStatus.EXHAUSTED

    def test_percentage_range(self, event: Event) -> None:
        voucher = Voucher(
            event=event,
            code="too-much",
            discount_type=Voucher.DiscountType.PERCENTAGE,
            discount_amount=101,
            usage_limit=1,
            valid_from=timezone.now(),
            valid_until=timezone.now() + timedelta(days=1),
        )

        with pytest.raises(ValidationError):
            voucher.save()


def test_coupon_expiring_soon(coupon: Coupon) -> None:
    assert coupon.is_expiring_soon is False

    coupon.expires_at = timezone.now() + timedelta(days=2)
    assert coupon.is_expiring_soon is True


def test_seconds_remaining_only_while_waiting_for_payment(pending_transaction: Transaction) -> None:
    assert 0 < pending_transaction.seconds_remaining <= 7200

    pending_transaction.status = Transaction.Status.WAITING_CONFIRMATION
    assert pending_transaction.seconds_remaining == 0
    assert pending_transaction.is_terminal is False

    pending_transaction.status = Transaction.Status.EXPIRED
    assert pending_transaction.is_terminal is True
