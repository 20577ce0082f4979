import typing as t
from datetime import datetime, timedelta

import pytest
from django.utils import timezone

from accounts.models import MarketplaceUser
from events.models import Coupon, Event, TicketType, Transaction, Voucher
from events.service import points_service
from events.service.transaction_service import Attendee, Cart, TransactionLifecycle


@pytest.fixture
def event(organizer: MarketplaceUser, next_week: datetime) -> Event:
    return Event.objects.create(
        organizer=organizer,
        name="Jazz Night",
        location="Jakarta",
        start=next_week,
        end=next_week + timedelta(hours=3),
        status=Event.EventStatus.PUBLISHED,
    )


@pytest.fixture
def other_event(organizer: MarketplaceUser, next_week: datetime) -> Event:
    return Event.objects.create(
        organizer=organizer,
        name="Rock Night",
        start=next_week,
        status=Event.EventStatus.PUBLISHED,
    )


@pytest.fixture
def ticket_type(event: Event) -> TicketType:
    return TicketType.objects.create(event=event, name="Regular", unit_price=50_000, total_seats=10)


@pytest.fixture
def percent_voucher(event: Event) -> Voucher:
    return Voucher.objects.create(
        event=event,
        code="JAZZ10",
        discount_type=Voucher.DiscountType.PERCENTAGE,
        discount_amount=10,
        usage_limit=5,
        valid_from=timezone.now() - timedelta(days=1),
        valid_until=timezone.now() + timedelta(days=30),
    )


@pytest.fixture
def coupon(buyer: MarketplaceUser) -> Coupon:
    return Coupon.objects.create(
        owner=buyer,
        code="WELCOME5K",
        discount_amount=5_000,
        expires_at=timezone.now() + timedelta(days=30),
    )


@pytest.fixture
def buyer_points(buyer: MarketplaceUser) -> int:
    points_service.grant_points(buyer, 50_000, description="Referral reward")
    return 50_000


@pytest.fixture
def lifecycle() -> TransactionLifecycle:
    return TransactionLifecycle()


@pytest.fixture
def cart_factory(ticket_type: TicketType) -> t.Callable[..., Cart]:
    def make(quantity: int = 1, **kwargs: t.Any) -> Cart:
        return Cart(ticket_type_id=ticket_type.pk, quantity=quantity, **kwargs)

    return make


@pytest.fixture
def pending_transaction(
    lifecycle: TransactionLifecycle, buyer: MarketplaceUser, event: Event, cart_factory: t.Callable[..., Cart]
) -> Transaction:
    """A transaction for two seats, waiting for payment."""
    return lifecycle.create(
        buyer, event.pk, cart_factory(2, attendees=(Attendee(name="Alice", email="alice@example.com"),))
    )


@pytest.fixture
def submitted_transaction(
    lifecycle: TransactionLifecycle, buyer: MarketplaceUser, pending_transaction: Transaction
) -> Transaction:
    """A transaction waiting for the organizer's decision."""
    return lifecycle.submit_proof(pending_transaction.pk, buyer, "proofs/transfer-001.jpg")


@pytest.fixture
def done_transaction(
    lifecycle: TransactionLifecycle, organizer: MarketplaceUser, submitted_transaction: Transaction
) -> Transaction:
    return lifecycle.confirm(submitted_transaction.pk, organizer)
