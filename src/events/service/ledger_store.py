"""Persistence for the order lifecycle.

The lifecycle only talks to storage through ``LedgerStore``. Every mutation
the lifecycle relies on for correctness is a single conditional UPDATE, so the
database decides the winner of any race:

- status transitions are compare-and-swap on the current status,
- seat reservation decrements only while enough seats remain,
- check-in flips ``checked_in`` only while it is still false,
- voucher and coupon consumption only succeed while uses are left.
"""

from collections.abc import Sequence
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol
from uuid import UUID

import structlog
from django.db.models import F, Q

from accounts.models import MarketplaceUser
from events.exceptions import NotFound, OutOfStock, TokenNotFound
from events.models import Coupon, Event, Ticket, TicketType, Transaction, Voucher
from events.service import points_service

if TYPE_CHECKING:
    from events.models import PointsLedgerEntry

logger = structlog.get_logger(__name__)


class LedgerStore(Protocol):
    """Storage operations the transaction lifecycle depends on.

    Implementations must run inside the caller's database transaction; none of
    them commits on its own.
    """

    def get_event(self, event_id: UUID) -> Event:
        """Raises NotFound."""
        ...

    def get_ticket_type(self, event: Event, ticket_type_id: UUID) -> TicketType:
        """Raises NotFound when the ticket type does not belong to the event."""
        ...

    def get_transaction(self, transaction_id: UUID) -> Transaction:
        """Fresh read of the persisted row. Raises NotFound."""
        ...

    def insert_transaction(self, **fields: Any) -> Transaction: ...

    def transition(
        self,
        transaction_id: UUID,
        *,
        expected: str,
        to: str,
        now: datetime,
        condition: Q | None = None,
        **changes: Any,
    ) -> bool:
        """Move ``expected`` to ``to`` if the row still is ``expected``.

        Returns:
            False when another writer got there first; nothing was changed.
        """
        ...

    def reserve_seats(self, ticket_type_id: UUID, quantity: int) -> None:
        """Raises OutOfStock if fewer than ``quantity`` seats remain."""
        ...

    def release_seats(self, ticket_type_id: UUID, quantity: int) -> None: ...

    def lock_voucher(self, event: Event, code: str) -> Voucher | None: ...

    def held_voucher_uses(self, voucher: Voucher) -> int: ...

    def consume_voucher_use(self, voucher_id: UUID) -> bool: ...

    def lock_coupon(self, code: str) -> Coupon | None: ...

    def coupon_is_held(self, coupon: Coupon) -> bool: ...

    def consume_coupon(self, coupon_id: UUID, transaction_id: UUID, now: datetime) -> bool: ...

    def lock_points_account(self, user: MarketplaceUser) -> None:
        """Serialize point holds of one user."""
        ...

    def available_points(self, user: MarketplaceUser) -> int: ...

    def debit_points(self, user: MarketplaceUser, amount: int, txn: Transaction) -> "PointsLedgerEntry":
        """Raises InsufficientPoints."""
        ...

    def mint_tickets(self, txn: Transaction, attendees: Sequence[tuple[str, str]]) -> list[Ticket]: ...

    def tickets_for(self, txn: Transaction) -> list[Ticket]: ...

    def mark_checked_in(self, qr_token: str, now: datetime) -> bool:
        """True only for the caller that flipped ``checked_in``."""
        ...

    def get_ticket_by_token(self, qr_token: str) -> Ticket:
        """Raises TokenNotFound."""
        ...

    def expirable_transaction_ids(self, now: datetime) -> list[UUID]: ...

    def unconfirmed_transaction_ids(self, submitted_before: datetime) -> list[UUID]: ...


class DjangoLedgerStore:
    """LedgerStore backed by the Django ORM."""

    def get_event(self, event_id: UUID) -> Event:
        try:
            return Event.objects.select_related("organizer").get(pk=event_id)
        except Event.DoesNotExist as e:
            raise NotFound("Event not found.") from e

    def get_ticket_type(self, event: Event, ticket_type_id: UUID) -> TicketType:
        try:
            return TicketType.objects.get(pk=ticket_type_id, event=event)
        except TicketType.DoesNotExist as e:
            raise NotFound("Ticket type not found for this event.") from e

    def get_transaction(self, transaction_id: UUID) -> Transaction:
        try:
            return Transaction.objects.with_related().select_related("event__organizer").get(pk=transaction_id)
        except Transaction.DoesNotExist as e:
            raise NotFound("Transaction not found.") from e

    def insert_transaction(self, **fields: Any) -> Transaction:
        return Transaction.objects.create(**fields)

    def transition(
        self,
        transaction_id: UUID,
        *,
        expected: str,
        to: str,
        now: datetime,
        condition: Q | None = None,
        **changes: Any,
    ) -> bool:
        qs = Transaction.objects.filter(pk=transaction_id, status=expected)
        if condition is not None:
            qs = qs.filter(condition)
        return qs.update(status=to, updated_at=now, **changes) == 1

    def reserve_seats(self, ticket_type_id: UUID, quantity: int) -> None:
        updated = TicketType.objects.filter(pk=ticket_type_id, seats_remaining__gte=quantity).update(
            seats_remaining=F("seats_remaining") - quantity
        )
        if not updated:
            raise OutOfStock()

    def release_seats(self, ticket_type_id: UUID, quantity: int) -> None:
        updated = TicketType.objects.filter(
            pk=ticket_type_id, seats_remaining__lte=F("total_seats") - quantity
        ).update(seats_remaining=F("seats_remaining") + quantity)
        if not updated:
            # Capacity is never exceeded; a skipped release points at a double release
            logger.warning("seat_release_skipped", ticket_type_id=str(ticket_type_id), quantity=quantity)

    def lock_voucher(self, event: Event, code: str) -> Voucher | None:
        # Looked up across events so a code for another event is reported as such
        candidates = list(Voucher.objects.select_for_update().filter(code=code.strip().upper()))
        for voucher in candidates:
            if voucher.event_id == event.pk:
                return voucher
        return candidates[0] if candidates else None

    def held_voucher_uses(self, voucher: Voucher) -> int:
        return Transaction.objects.active().filter(voucher=voucher).count()

    def consume_voucher_use(self, voucher_id: UUID) -> bool:
        return (
            Voucher.objects.filter(pk=voucher_id, used_count__lt=F("usage_limit")).update(
                used_count=F("used_count") + 1
            )
            == 1
        )

    def lock_coupon(self, code: str) -> Coupon | None:
        return Coupon.objects.select_for_update().filter(code=code.strip().upper()).first()

    def coupon_is_held(self, coupon: Coupon) -> bool:
        return Transaction.objects.active().filter(coupon=coupon).exists()

    def consume_coupon(self, coupon_id: UUID, transaction_id: UUID, now: datetime) -> bool:
        return (
            Coupon.objects.filter(pk=coupon_id, used_at__isnull=True).update(
                used_at=now, used_by_transaction_id=transaction_id, updated_at=now
            )
            == 1
        )

    def lock_points_account(self, user: MarketplaceUser) -> None:
        MarketplaceUser.objects.select_for_update().filter(pk=user.pk).first()

    def available_points(self, user: MarketplaceUser) -> int:
        return points_service.available_points(user)

    def debit_points(self, user: MarketplaceUser, amount: int, txn: Transaction) -> "PointsLedgerEntry":
        return points_service.consume_points(user, amount, txn)

    def mint_tickets(self, txn: Transaction, attendees: Sequence[tuple[str, str]]) -> list[Ticket]:
        tickets = []
        for name, email in attendees:
            ticket = Ticket(transaction=txn, attendee_name=name, attendee_email=email)
            ticket.save()
            tickets.append(ticket)
        return tickets

    def tickets_for(self, txn: Transaction) -> list[Ticket]:
        return list(Ticket.objects.with_event_details().filter(transaction=txn))

    def mark_checked_in(self, qr_token: str, now: datetime) -> bool:
        return (
            Ticket.objects.filter(qr_token=qr_token, checked_in=False).update(
                checked_in=True, checked_in_at=now, updated_at=now
            )
            == 1
        )

    def get_ticket_by_token(self, qr_token: str) -> Ticket:
        try:
            return Ticket.objects.with_event_details().get(qr_token=qr_token)
        except Ticket.DoesNotExist as e:
            raise TokenNotFound() from e

    def expirable_transaction_ids(self, now: datetime) -> list[UUID]:
        return list(
            Transaction.objects.filter(status=Transaction.Status.WAITING_PAYMENT, expired_at__lt=now).values_list(
                "pk", flat=True
            )
        )

    def unconfirmed_transaction_ids(self, submitted_before: datetime) -> list[UUID]:
        return list(
            Transaction.objects.filter(
                status=Transaction.Status.WAITING_CONFIRMATION, submitted_at__lt=submitted_before
            ).values_list("pk", flat=True)
        )
