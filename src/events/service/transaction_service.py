"""The transaction lifecycle.

States::

    waiting_payment --submit_proof--> waiting_confirmation --confirm--> done
    waiting_payment --sweep_expired--> expired
    waiting_payment --cancel--> cancelled
    waiting_confirmation --reject--> rejected

Every transition is a compare-and-swap on the persisted status performed by
the ledger store, inside one database transaction together with its side
effects. A caller that loses a race gets ``InvalidState`` (or ``Expired``)
and the winner's result is left untouched.

Seats are taken when the transaction is created and given back on every
escape transition. Points, voucher uses and coupons are only held while the
transaction is pending and are consumed on confirmation.
"""

import typing as t
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from uuid import UUID

import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import transaction
from django.db.models import Q, QuerySet
from django.utils import timezone

from accounts.models import MarketplaceUser
from events.exceptions import (
    EventNotOnSale,
    Expired,
    Forbidden,
    InvalidCart,
    InvalidCoupon,
    InvalidState,
    InvalidVoucher,
    NotFound,
    NotReady,
)
from events.models import Ticket, Transaction
from events.service import pricing
from events.service.ledger_store import DjangoLedgerStore, LedgerStore
from notifications.enums import NotificationType
from notifications.service.dispatcher import notify_on_commit

logger = structlog.get_logger(__name__)

AUTO_REJECTION_REASON = "Not confirmed by the organizer in time."

Status = Transaction.Status


@dataclass(frozen=True)
class Attendee:
    name: str
    email: str = ""


@dataclass(frozen=True)
class Cart:
    """What the buyer asks for. Prices are never taken from the client."""

    ticket_type_id: UUID
    quantity: int
    voucher_code: str | None = None
    coupon_code: str | None = None
    points: int = 0
    attendees: tuple[Attendee, ...] = field(default_factory=tuple)


def validate_cart(cart: Cart) -> None:
    """Reject malformed carts before anything is touched.

    Raises:
        InvalidCart: on a quantity outside the allowed range, more attendees
            than seats, a negative points amount or a malformed attendee email.
    """
    if not 1 <= cart.quantity <= settings.MAX_TICKETS_PER_TRANSACTION:
        raise InvalidCart(f"Quantity must be between 1 and {settings.MAX_TICKETS_PER_TRANSACTION}.")
    if len(cart.attendees) > cart.quantity:
        raise InvalidCart("There are more attendees than tickets.")
    if cart.points < 0:
        raise InvalidCart("Points to redeem cannot be negative.")
    for attendee in cart.attendees:
        if not attendee.email:
            continue
        try:
            validate_email(attendee.email)
        except ValidationError:
            raise InvalidCart(f"{attendee.email!r} is not a valid email address.") from None


def _notification_context(txn: Transaction, **extra: t.Any) -> dict[str, t.Any]:
    return {
        "transaction_id": str(txn.pk),
        "event_id": str(txn.event_id),
        "event_name": txn.event.name,
        "ticket_type_name": txn.ticket_type.name,
        "quantity": txn.quantity,
        "final_price": txn.final_price,
        "currency": settings.DEFAULT_CURRENCY,
        "status": txn.status,
        **extra,
    }


class TransactionLifecycle:
    def __init__(self, store: LedgerStore | None = None) -> None:
        self.store: LedgerStore = store or DjangoLedgerStore()

    # ---- reads ----

    def get(self, transaction_id: UUID, user: MarketplaceUser) -> Transaction:
        """The transaction as persisted, for its buyer or the event's organizer."""
        txn = self.store.get_transaction(transaction_id)
        if not self._can_view(txn, user):
            raise NotFound("Transaction not found.")
        return txn

    def tickets(self, transaction_id: UUID, user: MarketplaceUser) -> list[Ticket]:
        txn = self.get(transaction_id, user)
        if txn.status != Status.DONE:
            raise NotReady()
        return self.store.tickets_for(txn)

    # ---- transitions ----

    def create(self, buyer: MarketplaceUser, event_id: UUID, cart: Cart) -> Transaction:
        """Reserve seats, price the cart and open the payment window.

        Raises:
            InvalidCart, NotFound, EventNotOnSale, OutOfStock, InvalidVoucher,
            InvalidCoupon, InsufficientPoints. Nothing is persisted on failure.
        """
        validate_cart(cart)
        now = timezone.now()
        with transaction.atomic():
            event = self.store.get_event(event_id)
            if not event.is_on_sale:
                raise EventNotOnSale()
            ticket_type = self.store.get_ticket_type(event, cart.ticket_type_id)

            self.store.reserve_seats(ticket_type.pk, cart.quantity)

            voucher = terms = None
            if cart.voucher_code:
                voucher = self.store.lock_voucher(event, cart.voucher_code)
                if voucher is None:
                    raise InvalidVoucher("Unknown voucher code.")
                terms = pricing.ensure_voucher_usable(voucher, event, now, self.store.held_voucher_uses(voucher))

            coupon = coupon_amount = None
            if cart.coupon_code:
                coupon = self.store.lock_coupon(cart.coupon_code)
                if coupon is None:
                    raise InvalidCoupon("Unknown coupon code.")
                coupon_amount = pricing.ensure_coupon_usable(coupon, buyer, now, self.store.coupon_is_held(coupon))

            points_available = 0
            if cart.points:
                self.store.lock_points_account(buyer)
                points_available = self.store.available_points(buyer)
                pricing.ensure_points_available(cart.points, points_available)

            breakdown = pricing.price(
                ticket_type.unit_price * cart.quantity,
                voucher=terms,
                coupon_amount=coupon_amount,
                points_requested=cart.points,
                points_available=points_available,
            )

            attendees = [{"name": a.name, "email": a.email} for a in cart.attendees]
            attendees += [
                {"name": buyer.display_name, "email": buyer.email} for _ in range(cart.quantity - len(attendees))
            ]

            txn = self.store.insert_transaction(
                buyer=buyer,
                event=event,
                ticket_type=ticket_type,
                quantity=cart.quantity,
                attendees=attendees,
                unit_price=ticket_type.unit_price,
                subtotal=breakdown.subtotal,
                voucher=voucher,
                voucher_discount=breakdown.voucher_discount,
                coupon=coupon,
                coupon_discount=breakdown.coupon_discount,
                points_used=breakdown.points_used,
                final_price=breakdown.final_price,
                status=Status.WAITING_PAYMENT,
                expired_at=now + timedelta(minutes=settings.TRANSACTION_PAYMENT_WINDOW_MINUTES),
            )
            notify_on_commit(
                type(self),
                NotificationType.TRANSACTION_CREATED,
                buyer,
                _notification_context(txn, expired_at=txn.expired_at.isoformat()),
            )

        logger.info(
            "transaction_created",
            transaction_id=str(txn.pk),
            event_id=str(event.pk),
            buyer_id=str(buyer.pk),
            quantity=txn.quantity,
            final_price=txn.final_price,
        )
        return txn

    def submit_proof(self, transaction_id: UUID, buyer: MarketplaceUser, proof: str) -> Transaction:
        """Attach the payment proof and hand the transaction to the organizer.

        The deadline is part of the conditional update, so a proof that races
        the expiry sweep either lands before it or not at all.

        Raises:
            Expired: the payment window has closed (the transaction is expired
                on the spot if the sweep has not done so yet).
            InvalidState: the transaction is no longer waiting for payment.
        """
        txn = self.store.get_transaction(transaction_id)
        if txn.buyer_id != buyer.pk:
            raise Forbidden("Only the buyer can submit a payment proof.")

        now = timezone.now()
        with transaction.atomic():
            submitted = self.store.transition(
                transaction_id,
                expected=Status.WAITING_PAYMENT,
                to=Status.WAITING_CONFIRMATION,
                now=now,
                condition=Q(expired_at__gt=now),
                payment_proof=proof,
                submitted_at=now,
            )
            if submitted:
                txn = self.store.get_transaction(transaction_id)
                notify_on_commit(
                    type(self),
                    NotificationType.PAYMENT_PROOF_SUBMITTED,
                    txn.event.organizer,
                    _notification_context(txn, buyer_name=buyer.display_name),
                )

        if submitted:
            logger.info("payment_proof_submitted", transaction_id=str(transaction_id))
            return txn

        current = self.store.get_transaction(transaction_id)
        if current.status == Status.WAITING_PAYMENT and current.expired_at <= now:
            self._expire(transaction_id, now, condition=Q(expired_at__lte=now))
            raise Expired()
        if current.status == Status.EXPIRED:
            raise Expired()
        raise InvalidState(f"Cannot submit a payment proof for a transaction that is {current.status}.")

    def confirm(self, transaction_id: UUID, organizer: MarketplaceUser) -> Transaction:
        """Settle the transaction: mint tickets and consume held discounts.

        Raises:
            InvalidState: not waiting for confirmation (confirming twice
                included; no tickets are minted again).
            InsufficientPoints, InvalidVoucher, InvalidCoupon: a held discount
                can no longer be consumed; nothing changes.
        """
        txn = self.store.get_transaction(transaction_id)
        self._ensure_organizer(txn, organizer)

        now = timezone.now()
        with transaction.atomic():
            if not self.store.transition(
                transaction_id,
                expected=Status.WAITING_CONFIRMATION,
                to=Status.DONE,
                now=now,
                confirmed_at=now,
            ):
                raise self._conflict(transaction_id, "confirm")
            txn = self.store.get_transaction(transaction_id)

            if txn.points_used:
                self.store.lock_points_account(txn.buyer)
                self.store.debit_points(txn.buyer, txn.points_used, txn)
            if txn.voucher_id and not self.store.consume_voucher_use(txn.voucher_id):
                raise InvalidVoucher("The voucher has reached its usage limit.")
            if txn.coupon_id and not self.store.consume_coupon(txn.coupon_id, txn.pk, now):
                raise InvalidCoupon("The coupon has already been used.")

            tickets = self.store.mint_tickets(txn, [(a["name"], a.get("email", "")) for a in txn.attendees])
            notify_on_commit(
                type(self),
                NotificationType.TRANSACTION_CONFIRMED,
                txn.buyer,
                _notification_context(txn, ticket_count=len(tickets)),
            )

        logger.info("transaction_confirmed", transaction_id=str(transaction_id), tickets=len(tickets))
        return txn

    def reject(self, transaction_id: UUID, organizer: MarketplaceUser, reason: str = "") -> Transaction:
        """Refuse the payment proof and give the seats back.

        Raises:
            InvalidState: not waiting for confirmation.
        """
        txn = self.store.get_transaction(transaction_id)
        self._ensure_organizer(txn, organizer)
        return self._reject(transaction_id, reason, timezone.now())

    def cancel(self, transaction_id: UUID, buyer: MarketplaceUser) -> Transaction:
        """Withdraw an unpaid transaction and give the seats back.

        Raises:
            InvalidState: the transaction is no longer waiting for payment.
        """
        txn = self.store.get_transaction(transaction_id)
        if txn.buyer_id != buyer.pk:
            raise Forbidden("Only the buyer can cancel this transaction.")

        now = timezone.now()
        with transaction.atomic():
            if not self.store.transition(
                transaction_id,
                expected=Status.WAITING_PAYMENT,
                to=Status.CANCELLED,
                now=now,
                cancelled_at=now,
            ):
                raise self._conflict(transaction_id, "cancel")
            self.store.release_seats(txn.ticket_type_id, txn.quantity)
            txn = self.store.get_transaction(transaction_id)
            notify_on_commit(
                type(self), NotificationType.TRANSACTION_CANCELLED, txn.buyer, _notification_context(txn)
            )

        logger.info("transaction_cancelled", transaction_id=str(transaction_id))
        return txn

    def sweep_expired(self) -> list[UUID]:
        """Expire every unpaid transaction past its deadline.

        Idempotent, and safe to run next to ``submit_proof`` on the same rows:
        each row is moved by its own conditional update.

        Returns:
            Ids of the transactions this call expired.
        """
        now = timezone.now()
        expired = [
            pk
            for pk in self.store.expirable_transaction_ids(now)
            if self._expire(pk, now, condition=Q(expired_at__lt=now))
        ]
        if expired:
            logger.info("expired_transactions_swept", count=len(expired))
        return expired

    def sweep_unconfirmed(self) -> list[UUID]:
        """Reject transactions the organizer left unconfirmed for too long.

        Returns:
            Ids of the transactions this call rejected.
        """
        window_days = settings.TRANSACTION_CONFIRMATION_WINDOW_DAYS
        if not window_days:
            return []
        now = timezone.now()
        rejected = []
        for pk in self.store.unconfirmed_transaction_ids(now - timedelta(days=window_days)):
            try:
                self._reject(pk, AUTO_REJECTION_REASON, now)
            except InvalidState:
                # settled by the organizer in the meantime
                continue
            rejected.append(pk)
        if rejected:
            logger.info("unconfirmed_transactions_rejected", count=len(rejected))
        return rejected

    # ---- helpers ----

    def _expire(self, transaction_id: UUID, now: datetime, condition: Q) -> bool:
        with transaction.atomic():
            if not self.store.transition(
                transaction_id,
                expected=Status.WAITING_PAYMENT,
                to=Status.EXPIRED,
                now=now,
                condition=condition,
            ):
                return False
            txn = self.store.get_transaction(transaction_id)
            self.store.release_seats(txn.ticket_type_id, txn.quantity)
            notify_on_commit(
                type(self), NotificationType.TRANSACTION_EXPIRED, txn.buyer, _notification_context(txn)
            )
        logger.info("transaction_expired", transaction_id=str(transaction_id))
        return True

    def _reject(self, transaction_id: UUID, reason: str, now: datetime) -> Transaction:
        with transaction.atomic():
            if not self.store.transition(
                transaction_id,
                expected=Status.WAITING_CONFIRMATION,
                to=Status.REJECTED,
                now=now,
                rejected_at=now,
                rejection_reason=reason,
            ):
                raise self._conflict(transaction_id, "reject")
            txn = self.store.get_transaction(transaction_id)
            self.store.release_seats(txn.ticket_type_id, txn.quantity)
            notify_on_commit(
                type(self),
                NotificationType.TRANSACTION_REJECTED,
                txn.buyer,
                _notification_context(txn, reason=reason),
            )
        logger.info(
            "transaction_rejected", transaction_id=str(transaction_id), automatic=reason == AUTO_REJECTION_REASON
        )
        return txn

    def _conflict(self, transaction_id: UUID, action: str) -> InvalidState:
        current = self.store.get_transaction(transaction_id)
        logger.info(
            "transaction_transition_lost", transaction_id=str(transaction_id), action=action, status=current.status
        )
        return InvalidState(f"Cannot {action} a transaction that is {current.status}.")

    @staticmethod
    def _ensure_organizer(txn: Transaction, user: MarketplaceUser) -> None:
        if txn.event.organizer_id != user.pk:
            raise Forbidden("Only the event organizer can settle this transaction.")

    @staticmethod
    def _can_view(txn: Transaction, user: MarketplaceUser) -> bool:
        return user.is_staff or txn.buyer_id == user.pk or txn.event.organizer_id == user.pk


def transactions_for_buyer(user: MarketplaceUser) -> QuerySet[Transaction]:
    return Transaction.objects.for_buyer(user).with_related().order_by("-created_at")


def transactions_for_organizer(user: MarketplaceUser, status: str | None = None) -> QuerySet[Transaction]:
    qs = Transaction.objects.for_organizer(user).with_related().order_by("-created_at")
    if status:
        qs = qs.filter(status=status)
    return qs
