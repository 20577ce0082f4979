"""Venue check-in by QR token.

A token checks in exactly once. The first scan flips ``checked_in`` with a
conditional update; every later scan, concurrent or not, is told the ticket
was already used and gets the original check-in time back. Repeat scans are
an expected outcome, not an error.
"""

from dataclasses import dataclass

import structlog
from django.db.models import QuerySet
from django.utils import timezone

from accounts.models import MarketplaceUser
from events.models import Ticket
from events.service.ledger_store import DjangoLedgerStore, LedgerStore

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CheckInResult:
    success: bool
    already_used: bool
    ticket: Ticket


def check_in(qr_token: str, store: LedgerStore | None = None) -> CheckInResult:
    """Check in the ticket carrying ``qr_token``.

    Raises:
        TokenNotFound: no ticket carries this token.
    """
    store = store or DjangoLedgerStore()
    # resolve first so an unknown token never looks like a repeat scan
    ticket = store.get_ticket_by_token(qr_token)
    if ticket.checked_in:
        return _already_used(ticket)

    won = store.mark_checked_in(qr_token, timezone.now())
    ticket = store.get_ticket_by_token(qr_token)
    if not won:
        return _already_used(ticket)

    logger.info(
        "ticket_checked_in",
        ticket_id=str(ticket.pk),
        transaction_id=str(ticket.transaction_id),
        event_id=str(ticket.transaction.event_id),
    )
    return CheckInResult(success=True, already_used=False, ticket=ticket)


def _already_used(ticket: Ticket) -> CheckInResult:
    logger.info("ticket_check_in_repeated", ticket_id=str(ticket.pk), checked_in_at=str(ticket.checked_in_at))
    return CheckInResult(success=False, already_used=True, ticket=ticket)


def attendees_for_organizer(user: MarketplaceUser) -> QuerySet[Ticket]:
    """Every minted ticket across the events ``user`` organizes, one row per seat."""
    return (
        Ticket.objects.for_organizer(user)
        .with_event_details()
        .select_related("transaction__buyer")
        .order_by("transaction__event__start", "attendee_name", "created_at")
    )
