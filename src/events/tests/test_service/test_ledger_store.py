"""Tests for the seat bookkeeping in the ledger store."""

from unittest import mock

import pytest

from events.models import TicketType
from events.service.ledger_store import DjangoLedgerStore

pytestmark = pytest.mark.django_db


@pytest.fixture
def store() -> DjangoLedgerStore:
    return DjangoLedgerStore()


def test_release_gives_seats_back(store: DjangoLedgerStore, ticket_type: TicketType) -> None:
    store.reserve_seats(ticket_type.pk, 3)

    store.release_seats(ticket_type.pk, 3)

    ticket_type.refresh_from_db()
    assert ticket_type.seats_remaining == 10


@mock.patch("events.service.ledger_store.logger")
def test_release_beyond_capacity_is_skipped_and_logged(
    mock_logger: mock.MagicMock, store: DjangoLedgerStore, ticket_type: TicketType
) -> None:
    store.reserve_seats(ticket_type.pk, 2)

    store.release_seats(ticket_type.pk, 3)

    ticket_type.refresh_from_db()
    assert ticket_type.seats_remaining == 8
    mock_logger.warning.assert_called_once_with(
        "seat_release_skipped", ticket_type_id=str(ticket_type.pk), quantity=3
    )


@mock.patch("events.service.ledger_store.logger")
def test_normal_release_does_not_warn(
    mock_logger: mock.MagicMock, store: DjangoLedgerStore, ticket_type: TicketType
) -> None:
    store.reserve_seats(ticket_type.pk, 2)

    store.release_seats(ticket_type.pk, 2)

    mock_logger.warning.assert_not_called()
