"""Tests for the transaction endpoints."""

import typing as t
from datetime import timedelta

import orjson
import pytest
from django.test.client import Client
from django.urls import reverse
from freezegun import freeze_time

from accounts.models import MarketplaceUser
from conftest import auth_client
from events.models import Coupon, Event, Ticket, TicketType, Transaction, Voucher

pytestmark = pytest.mark.django_db


def _put(client: Client, url: str, payload: dict[str, t.Any] | None = None) -> t.Any:
    return client.put(url, data=orjson.dumps(payload or {}), content_type="application/json")


class TestCreateTransaction:
    """Tests for POST /events/{event_id}/transactions."""

    def test_create_with_discounts(
        self,
        buyer_client: Client,
        event: Event,
        ticket_type: TicketType,
        percent_voucher: Voucher,
        coupon: Coupon,
        buyer_points: int,
    ) -> None:
        url = reverse("api:create_transaction", kwargs={"event_id": event.pk})
        payload = {
            "ticket_type_id": str(ticket_type.pk),
            "quantity": 2,
            "voucher_code": "JAZZ10",
            "coupon_code": "WELCOME5K",
            "points": 20_000,
            "attendees": [{"name": "Alice", "email": "alice@example.com"}],
        }

        response = buyer_client.post(url, data=orjson.dumps(payload), content_type="application/json")

        assert response.status_code == 201, response.content
        data = response.json()
        assert data["status"] == "waiting_payment"
        assert data["subtotal"] == 100_000
        assert data["final_price"] == 65_000
        assert data["currency"] == "IDR"
        assert data["voucher_code"] == "JAZZ10"
        assert data["coupon_code"] == "WELCOME5K"
        assert data["event_name"] == "Jazz Night"
        assert 0 < data["seconds_remaining"] <= 7200

    def test_client_prices_are_ignored(self, buyer_client: Client, event: Event, ticket_type: TicketType) -> None:
        url = reverse("api:create_transaction", kwargs={"event_id": event.pk})
        payload = {"ticket_type_id": str(ticket_type.pk), "quantity": 1, "final_price": 1, "unit_price": 1}

        response = buyer_client.post(url, data=orjson.dumps(payload), content_type="application/json")

        assert response.status_code == 201
        assert response.json()["final_price"] == 50_000

    def test_out_of_stock(self, buyer_client: Client, event: Event, ticket_type: TicketType) -> None:
        TicketType.objects.filter(pk=ticket_type.pk).update(seats_remaining=1)
        url = reverse("api:create_transaction", kwargs={"event_id": event.pk})
        payload = {"ticket_type_id": str(ticket_type.pk), "quantity": 2}

        response = buyer_client.post(url, data=orjson.dumps(payload), content_type="application/json")

        assert response.status_code == 409
        assert response.json()["code"] == "OUT_OF_STOCK"

    def test_invalid_voucher(self, buyer_client: Client, event: Event, ticket_type: TicketType) -> None:
        url = reverse("api:create_transaction", kwargs={"event_id": event.pk})
        payload = {"ticket_type_id": str(ticket_type.pk), "quantity": 1, "voucher_code": "NOPE"}

        response = buyer_client.post(url, data=orjson.dumps(payload), content_type="application/json")

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_VOUCHER"

    def test_insufficient_points(self, buyer_client: Client, event: Event, ticket_type: TicketType) -> None:
        url = reverse("api:create_transaction", kwargs={"event_id": event.pk})
        payload = {"ticket_type_id": str(ticket_type.pk), "quantity": 1, "points": 10}

        response = buyer_client.post(url, data=orjson.dumps(payload), content_type="application/json")

        assert response.status_code == 400
        assert response.json()["code"] == "INSUFFICIENT_POINTS"

    def test_malformed_attendee_email(self, buyer_client: Client, event: Event, ticket_type: TicketType) -> None:
        url = reverse("api:create_transaction", kwargs={"event_id": event.pk})
        payload = {
            "ticket_type_id": str(ticket_type.pk),
            "quantity": 1,
            "attendees": [{"name": "Alice", "email": "not-an-email"}],
        }

        response = buyer_client.post(url, data=orjson.dumps(payload), content_type="application/json")

        assert response.status_code == 422
        assert not Transaction.objects.exists()
        ticket_type.refresh_from_db()
        assert ticket_type.seats_remaining == 10

    def test_requires_authentication(self, client: Client, event: Event, ticket_type: TicketType) -> None:
        url = reverse("api:create_transaction", kwargs={"event_id": event.pk})
        payload = {"ticket_type_id": str(ticket_type.pk), "quantity": 1}

        response = client.post(url, data=orjson.dumps(payload), content_type="application/json")

        assert response.status_code == 401


class TestReadTransaction:
    """Tests for GET /transactions/{id} and its tickets."""

    def test_buyer_polls_status(self, buyer_client: Client, pending_transaction: Transaction) -> None:
        url = reverse("api:get_transaction", kwargs={"transaction_id": pending_transaction.pk})

        response = buyer_client.get(url)

        assert response.status_code == 200
        assert response.json()["id"] == str(pending_transaction.pk)

    def test_countdown_is_zero_after_deadline(self, buyer: MarketplaceUser, pending_transaction: Transaction) -> None:
        url = reverse("api:get_transaction", kwargs={"transaction_id": pending_transaction.pk})

        with freeze_time(pending_transaction.expired_at + timedelta(minutes=1)):
            response = auth_client(buyer).get(url)

        assert response.json()["seconds_remaining"] == 0

    def test_stranger_gets_not_found(self, other_client: Client, pending_transaction: Transaction) -> None:
        url = reverse("api:get_transaction", kwargs={"transaction_id": pending_transaction.pk})

        response = other_client.get(url)

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_tickets_not_ready(self, buyer_client: Client, submitted_transaction: Transaction) -> None:
        url = reverse("api:get_transaction_tickets", kwargs={"transaction_id": submitted_transaction.pk})

        response = buyer_client.get(url)

        assert response.status_code == 409
        assert response.json()["code"] == "NOT_READY"

    def test_tickets_after_confirmation(self, buyer_client: Client, done_transaction: Transaction) -> None:
        url = reverse("api:get_transaction_tickets", kwargs={"transaction_id": done_transaction.pk})

        response = buyer_client.get(url)

        assert response.status_code == 200
        tokens = {ticket["qr_token"] for ticket in response.json()}
        assert tokens == set(Ticket.objects.filter(transaction=done_transaction).values_list("qr_token", flat=True))


class TestTransitions:
    """Tests for the payment proof, confirm, reject and cancel endpoints."""

    def test_submit_payment_proof(self, buyer_client: Client, pending_transaction: Transaction) -> None:
        url = reverse("api:submit_payment_proof", kwargs={"transaction_id": pending_transaction.pk})

        response = _put(buyer_client, url, {"payment_proof": "proofs/transfer.jpg"})

        assert response.status_code == 200
        assert response.json()["status"] == "waiting_confirmation"

    def test_submit_payment_proof_after_deadline(
        self, buyer: MarketplaceUser, pending_transaction: Transaction
    ) -> None:
        url = reverse("api:submit_payment_proof", kwargs={"transaction_id": pending_transaction.pk})

        with freeze_time(pending_transaction.expired_at + timedelta(seconds=1)):
            # tokens issued before the jump would have expired too
            response = _put(auth_client(buyer), url, {"payment_proof": "proofs/transfer.jpg"})

        assert response.status_code == 410
        assert response.json()["code"] == "EXPIRED"

    def test_submit_payment_proof_requires_a_proof(
        self, buyer_client: Client, pending_transaction: Transaction
    ) -> None:
        url = reverse("api:submit_payment_proof", kwargs={"transaction_id": pending_transaction.pk})

        response = _put(buyer_client, url, {"payment_proof": ""})

        assert response.status_code == 422

    def test_confirm(self, organizer_client: Client, submitted_transaction: Transaction) -> None:
        url = reverse("api:confirm_transaction", kwargs={"transaction_id": submitted_transaction.pk})

        response = _put(organizer_client, url)

        assert response.status_code == 200
        assert response.json()["status"] == "done"
        assert Ticket.objects.filter(transaction=submitted_transaction).count() == 2

    def test_confirm_twice_conflicts(self, organizer_client: Client, done_transaction: Transaction) -> None:
        url = reverse("api:confirm_transaction", kwargs={"transaction_id": done_transaction.pk})

        response = _put(organizer_client, url)

        assert response.status_code == 409
        assert response.json()["code"] == "INVALID_STATE"
        assert Ticket.objects.filter(transaction=done_transaction).count() == 2

    def test_buyer_cannot_confirm(self, buyer_client: Client, submitted_transaction: Transaction) -> None:
        url = reverse("api:confirm_transaction", kwargs={"transaction_id": submitted_transaction.pk})

        response = _put(buyer_client, url)

        assert response.status_code == 403
        assert response.json()["code"] == "FORBIDDEN"

    def test_reject(
        self, organizer_client: Client, ticket_type: TicketType, submitted_transaction: Transaction
    ) -> None:
        url = reverse("api:reject_transaction", kwargs={"transaction_id": submitted_transaction.pk})

        response = _put(organizer_client, url, {"reason": "Transfer not found."})

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "rejected"
        assert data["rejection_reason"] == "Transfer not found."
        ticket_type.refresh_from_db()
        assert ticket_type.seats_remaining == 10

    def test_cancel(self, buyer_client: Client, ticket_type: TicketType, pending_transaction: Transaction) -> None:
        url = reverse("api:cancel_transaction", kwargs={"transaction_id": pending_transaction.pk})

        response = buyer_client.delete(url)

        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"
        ticket_type.refresh_from_db()
        assert ticket_type.seats_remaining == 10

    def test_cancel_with_put(self, buyer_client: Client, pending_transaction: Transaction) -> None:
        url = reverse("api:cancel_transaction_put", kwargs={"transaction_id": pending_transaction.pk})

        response = _put(buyer_client, url)

        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"

    def test_cancel_after_submission_conflicts(
        self, buyer_client: Client, submitted_transaction: Transaction
    ) -> None:
        url = reverse("api:cancel_transaction", kwargs={"transaction_id": submitted_transaction.pk})

        response = buyer_client.delete(url)

        assert response.status_code == 409
        assert response.json()["code"] == "INVALID_STATE"
