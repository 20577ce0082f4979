"""Tests for the buyer's and organizer's listing endpoints."""

import pytest
from django.test.client import Client
from django.urls import reverse

from accounts.models import MarketplaceUser
from events.models import Coupon, Event, Ticket, Transaction, Voucher
from events.service import check_in_service, points_service
from events.service.transaction_service import Cart, TransactionLifecycle

pytestmark = pytest.mark.django_db


class TestMeEndpoints:
    def test_my_transactions(
        self, buyer_client: Client, other_client: Client, pending_transaction: Transaction
    ) -> None:
        url = reverse("api:my_transactions")

        response = buyer_client.get(url)

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        assert data["results"][0]["id"] == str(pending_transaction.pk)
        assert other_client.get(url).json()["count"] == 0

    def test_my_points(self, buyer_client: Client, buyer: MarketplaceUser, event: Event) -> None:
        points_service.grant_points(buyer, 5_000, description="Referral reward")
        ticket_type = event.ticket_types.create(name="Balcony", unit_price=20_000, total_seats=4)
        TransactionLifecycle().create(buyer, event.pk, Cart(ticket_type_id=ticket_type.pk, quantity=1, points=2_000))

        response = buyer_client.get(reverse("api:my_points"))

        assert response.status_code == 200
        data = response.json()
        assert data["balance"] == 5_000
        assert data["held"] == 2_000
        assert data["available"] == 3_000
        assert [entry["description"] for entry in data["history"]] == ["Referral reward"]

    def test_my_coupons(self, buyer_client: Client, coupon: Coupon) -> None:
        response = buyer_client.get(reverse("api:my_coupons"))

        assert response.status_code == 200
        assert [c["code"] for c in response.json()] == ["WELCOME5K"]


class TestOrganizerEndpoints:
    def test_lists_own_event_transactions(
        self,
        organizer_client: Client,
        other_client: Client,
        pending_transaction: Transaction,
    ) -> None:
        url = reverse("api:organizer_transactions")

        response = organizer_client.get(url)

        assert response.status_code == 200
        assert [t["id"] for t in response.json()["results"]] == [str(pending_transaction.pk)]
        assert other_client.get(url).json()["count"] == 0

    def test_filter_by_status(self, organizer_client: Client, submitted_transaction: Transaction) -> None:
        url = reverse("api:organizer_transactions")

        waiting = organizer_client.get(url, {"status": "waiting_confirmation"}).json()
        done = organizer_client.get(url, {"status": "done"}).json()

        assert waiting["count"] == 1
        assert done["count"] == 0

    def test_lists_vouchers(self, organizer_client: Client, percent_voucher: Voucher) -> None:
        response = organizer_client.get(reverse("api:organizer_vouchers"))

        assert response.status_code == 200
        data = response.json()
        assert data[0]["code"] == "JAZZ10"
        assert data[0]["status"] == "active"


class TestOrganizerAttendees:
    def test_lists_one_row_per_seat(
        self, organizer_client: Client, other_client: Client, done_transaction: Transaction
    ) -> None:
        url = reverse("api:organizer_attendees")

        response = organizer_client.get(url)

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 2
        assert {row["transaction_id"] for row in data["results"]} == {str(done_transaction.pk)}
        assert "Alice" in {row["attendee_name"] for row in data["results"]}
        assert all(row["buyer_email"] == "buyer@example.com" for row in data["results"])
        assert "qr_token" not in data["results"][0]
        assert other_client.get(url).json()["count"] == 0

    def test_pending_transactions_have_no_attendees_yet(
        self, organizer_client: Client, pending_transaction: Transaction
    ) -> None:
        assert organizer_client.get(reverse("api:organizer_attendees")).json()["count"] == 0

    def test_filter_by_event(
        self,
        organizer_client: Client,
        organizer: MarketplaceUser,
        buyer: MarketplaceUser,
        other_event: Event,
        done_transaction: Transaction,
    ) -> None:
        lifecycle = TransactionLifecycle()
        ticket_type = other_event.ticket_types.create(name="Standing", unit_price=10_000, total_seats=5)
        txn = lifecycle.create(buyer, other_event.pk, Cart(ticket_type_id=ticket_type.pk, quantity=1))
        lifecycle.submit_proof(txn.pk, buyer, "proofs/transfer-002.jpg")
        lifecycle.confirm(txn.pk, organizer)
        url = reverse("api:organizer_attendees")

        everything = organizer_client.get(url).json()
        rock_only = organizer_client.get(url, {"event_id": str(other_event.pk)}).json()

        assert everything["count"] == 3
        assert rock_only["count"] == 1
        assert rock_only["results"][0]["event_name"] == "Rock Night"
        assert rock_only["results"][0]["ticket_type_name"] == "Standing"

    def test_filter_by_check_in_state(self, organizer_client: Client, done_transaction: Transaction) -> None:
        ticket = Ticket.objects.filter(transaction=done_transaction).first()
        assert ticket is not None
        check_in_service.check_in(ticket.qr_token)
        url = reverse("api:organizer_attendees")

        checked_in = organizer_client.get(url, {"checked_in": "true"}).json()
        not_yet = organizer_client.get(url, {"checked_in": "false"}).json()

        assert [row["id"] for row in checked_in["results"]] == [str(ticket.pk)]
        assert checked_in["results"][0]["checked_in_at"] is not None
        assert not_yet["count"] == 1
