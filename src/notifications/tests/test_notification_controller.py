"""Tests for the notification endpoints."""

import typing as t

import pytest
from django.test.client import Client
from django.urls import reverse

from accounts.models import MarketplaceUser
from notifications.enums import NotificationType
from notifications.models import Notification

pytestmark = pytest.mark.django_db


@pytest.fixture
def notifications(buyer: MarketplaceUser) -> list[Notification]:
    context: dict[str, t.Any] = {"transaction_id": "x", "event_name": "Jazz Night"}
    return [
        Notification.objects.create(
            user=buyer, notification_type=NotificationType.TRANSACTION_CREATED, context=context
        ),
        Notification.objects.create(
            user=buyer, notification_type=NotificationType.TRANSACTION_CONFIRMED, context=context
        ),
    ]


def test_list_notifications(buyer_client: Client, notifications: list[Notification]) -> None:
    response = buyer_client.get(reverse("api:list_notifications"))

    assert response.status_code == 200
    assert response.json()["count"] == 2


def test_list_filters_by_type(buyer_client: Client, notifications: list[Notification]) -> None:
    response = buyer_client.get(reverse("api:list_notifications"), {"notification_type": "transaction_confirmed"})

    results = response.json()["results"]
    assert [n["notification_type"] for n in results] == ["transaction_confirmed"]


def test_unread_count_and_mark_read(buyer_client: Client, notifications: list[Notification]) -> None:
    assert buyer_client.get(reverse("api:unread_notification_count")).json() == {"count": 2}

    url = reverse("api:mark_notification_read", kwargs={"notification_id": notifications[0].pk})
    response = buyer_client.post(url)

    assert response.status_code == 200
    assert buyer_client.get(reverse("api:unread_notification_count")).json() == {"count": 1}
    unread = buyer_client.get(reverse("api:list_notifications"), {"unread_only": True}).json()
    assert [n["id"] for n in unread["results"]] == [str(notifications[1].pk)]


def test_cannot_read_someone_elses(other_client: Client, notifications: list[Notification]) -> None:
    url = reverse("api:mark_notification_read", kwargs={"notification_id": notifications[0].pk})

    response = other_client.post(url)

    assert response.status_code == 404
    assert other_client.get(reverse("api:list_notifications")).json()["count"] == 0
