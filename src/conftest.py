"""Project-wide fixtures: users, API clients and test-time settings."""

import secrets
import string
import typing as t
from datetime import datetime, time, timedelta

import faker
import pytest
from django.core.cache import cache
from django.test.client import Client
from django.utils import timezone
from ninja_jwt.tokens import RefreshToken
from pytest import MonkeyPatch

from accounts.models import MarketplaceUser


@pytest.fixture(autouse=True)
def increase_rate_limit(monkeypatch: MonkeyPatch) -> None:
    """Increase the rate limits so tests never get throttled."""
    monkeypatch.setattr("common.throttling.WriteThrottle.rate", "1000/min")
    monkeypatch.setattr("common.throttling.UserDefaultThrottle.rate", "1000/min")
    monkeypatch.setattr("common.throttling.AnonDefaultThrottle.rate", "1000/min")
    monkeypatch.setattr("common.throttling.CheckInThrottle.rate", "1000/min")


@pytest.fixture(autouse=True)
def enable_celery_eager_mode(settings: t.Any) -> None:
    """Enable Celery eager mode for tests so tasks execute synchronously."""
    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.CELERY_TASK_EAGER_PROPAGATES = True


@pytest.fixture(autouse=True)
def clear_cache() -> None:
    """Throttle history lives in the cache; start every test from scratch."""
    cache.clear()


class MarketplaceUserFactory:
    """Factory for creating MarketplaceUser instances for testing."""

    fake = faker.Faker()

    def create_user(self, **kwargs: t.Any) -> MarketplaceUser:
        username = kwargs.pop(
            "username", "".join(secrets.choice(string.ascii_lowercase) for _ in range(8)) + "@user.test"
        )
        email = kwargs.pop("email", username + ("@test.com" if "@" not in username else ""))
        password = kwargs.pop("password", "password")
        first_name = kwargs.pop("first_name", self.fake.first_name())
        last_name = kwargs.pop("last_name", self.fake.last_name())
        return MarketplaceUser.objects.create_user(
            username=username,
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            **kwargs,
        )

    def __call__(self, **kwargs: t.Any) -> MarketplaceUser:
        return self.create_user(**kwargs)


@pytest.fixture
def user_factory() -> MarketplaceUserFactory:
    return MarketplaceUserFactory()


@pytest.fixture
def organizer(user_factory: MarketplaceUserFactory) -> MarketplaceUser:
    """Owns the events under test."""
    return user_factory(username="organizer", email="organizer@example.com")


@pytest.fixture
def buyer(user_factory: MarketplaceUserFactory) -> MarketplaceUser:
    return user_factory(username="buyer", email="buyer@example.com", first_name="Bea", last_name="Buyer")


@pytest.fixture
def other_user(user_factory: MarketplaceUserFactory) -> MarketplaceUser:
    """Neither buyer nor organizer."""
    return user_factory(username="stranger", email="stranger@example.com")


@pytest.fixture
def staff_user(user_factory: MarketplaceUserFactory) -> MarketplaceUser:
    return user_factory(username="staff", email="staff@example.com", is_staff=True)


def auth_client(user: MarketplaceUser) -> Client:
    refresh = RefreshToken.for_user(user)
    return Client(HTTP_AUTHORIZATION=f"Bearer {str(refresh.access_token)}")  # type: ignore[attr-defined]


@pytest.fixture
def organizer_client(organizer: MarketplaceUser) -> Client:
    """API client for the event organizer."""
    return auth_client(organizer)


@pytest.fixture
def buyer_client(buyer: MarketplaceUser) -> Client:
    """API client for the buyer."""
    return auth_client(buyer)


@pytest.fixture
def other_client(other_user: MarketplaceUser) -> Client:
    """API client for an unrelated user."""
    return auth_client(other_user)


@pytest.fixture
def staff_client(staff_user: MarketplaceUser) -> Client:
    """API client for a staff member."""
    return auth_client(staff_user)


@pytest.fixture
def next_week() -> datetime:
    today = timezone.now()
    same_time_next_week = today + timedelta(days=7)
    noon = time(hour=12, minute=0)
    return timezone.make_aware(
        datetime.combine(same_time_next_week.date(), noon),
        timezone.get_current_timezone(),
    )
