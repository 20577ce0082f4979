import pytest

from conftest import MarketplaceUserFactory

pytestmark = pytest.mark.django_db


class TestDisplayName:
    def test_preferred_name_wins(self, user_factory: MarketplaceUserFactory) -> None:
        user = user_factory(first_name="Beatrice", last_name="Buyer", preferred_name="Bea")

        assert user.display_name == "Bea"

    def test_full_name_fallback(self, user_factory: MarketplaceUserFactory) -> None:
        user = user_factory(first_name="Beatrice", last_name="Buyer")

        assert user.display_name == "Beatrice Buyer"

    def test_username_fallback(self, user_factory: MarketplaceUserFactory) -> None:
        user = user_factory(username="jazz_fan@example.com", first_name="", last_name="")

        assert user.display_name == "Jazz Fan"


def test_email_is_normalized(user_factory: MarketplaceUserFactory) -> None:
    user = user_factory(email="  Bea.Buyer@Example.COM ")

    assert user.email == "bea.buyer@example.com"
