import re
import typing as t
import uuid

from django.contrib.auth.models import AbstractUser, UserManager
from django.db import models


class MarketplaceUserQueryset(models.QuerySet["MarketplaceUser"]):
    """Queryset for MarketplaceUser."""


class MarketplaceUserManager(UserManager["MarketplaceUser"]):
    def get_queryset(self) -> MarketplaceUserQueryset:
        """Get queryset for MarketplaceUser."""
        return MarketplaceUserQueryset(self.model)


class MarketplaceUser(AbstractUser):
    """A buyer, an organizer, or both: roles follow from what the user owns, not from a flag."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    preferred_name = models.CharField(db_index=True, max_length=255, blank=True, help_text="Preferred name")

    objects = MarketplaceUserManager()  # type: ignore[misc]

    class Meta:
        ordering = ["username"]

    def save(self, *args: t.Any, **kwargs: t.Any) -> None:
        """Normalize the email before saving."""
        if self.email:
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)

    @property
    def display_name(self) -> str:
        """Display name."""
        return self.get_display_name()

    def get_display_name(self) -> str:
        """Returns the user's preferred name, or their full name as a fallback."""
        return (
            self.preferred_name or self.get_full_name() or re.sub(r"(\W|_)+", " ", self.username.split("@")[0]).title()
        )
