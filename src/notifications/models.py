from django.conf import settings
from django.db import models
from django.utils import timezone

from common.models import TimeStampedModel

from .enums import NotificationType


class Notification(TimeStampedModel):
    """In-app notification record.

    Everything about the transaction that triggered it lives in ``context``;
    only the recipient is a foreign key.
    """

    notification_type = models.CharField(
        max_length=50,
        db_index=True,
        choices=NotificationType.choices,
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notifications", db_index=True
    )
    context = models.JSONField(default=dict, blank=True)
    read_at = models.DateTimeField(null=True, blank=True, db_index=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "read_at"], name="notification_user_unread_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.notification_type} -> {self.user_id}"

    def mark_read(self) -> None:
        """Mark notification as read."""
        if not self.read_at:
            self.read_at = timezone.now()
            self.save(update_fields=["read_at", "updated_at"])

    @property
    def is_read(self) -> bool:
        return self.read_at is not None
