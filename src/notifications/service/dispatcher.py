"""Core notification dispatcher service."""

import typing as t

import structlog
from django.db import transaction

from accounts.models import MarketplaceUser
from notifications.context_schemas import validate_notification_context
from notifications.enums import NotificationType
from notifications.models import Notification
from notifications.signals import notification_requested

logger = structlog.get_logger(__name__)


def create_notification(
    notification_type: NotificationType | str,
    user: MarketplaceUser,
    context: dict[str, t.Any],
) -> Notification:
    """Create a notification record.

    Raises:
        ValueError: If context validation fails
    """
    if isinstance(notification_type, str):
        notification_type = NotificationType(notification_type)

    validate_notification_context(notification_type, context)

    notification = Notification.objects.create(
        notification_type=notification_type,
        user=user,
        context=context,
    )

    logger.info(
        "notification_created",
        notification_id=str(notification.id),
        notification_type=notification_type,
        user_id=str(user.id),
    )

    return notification


def notify_on_commit(
    sender: t.Any,
    notification_type: NotificationType,
    user: MarketplaceUser,
    context: dict[str, t.Any],
) -> None:
    """Request a notification once the surrounding database transaction commits.

    Nothing is sent if the transaction rolls back, so a notification never
    describes a state change that did not happen.
    """

    def send() -> None:
        notification_requested.send(
            sender=sender,
            notification_type=notification_type,
            user=user,
            context=context,
        )

    transaction.on_commit(send)
