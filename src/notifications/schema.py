"""Schemas for notification API."""

import typing as t
from datetime import datetime
from uuid import UUID

from ninja import Schema

from notifications.enums import NotificationType


class NotificationSchema(Schema):
    id: UUID
    notification_type: NotificationType
    context: dict[str, t.Any]
    read_at: datetime | None
    created_at: datetime


class UnreadCountSchema(Schema):
    count: int
