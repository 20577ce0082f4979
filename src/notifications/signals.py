"""Signals for the notification system."""

from django.dispatch import Signal

# Expected kwargs:
#   - notification_type: NotificationType enum value
#   - user: MarketplaceUser instance
#   - context: dict matching the notification type's context schema
notification_requested = Signal()
