from .notification_controller import NotificationController

__all__ = ["NotificationController"]
