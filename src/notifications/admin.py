from django.contrib import admin

from notifications.models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["notification_type", "user", "created_at", "read_at"]
    list_filter = ["notification_type"]
    search_fields = ["user__username", "user__email"]
    readonly_fields = ["notification_type", "user", "context", "created_at", "read_at"]
