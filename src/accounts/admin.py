"""Admin interface for the accounts app."""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from accounts.models import MarketplaceUser


@admin.register(MarketplaceUser)
class MarketplaceUserAdmin(UserAdmin):  # type: ignore[type-arg]
    list_display = ["username", "email", "preferred_name", "is_staff", "date_joined"]
    search_fields = ["username", "email", "first_name", "last_name", "preferred_name"]
    fieldsets = (*UserAdmin.fieldsets, ("Profile", {"fields": ("preferred_name",)}))  # type: ignore[misc]
