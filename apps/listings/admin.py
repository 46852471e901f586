"""Admin registrations for listings."""

from django.contrib import admin  # type: ignore

from .models import Listing


@admin.register(Listing)
class ListingAdmin(admin.ModelAdmin):
    list_display = ("title", "owner", "price_cents", "duration_mins", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("title", "description", "owner__email")
    readonly_fields = ("created_at", "updated_at")
