"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking, ReminderJob


class ReminderJobInline(admin.TabularInline):
    model = ReminderJob
    extra = 0
    can_delete = False
    readonly_fields = ("key", "kind", "fire_at", "status", "attempts", "last_error", "sent_at")


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "listing",
        "booker",
        "status",
        "start_at",
        "end_at",
        "credits_used",
        "reminder_sent",
        "created_at",
    )
    list_filter = ("status", "reminder_sent", "start_at")
    search_fields = ("listing__title", "booker__email")
    # Status changes go through the state machine, not the admin form.
    readonly_fields = (
        "status",
        "credits_used",
        "reminder_sent",
        "confirmed_at",
        "cancelled_at",
        "completed_at",
        "review_requested_at",
        "created_at",
        "updated_at",
    )
    inlines = [ReminderJobInline]


@admin.register(ReminderJob)
class ReminderJobAdmin(admin.ModelAdmin):
    list_display = ("key", "kind", "fire_at", "status", "attempts", "sent_at")
    list_filter = ("status", "kind")
    search_fields = ("key",)
    readonly_fields = ("created_at", "updated_at")
