"""Admin registrations for the credit ledger (read-only)."""

from django.contrib import admin  # type: ignore

from .models import CreditTransaction


@admin.register(CreditTransaction)
class CreditTransactionAdmin(admin.ModelAdmin):
    list_display = ("user", "amount", "reason", "booking", "created_at")
    search_fields = ("user__email", "reason")
    readonly_fields = ("user", "amount", "reason", "booking", "created_at")

    def has_add_permission(self, request):  # type: ignore
        return False

    def has_change_permission(self, request, obj=None):  # type: ignore
        return False

    def has_delete_permission(self, request, obj=None):  # type: ignore
        return False
