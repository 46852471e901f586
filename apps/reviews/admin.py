from django.contrib import admin  # type: ignore

from .models import Review


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ('reviewer', 'subject', 'listing', 'rating', 'created_at')
    list_filter = ('rating',)
    search_fields = ('reviewer__email', 'subject__email', 'comment')
