# src/events/admin/event.py
"""Admin classes for Event and its variants."""

from django.contrib import admin

from events import models
from events.admin.base import EventVariantInline


@admin.register(models.Event)
class EventAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = [
        "name",
        "event_type",
        "status",
        "organizer",
        "start_date",
        "registration_deadline",
        "registered_count",
        "limit",
    ]
    list_filter = ["event_type", "status", "eligibility", "is_team_event"]
    search_fields = ["name", "venue", "organizer__username", "organizer__email"]
    autocomplete_fields = ["organizer"]
    readonly_fields = ["id", "registered_count", "created_at", "updated_at"]
    date_hierarchy = "start_date"
    inlines = [EventVariantInline]
