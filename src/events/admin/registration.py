# src/events/admin/registration.py
"""Admin classes for Registration and Team models."""

from django.contrib import admin

from events import models
from events.admin.base import EventLinkMixin, RegistrationStatusChangeInline, TeamMemberInline, UserLinkMixin


@admin.register(models.Registration)
class RegistrationAdmin(admin.ModelAdmin, UserLinkMixin, EventLinkMixin):  # type: ignore[type-arg]
    """Registrations are read-mostly here: status changes go through the API so capacity stays consistent."""

    list_display = ["ticket_id", "event_link", "user_link", "status", "quantity", "attended", "created_at"]
    list_filter = ["status", "attended", "event__event_type"]
    search_fields = ["ticket_id", "event__name", "participant__username", "participant__email"]
    readonly_fields = [
        "id",
        "ticket_id",
        "event",
        "participant",
        "team",
        "status",
        "quantity",
        "selected_variants",
        "attended_at",
        "created_at",
    ]
    date_hierarchy = "created_at"
    inlines = [RegistrationStatusChangeInline]


@admin.register(models.Team)
class TeamAdmin(admin.ModelAdmin, UserLinkMixin, EventLinkMixin):  # type: ignore[type-arg]
    list_display = ["name", "event_link", "user_link", "team_size", "status", "invite_code"]
    list_filter = ["status"]
    search_fields = ["name", "invite_code", "event__name", "leader__username"]
    readonly_fields = ["id", "invite_code", "ticket_ids", "status", "created_at"]
    inlines = [TeamMemberInline]
