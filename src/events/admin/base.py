# src/events/admin/base.py
"""Base admin components: link mixins and inlines."""

import typing as t

from django.contrib import admin
from django.urls import reverse
from django.utils.html import format_html

from events import models


class UserLinkMixin:
    """Mixin to add a link to the participant of a registration."""

    def user_link(self, obj: t.Any) -> str:
        user = getattr(obj, "participant", getattr(obj, "leader", None))
        url = reverse("admin:accounts_felicityuser_change", args=[user.id])  # type: ignore[union-attr]
        return format_html('<a href="{}">{}</a>', url, user.username)  # type: ignore[union-attr]

    user_link.short_description = "User"  # type: ignore[attr-defined]


class EventLinkMixin:
    """Mixin to add a link to an event."""

    def event_link(self, obj: t.Any) -> str:
        url = reverse("admin:events_event_change", args=[obj.event_id])
        return format_html('<a href="{}">{}</a>', url, obj.event.name)

    event_link.short_description = "Event"  # type: ignore[attr-defined]


class EventVariantInline(admin.TabularInline):  # type: ignore[type-arg]
    model = models.EventVariant
    extra = 0
    fields = ["name", "options", "stock"]


class RegistrationStatusChangeInline(admin.TabularInline):  # type: ignore[type-arg]
    model = models.RegistrationStatusChange
    extra = 0
    fields = ["status", "comment", "changed_by", "created_at"]
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request: t.Any, obj: t.Any = None) -> bool:
        return False


class TeamMemberInline(admin.TabularInline):  # type: ignore[type-arg]
    model = models.TeamMember
    extra = 0
    fields = ["user", "status", "created_at"]
    readonly_fields = ["created_at"]
    autocomplete_fields = ["user"]
