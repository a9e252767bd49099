"""Organizer-side event lifecycle: create, edit, status changes and registration listings."""

import typing as t
from datetime import datetime

import structlog
from django.db import transaction
from django.db.models import QuerySet

from accounts.models import FelicityUser
from events.exceptions import AuthorizationError, EventNotEditableError, ValidationError
from events.models import Event, EventVariant, Registration
from events.schema import EventCreateSchema, EventUpdateSchema, VariantCreateSchema
from events.service.capacity import event_lock

logger = structlog.get_logger(__name__)

PUBLISHED_EDITABLE_FIELDS = frozenset({"description", "registration_deadline", "limit", "form_fields"})


def can_create_events(user: FelicityUser) -> bool:
    return user.is_admin or user.role == FelicityUser.Role.ORGANIZER


def get_organizer_events(user: FelicityUser) -> QuerySet[Event]:
    """Events the user organizes, drafts included. Admins get every event.

    Raises:
        AuthorizationError: if the user is not an organizer or admin.
    """
    if not can_create_events(user):
        raise AuthorizationError("Only organizers have events to manage.")
    return Event.objects.for_organizer(user).select_related("organizer").with_variants()


@transaction.atomic
def create_event(organizer: FelicityUser, payload: EventCreateSchema) -> Event:
    """Create a Draft event with its variants.

    Raises:
        AuthorizationError: if the user is not an organizer or admin.
    """
    if not can_create_events(organizer):
        raise AuthorizationError("Only organizers can create events.")
    data = payload.model_dump(exclude={"variants"})
    event = Event.objects.create(organizer=organizer, status=Event.EventStatus.DRAFT, **data)
    _replace_variants(event, payload.variants)
    logger.info("event_created", event_id=str(event.pk), organizer_id=str(organizer.pk))
    return event


def _replace_variants(event: Event, variants: list[VariantCreateSchema]) -> None:
    event.variants.all().delete()
    for variant in variants:
        EventVariant.objects.create(event=event, **variant.model_dump())


def update_event(event: Event, user: FelicityUser, payload: EventUpdateSchema) -> Event:
    """Apply an organizer edit.

    What may change depends on the event:

    - Closed events reject every edit.
    - Once anyone holds a registration, only the status may change.
    - Draft events accept every field, including the variants.
    - Published events accept the description, form fields, a later
      registration deadline and a larger limit.
    - Ongoing and Completed events only accept status changes.

    Raises:
        AuthorizationError, EventNotEditableError, ValidationError, InvalidStatusTransitionError
    """
    if not event.can_be_managed_by(user):
        raise AuthorizationError()
    data = payload.model_dump(exclude_unset=True)
    status = data.pop("status", None)
    variants = data.pop("variants", None)

    with event_lock(event.pk) as event:
        if event.status == Event.EventStatus.CLOSED:
            raise EventNotEditableError()
        if data or variants is not None:
            _assert_editable(event, set(data) | ({"variants"} if variants is not None else set()))
            _assert_published_edit(event, data)
            for key, value in data.items():
                setattr(event, key, value)
            event.save()
            if variants is not None:
                _replace_variants(event, payload.variants or [])
        if status is not None and status != event.status:
            event.transition_to(status)

    logger.info("event_updated", event_id=str(event.pk), fields=sorted(data), status=event.status)
    return event


def _assert_editable(event: Event, fields: set[str]) -> None:
    if event.registered_count > 0 or Registration.objects.active().filter(event=event).exists():
        raise EventNotEditableError("Only the status can be changed once registrations exist.")
    if event.status == Event.EventStatus.DRAFT:
        return
    if event.status == Event.EventStatus.PUBLISHED:
        if forbidden := fields - PUBLISHED_EDITABLE_FIELDS:
            raise EventNotEditableError(
                f"Published events only allow changes to: {', '.join(sorted(PUBLISHED_EDITABLE_FIELDS))}. "
                f"Not editable: {', '.join(sorted(forbidden))}."
            )
        return
    raise EventNotEditableError("Only the status can be changed for ongoing or completed events.")


def _assert_published_edit(event: Event, data: dict[str, t.Any]) -> None:
    if event.status != Event.EventStatus.PUBLISHED:
        return
    deadline: datetime | None = data.get("registration_deadline")
    if deadline is not None and deadline < event.registration_deadline:
        raise ValidationError("The registration deadline can only be extended.")
    limit: int | None = data.get("limit")
    if limit is not None and limit < event.limit:
        raise ValidationError("The limit can only be increased.")


def transition_status(event: Event, user: FelicityUser, status: str) -> Event:
    """Move the event along its lifecycle.

    Raises:
        AuthorizationError, InvalidStatusTransitionError
    """
    if not event.can_be_managed_by(user):
        raise AuthorizationError()
    with transaction.atomic():
        event = Event.objects.select_for_update().get(pk=event.pk)
        previous = event.status
        event.transition_to(status)
    logger.info("event_status_changed", event_id=str(event.pk), previous=previous, status=status)
    return event


def get_event_registrations(event: Event) -> QuerySet[Registration]:
    """Registrations of an event, for its organizer."""
    return (
        Registration.objects.full()
        .filter(event=event)
        .prefetch_related("status_history")
        .order_by("-created_at")
    )


def get_my_registrations(user: FelicityUser) -> QuerySet[Registration]:
    return Registration.objects.full().filter(participant=user).order_by("-created_at")
