"""Variant stock reservation for merchandise events.

Pending orders reserve stock softly: nothing is written when an order is
placed. The stock held by Pending orders is derived from the database every
time it is needed, and ``EventVariant.stock`` is only decremented when an
order is approved. Approval therefore always re-validates.

Each selection ``{"name": <variant>, "option": <option>}`` consumes the
order's ``quantity`` units of that variant.
"""

import typing as t
from collections import defaultdict
from uuid import UUID

import structlog
from django.db.models import F, Sum

from events.exceptions import InsufficientStockError, PurchaseLimitExceededError, ValidationError
from events.models import Event, EventVariant, Registration

logger = structlog.get_logger(__name__)

Selection = dict[str, str]


def normalize_selections(event: Event, selections: t.Iterable[t.Mapping[str, t.Any]]) -> list[Selection]:
    """Validate the requested variants against the event and return plain dicts.

    Raises:
        ValidationError: on unknown variant names or options, or a variant selected twice.
    """
    variants = {variant.name: variant for variant in event.variants.all()}
    normalized: list[Selection] = []
    seen: set[str] = set()
    for selection in selections:
        name = str(selection.get("name", ""))
        option = str(selection.get("option", ""))
        variant = variants.get(name)
        if variant is None:
            raise ValidationError(f'Unknown variant "{name}".')
        if variant.options and option not in variant.options:
            raise ValidationError(f'"{option}" is not a valid option for variant "{name}".')
        if name in seen:
            raise ValidationError(f'Variant "{name}" was selected more than once.')
        seen.add(name)
        normalized.append({"name": name, "option": option})
    if variants and not normalized:
        raise ValidationError("Select at least one variant.")
    return normalized


def reserved_by_pending(event: Event, *, exclude: UUID | None = None) -> dict[str, int]:
    """Quantity per variant name held by Pending orders of the event.

    Args:
        event: The merchandise event.
        exclude: A registration to leave out, e.g. the one being approved.
    """
    qs = Registration.objects.pending().filter(event=event)
    if exclude is not None:
        qs = qs.exclude(pk=exclude)
    reserved: dict[str, int] = defaultdict(int)
    for selected_variants, quantity in qs.values_list("selected_variants", "quantity"):
        for selection in selected_variants or []:
            reserved[selection.get("name", "")] += quantity
    return dict(reserved)


def assert_admissible(event: Event, selections: list[Selection], quantity: int) -> None:
    """Check that every selected variant can cover ``quantity`` more units.

    Raises:
        InsufficientStockError: "Variant X has only N available".
    """
    reserved = reserved_by_pending(event)
    stock = dict(EventVariant.objects.filter(event=event).values_list("name", "stock"))
    for selection in selections:
        name = selection["name"]
        free = max(stock.get(name, 0) - reserved.get(name, 0), 0)
        if free < quantity:
            raise InsufficientStockError(f"Variant {name} has only {free} available")


def assert_purchase_limit(event: Event, participant: t.Any, quantity: int) -> None:
    """A participant's active orders may not exceed the event's per-user limit.

    Raises:
        PurchaseLimitExceededError
    """
    held = (
        Registration.objects.active()
        .filter(event=event, participant=participant)
        .aggregate(total=Sum("quantity"))["total"]
        or 0
    )
    if held + quantity > event.purchase_limit_per_user:
        raise PurchaseLimitExceededError(f"Purchase limit reached (max {event.purchase_limit_per_user} per user).")


def consume(registration: Registration) -> None:
    """Decrement stock for an approved order.

    The check runs against the current stock, and every decrement is conditional,
    so stock can never go negative. Must run inside ``event_lock``.

    Raises:
        InsufficientStockError: the caller's transaction must roll back.
    """
    for selection in registration.selected_variants:
        name = selection["name"]
        updated = EventVariant.objects.filter(
            event_id=registration.event_id, name=name, stock__gte=registration.quantity
        ).update(stock=F("stock") - registration.quantity)
        if not updated:
            current = (
                EventVariant.objects.filter(event_id=registration.event_id, name=name)
                .values_list("stock", flat=True)
                .first()
            )
            raise InsufficientStockError(f"Variant {name} has only {current or 0} available")
    logger.info(
        "stock_consumed",
        event_id=str(registration.event_id),
        registration_id=str(registration.pk),
        quantity=registration.quantity,
    )


def restore(registration: Registration) -> None:
    """Give the stock of a cancelled, previously approved order back."""
    for selection in registration.selected_variants:
        EventVariant.objects.filter(event_id=registration.event_id, name=selection["name"]).update(
            stock=F("stock") + registration.quantity
        )
    logger.info(
        "stock_restored",
        event_id=str(registration.event_id),
        registration_id=str(registration.pk),
        quantity=registration.quantity,
    )
