"""The capacity ledger.

``Event.registered_count`` is the single source of truth for consumed
capacity. Every change to it goes through this module:

- ``reserve``: a new Normal-event registration takes its seat (Pending or Confirmed).
- ``commit``: merchandise approval and team completion consume capacity.
- ``release``: cancellation and rejection give capacity back, clamped at zero.

Increments are conditional updates (``WHERE registered_count + qty <= limit``),
so the limit check is part of the write itself. Callers run them inside
``event_lock`` so that the checks made before the write (pending merchandise,
duplicates, stock) see a stable event.
"""

import threading
import typing as t
import weakref
from contextlib import contextmanager
from functools import partial
from uuid import UUID

import structlog
from django.db import transaction
from django.db.models import F, Sum
from django.db.models.functions import Greatest

from events.exceptions import EventFullError
from events.models import Event, Registration

from .notifier import CapacityPayload, get_notifier

logger = structlog.get_logger(__name__)

# Entries disappear once no thread holds or waits on the lock.
_locks: "weakref.WeakValueDictionary[str, t.Any]" = weakref.WeakValueDictionary()
_locks_guard = threading.Lock()


def _process_lock(event_id: UUID | str) -> t.Any:
    key = str(event_id)
    with _locks_guard:
        lock = _locks.get(key)
        if lock is None:
            lock = threading.RLock()
            _locks[key] = lock
        return lock


@contextmanager
def event_lock(event_id: UUID | str) -> t.Iterator[Event]:
    """Critical section for every capacity mutation of one event.

    Serializes callers in this process with a per-event lock, then opens a
    transaction and locks the event row with SELECT ... FOR UPDATE so that other
    processes sharing the database are serialized too.

    Yields:
        The freshly locked event.
    """
    with _process_lock(event_id), transaction.atomic():
        yield Event.objects.select_for_update().get(pk=event_id)


def pending_quantity(event: Event) -> int:
    """Total quantity of Pending orders. Only merchandise events hold pending capacity."""
    if not event.is_merchandise:
        return 0
    total = Registration.objects.pending().filter(event=event).aggregate(total=Sum("quantity"))["total"]
    return int(total or 0)


def available(event: Event) -> int:
    """Capacity left for a new request, as seen by admission."""
    event.refresh_from_db(fields=["registered_count", "limit"])
    return max(event.limit - event.registered_count - pending_quantity(event), 0)


def _increment(event: Event, quantity: int, *, action: str) -> int:
    updated = Event.objects.filter(pk=event.pk, registered_count__lte=F("limit") - quantity).update(
        registered_count=F("registered_count") + quantity
    )
    if not updated:
        logger.info("capacity_exhausted", event_id=str(event.pk), quantity=quantity, action=action)
        raise EventFullError()
    event.refresh_from_db(fields=["registered_count"])
    logger.info(
        "capacity_changed", event_id=str(event.pk), action=action, quantity=quantity, count=event.registered_count
    )
    _publish_on_commit(event)
    return event.registered_count


def reserve(event: Event, quantity: int = 1) -> int:
    """Take capacity for a new Normal-event registration.

    Returns:
        The new registered_count.

    Raises:
        EventFullError: if the increment would exceed the limit.
    """
    return _increment(event, quantity, action="reserve")


def commit(event: Event, quantity: int) -> int:
    """Consume capacity on merchandise approval or team completion.

    Raises:
        EventFullError: if the increment would exceed the limit.
    """
    return _increment(event, quantity, action="commit")


def release(event: Event, quantity: int) -> int:
    """Give capacity back. The counter never goes below zero."""
    Event.objects.filter(pk=event.pk).update(registered_count=Greatest(F("registered_count") - quantity, 0))
    event.refresh_from_db(fields=["registered_count"])
    logger.info(
        "capacity_changed", event_id=str(event.pk), action="release", quantity=quantity, count=event.registered_count
    )
    _publish_on_commit(event)
    return event.registered_count


def _publish_on_commit(event: Event) -> None:
    payload: CapacityPayload = {"eventId": str(event.pk), "registeredCount": event.registered_count}
    transaction.on_commit(partial(notify_capacity_changed, str(event.pk), payload))


def notify_capacity_changed(event_id: str, payload: CapacityPayload) -> None:
    """Publish through the configured notifier. Failures are logged, never raised."""
    try:
        get_notifier().publish(event_id, payload)
    except Exception:
        logger.exception("capacity_notification_failed", event_id=event_id)
