"""Capacity change notification.

The registration engine does not know how live updates reach clients. It
publishes ``{eventId, registeredCount}`` for an event through a
``CapacityNotifier``; which one is used is configured with the
``CAPACITY_NOTIFIER`` setting (a dotted path to the class).
"""

import abc
import typing as t
from functools import lru_cache

from django.conf import settings
from django.core.signals import setting_changed
from django.dispatch import receiver
from django.utils.module_loading import import_string

from events.signals import capacity_changed

CapacityPayload = dict[str, t.Any]


def channel_for(event_id: str) -> str:
    """The broadcast channel of an event."""
    return f"event-{event_id}"


class CapacityNotifier(abc.ABC):
    """Publishes capacity changes to interested subscribers."""

    @abc.abstractmethod
    def publish(self, event_id: str, payload: CapacityPayload) -> None:
        """Deliver the payload on the event's channel. Delivery is best-effort."""


class SignalCapacityNotifier(CapacityNotifier):
    """Default notifier: re-emits the change as the ``capacity_changed`` Django signal.

    A websocket or SSE layer subscribes to the signal and fans the payload out.
    """

    def publish(self, event_id: str, payload: CapacityPayload) -> None:
        """Send the signal."""
        capacity_changed.send(sender=self.__class__, event_id=event_id, channel=channel_for(event_id), payload=payload)


class NullCapacityNotifier(CapacityNotifier):
    """Drops every notification."""

    def publish(self, event_id: str, payload: CapacityPayload) -> None:
        """Do nothing."""


@lru_cache(maxsize=1)
def get_notifier() -> CapacityNotifier:
    """Instantiate the configured notifier once per process."""
    notifier_class: type[CapacityNotifier] = import_string(settings.CAPACITY_NOTIFIER)
    return notifier_class()


@receiver(setting_changed)
def _reset_notifier(setting: str, **kwargs: t.Any) -> None:
    if setting == "CAPACITY_NOTIFIER":
        get_notifier.cache_clear()
