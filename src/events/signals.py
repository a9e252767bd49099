import typing as t

import structlog
from django.dispatch import Signal, receiver

logger = structlog.get_logger(__name__)

# Sent after a transaction that changed an event's registered_count has committed.
# Receivers get ``event_id`` (str), ``channel`` (str) and ``payload`` ({"eventId", "registeredCount"}).
capacity_changed = Signal()


@receiver(capacity_changed)
def log_capacity_change(sender: t.Any, event_id: str, payload: dict[str, t.Any], **kwargs: t.Any) -> None:
    """Trace capacity broadcasts."""
    logger.debug("capacity_changed", event_id=event_id, registered_count=payload.get("registeredCount"))
