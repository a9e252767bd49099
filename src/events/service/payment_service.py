"""Payment approval workflow.

Organizers review Pending registrations. Approval is where merchandise orders
finally consume stock and capacity, so both are re-validated against the
current state. Any failure rolls the approval back and leaves the
registration Pending.
"""

from functools import partial

import structlog
from django.db import transaction

from accounts.models import FelicityUser
from events import tasks
from events.exceptions import AuthorizationError, InvalidStatusTransitionError
from events.models import Event, Registration
from events.service import capacity, stock
from events.service.capacity import event_lock

logger = structlog.get_logger(__name__)


def _lock_pending(registration: Registration, event: Event, user: FelicityUser) -> Registration:
    if not event.can_be_managed_by(user):
        raise AuthorizationError()
    registration = Registration.objects.select_for_update().select_related("participant").get(pk=registration.pk)
    if registration.status != Registration.Status.PENDING:
        raise InvalidStatusTransitionError("Only pending registrations can be reviewed.")
    registration.event = event
    return registration


def approve(registration: Registration, user: FelicityUser) -> Registration:
    """Confirm a pending registration.

    Raises:
        AuthorizationError: if ``user`` cannot manage the event.
        InvalidStatusTransitionError: if the registration is not pending.
        InsufficientStockError: if a selected variant no longer has enough stock.
        EventFullError: if the order no longer fits the event limit.
    """
    with event_lock(registration.event_id) as event:
        registration = _lock_pending(registration, event, user)
        if event.is_merchandise:
            stock.consume(registration)
            capacity.commit(event, registration.quantity)
        registration.transition_to(Registration.Status.CONFIRMED, changed_by=user)
        transaction.on_commit(partial(tasks.send_payment_decision_email.delay, str(registration.pk)), robust=True)

    logger.info("payment_approved", registration_id=str(registration.pk), event_id=str(event.pk))
    return registration


def reject(registration: Registration, user: FelicityUser, comment: str = "") -> Registration:
    """Reject a pending registration with the organizer's comment.

    Normal events give the seat held since registration back. Merchandise
    orders never held any.

    Raises:
        AuthorizationError: if ``user`` cannot manage the event.
        InvalidStatusTransitionError: if the registration is not pending.
    """
    with event_lock(registration.event_id) as event:
        registration = _lock_pending(registration, event, user)
        registration.transition_to(Registration.Status.REJECTED, comment=comment, changed_by=user)
        if not event.is_merchandise:
            capacity.release(event, registration.quantity)
        transaction.on_commit(partial(tasks.send_payment_decision_email.delay, str(registration.pk)), robust=True)

    logger.info("payment_rejected", registration_id=str(registration.pk), event_id=str(event.pk))
    return registration
