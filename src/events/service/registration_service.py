"""Participant and organizer actions on existing registrations."""

import structlog
from django.conf import settings
from django.core.files.uploadedfile import UploadedFile
from django.db import transaction

from accounts.models import FelicityUser
from events.exceptions import (
    AlreadyAttendedError,
    AuthorizationError,
    InvalidStatusTransitionError,
    ValidationError,
)
from events.models import Registration
from events.service import capacity, stock
from events.service.capacity import event_lock

logger = structlog.get_logger(__name__)


def cancel_registration(registration: Registration, user: FelicityUser) -> Registration:
    """Cancel a registration on behalf of its participant.

    Capacity is given back for Normal events and for approved merchandise
    orders, whose stock is restored too. Pending merchandise orders never held
    capacity or stock, so nothing is released. Cancelling twice is a no-op.

    Raises:
        AuthorizationError: if ``user`` does not own the registration.
        InvalidStatusTransitionError: if the registration was rejected.
    """
    if registration.participant_id != user.id:
        raise AuthorizationError("Only the participant can cancel this registration.")

    with event_lock(registration.event_id) as event:
        registration = Registration.objects.select_for_update().get(pk=registration.pk)
        if registration.status == Registration.Status.CANCELLED:
            return registration
        previous_status = registration.status
        registration.transition_to(Registration.Status.CANCELLED, changed_by=user)

        if not event.is_merchandise:
            capacity.release(event, registration.quantity)
        elif previous_status == Registration.Status.CONFIRMED:
            capacity.release(event, registration.quantity)
            stock.restore(registration)

    logger.info(
        "registration_cancelled",
        registration_id=str(registration.pk),
        event_id=str(registration.event_id),
        previous_status=previous_status,
    )
    return registration


@transaction.atomic
def mark_attended(registration: Registration, user: FelicityUser) -> Registration:
    """Record that the participant showed up. Attendance can only be set once.

    Raises:
        AuthorizationError: if ``user`` cannot manage the event.
        InvalidStatusTransitionError: if the registration is not confirmed.
        AlreadyAttendedError: if attendance was already marked.
    """
    registration = Registration.objects.select_for_update().select_related("event").get(pk=registration.pk)
    if not registration.event.can_be_managed_by(user):
        raise AuthorizationError()
    if registration.status != Registration.Status.CONFIRMED:
        raise InvalidStatusTransitionError("Only confirmed registrations can be marked as attended.")
    if registration.attended:
        raise AlreadyAttendedError()
    registration.mark_attended()
    logger.info("attendance_marked", registration_id=str(registration.pk), event_id=str(registration.event_id))
    return registration


@transaction.atomic
def upload_payment_proof(registration: Registration, user: FelicityUser, proof: UploadedFile) -> Registration:
    """Attach a payment proof to a pending registration. The file is stored, never inspected.

    Raises:
        AuthorizationError: if ``user`` does not own the registration.
        InvalidStatusTransitionError: if the registration is not pending.
        ValidationError: if the file is too large.
    """
    registration = Registration.objects.select_for_update().get(pk=registration.pk)
    if registration.participant_id != user.id:
        raise AuthorizationError()
    if registration.status != Registration.Status.PENDING:
        raise InvalidStatusTransitionError("Payment proof can only be uploaded for pending registrations.")
    max_size = settings.MAX_PAYMENT_PROOF_SIZE_MB * 1024 * 1024
    if proof.size and proof.size > max_size:
        raise ValidationError(f"Payment proof must be smaller than {settings.MAX_PAYMENT_PROOF_SIZE_MB} MB.")

    if registration.payment_proof:
        registration.payment_proof.delete(save=False)
    registration.payment_proof.save(f"{registration.ticket_id}-{proof.name}", proof, save=False)
    registration.save(update_fields=["payment_proof", "updated_at"])
    logger.info("payment_proof_uploaded", registration_id=str(registration.pk))
    return registration
