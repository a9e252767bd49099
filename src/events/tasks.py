"""Celery tasks for event registrations.

This module contains asynchronous tasks for:
- Registration confirmation / order received emails
- Payment approval and rejection emails
- Team completion emails

Tasks are enqueued after the registration transaction commits and never
affect its outcome.
"""

from uuid import UUID

import structlog
from celery import shared_task
from django.template.loader import render_to_string

from common.tasks import send_email

from .models import Registration, Team
from .service import ticket_service

logger = structlog.get_logger(__name__)


def _send_registration_mail(registration: Registration, template: str, subject: str) -> bool:
    confirmed = registration.status == Registration.Status.CONFIRMED
    context = {
        "participant_name": registration.participant.get_display_name(),
        "event": registration.event,
        "registration": registration,
        "ticket": ticket_service.issue_ticket(registration) if confirmed else None,
    }
    body = render_to_string(f"events/emails/{template}.txt", context)
    return send_email(to=registration.participant.email, subject=subject, body=body)


@shared_task(name="events.send_registration_email")
def send_registration_email(registration_id: str | UUID) -> bool:
    """Tell the participant their registration was received or confirmed."""
    registration = Registration.objects.full().get(pk=registration_id)
    if not registration.participant.email:
        logger.info("registration_email_skipped", registration_id=str(registration_id), reason="no_email")
        return False
    if registration.status == Registration.Status.CONFIRMED:
        subject = f"Registration confirmed: {registration.event.name}"
        return _send_registration_mail(registration, "registration_confirmed", subject)
    subject = f"Registration received: {registration.event.name}"
    return _send_registration_mail(registration, "registration_pending", subject)


@shared_task(name="events.send_payment_decision_email")
def send_payment_decision_email(registration_id: str | UUID) -> bool:
    """Tell the participant whether their payment was approved or rejected."""
    registration = Registration.objects.full().get(pk=registration_id)
    if not registration.participant.email:
        return False
    if registration.status == Registration.Status.CONFIRMED:
        subject = f"Payment approved: {registration.event.name}"
        return _send_registration_mail(registration, "payment_approved", subject)
    subject = f"Payment rejected: {registration.event.name}"
    return _send_registration_mail(registration, "payment_rejected", subject)


@shared_task(name="events.send_team_registration_emails")
def send_team_registration_emails(team_id: str | UUID) -> int:
    """Send every member of a completed team their ticket.

    Returns:
        The number of emails handed to the mail backend.
    """
    team = Team.objects.get(pk=team_id)
    sent = 0
    for registration in team.registrations.full().filter(status=Registration.Status.CONFIRMED):
        if not registration.participant.email:
            continue
        subject = f"Team registration confirmed: {registration.event.name}"
        if _send_registration_mail(registration, "team_registration_confirmed", subject):
            sent += 1
    logger.info("team_registration_emails_sent", team_id=str(team_id), sent=sent)
    return sent
