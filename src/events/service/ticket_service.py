"""Ticket issuance and verification.

A ticket is never stored: it is rebuilt from the registration on demand and
signed with ``common.signing``. Verification rebuilds the claims from the
database record, so a ticket is only valid while the data it names is.
"""

from uuid import UUID

import structlog

from accounts.models import FelicityUser
from common import signing
from events.exceptions import AuthorizationError, TicketVerificationError, ValidationError
from events.models import Registration
from events.utils import make_qr_data_url

logger = structlog.get_logger(__name__)


def build_claims(registration: Registration) -> signing.TicketClaims:
    """The claims of a registration's ticket, in signing order."""
    participant = registration.participant
    return signing.TicketClaims(
        ticket_id=registration.ticket_id,
        event=registration.event.name,
        event_id=str(registration.event_id),
        participant=participant.get_display_name(),
        email=participant.email,
    )


def issue_ticket(registration: Registration) -> signing.SignedTicket:
    """Sign the ticket of a confirmed registration.

    Raises:
        ValidationError: if the registration is not confirmed.
    """
    if registration.status != Registration.Status.CONFIRMED:
        raise ValidationError("Tickets are only available for confirmed registrations.")
    return signing.issue(build_claims(registration))


def ticket_qr_code(ticket: signing.SignedTicket) -> str:
    """The ticket JSON rendered as a QR code data URL."""
    return make_qr_data_url(ticket.serialize())


def get_ticket(registration: Registration, user: FelicityUser) -> signing.SignedTicket:
    """Return the signed ticket to its owner.

    Raises:
        AuthorizationError: if ``user`` does not own the registration.
        ValidationError: if the registration is not confirmed.
    """
    if registration.participant_id != user.id:
        raise AuthorizationError()
    return issue_ticket(registration)


def verify_ticket(ticket_id: str, sig: str | None, event_id: UUID | str) -> Registration:
    """Look a ticket up and check its signature.

    Unknown tickets, tickets for another event, tickets of registrations that
    are no longer Confirmed and bad signatures all fail the same way.

    Raises:
        TicketVerificationError
    """
    registration = (
        Registration.objects.full().filter(ticket_id=(ticket_id or "").strip().upper(), event_id=event_id).first()
    )
    if (
        registration is None
        or registration.status != Registration.Status.CONFIRMED
        or not signing.verify(build_claims(registration), sig)
    ):
        logger.info("ticket_verification_failed", event_id=str(event_id))
        raise TicketVerificationError()
    logger.info("ticket_verified", event_id=str(event_id), registration_id=str(registration.pk))
    return registration
