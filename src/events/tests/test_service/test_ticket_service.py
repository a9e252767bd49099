import typing as t
import uuid

import orjson
import pytest

from accounts.models import FelicityUser
from common import signing
from events.exceptions import AuthorizationError, TicketVerificationError, ValidationError
from events.models import Event, Registration
from events.service import registration_service, ticket_service
from events.service.registration import RegistrationManager

pytestmark = pytest.mark.django_db


@pytest.fixture
def confirmed(free_event: Event, participant: FelicityUser) -> Registration:
    return RegistrationManager(participant, free_event).register()


class TestIssueTicket:
    def test_claims_come_from_the_registration(self, confirmed: Registration, free_event: Event) -> None:
        ticket = ticket_service.issue_ticket(confirmed)

        assert ticket.as_payload() == {
            "ticketID": confirmed.ticket_id,
            "event": "Free Talk",
            "eventId": str(free_event.pk),
            "participant": "Ada Lovelace",
            "email": "participant@example.com",
            "sig": ticket.sig,
        }
        assert len(ticket.sig) == signing.SIGNATURE_LENGTH

    def test_pending_registration_has_no_ticket(self, priced_event: Event, participant: FelicityUser) -> None:
        registration = RegistrationManager(participant, priced_event).register()
        with pytest.raises(ValidationError):
            ticket_service.issue_ticket(registration)

    def test_only_the_owner_gets_the_ticket(self, confirmed: Registration, other_participant: FelicityUser) -> None:
        with pytest.raises(AuthorizationError):
            ticket_service.get_ticket(confirmed, other_participant)

    def test_qr_code_is_a_png_data_url(self, confirmed: Registration) -> None:
        assert ticket_service.ticket_qr_code(ticket_service.issue_ticket(confirmed)).startswith(
            "data:image/png;base64,"
        )

    def test_serialized_ticket_is_compact_json(self, confirmed: Registration) -> None:
        ticket = ticket_service.issue_ticket(confirmed)
        assert orjson.loads(ticket.serialize())["sig"] == ticket.sig


class TestVerifyTicket:
    def test_valid_ticket(self, confirmed: Registration, free_event: Event) -> None:
        ticket = ticket_service.issue_ticket(confirmed)
        assert ticket_service.verify_ticket(confirmed.ticket_id, ticket.sig, free_event.pk) == confirmed

    def test_ticket_id_is_normalized(self, confirmed: Registration, free_event: Event) -> None:
        ticket = ticket_service.issue_ticket(confirmed)
        assert ticket_service.verify_ticket(f" {confirmed.ticket_id.lower()} ", ticket.sig, free_event.pk) == confirmed

    def test_forged_signature(self, confirmed: Registration, free_event: Event) -> None:
        with pytest.raises(TicketVerificationError):
            ticket_service.verify_ticket(confirmed.ticket_id, "000000000000", free_event.pk)

    def test_missing_signature(self, confirmed: Registration, free_event: Event) -> None:
        with pytest.raises(TicketVerificationError):
            ticket_service.verify_ticket(confirmed.ticket_id, None, free_event.pk)

    def test_unknown_ticket_fails_like_a_forgery(self, free_event: Event) -> None:
        with pytest.raises(TicketVerificationError) as unknown:
            ticket_service.verify_ticket("FEL-00000000", "abcdefabcdef", free_event.pk)
        assert unknown.value.message == TicketVerificationError().message

    def test_ticket_for_another_event(self, confirmed: Registration, priced_event: Event) -> None:
        ticket = ticket_service.issue_ticket(confirmed)
        with pytest.raises(TicketVerificationError):
            ticket_service.verify_ticket(confirmed.ticket_id, ticket.sig, priced_event.pk)

    def test_nonexistent_event(self, confirmed: Registration) -> None:
        ticket = ticket_service.issue_ticket(confirmed)
        with pytest.raises(TicketVerificationError):
            ticket_service.verify_ticket(confirmed.ticket_id, ticket.sig, uuid.uuid4())

    def test_ticket_is_bound_to_the_participant_name(
        self, confirmed: Registration, free_event: Event, participant: FelicityUser
    ) -> None:
        ticket = ticket_service.issue_ticket(confirmed)
        participant.first_name = "Augusta"
        participant.save()

        with pytest.raises(TicketVerificationError):
            ticket_service.verify_ticket(confirmed.ticket_id, ticket.sig, free_event.pk)

    def test_signing_key_change_invalidates_tickets(
        self, confirmed: Registration, free_event: Event, settings: t.Any
    ) -> None:
        ticket = ticket_service.issue_ticket(confirmed)
        settings.TICKET_SIGNING_KEY = "rotated"

        with pytest.raises(TicketVerificationError):
            ticket_service.verify_ticket(confirmed.ticket_id, ticket.sig, free_event.pk)

    def test_non_ascii_signature_fails_like_a_forgery(self, confirmed: Registration, free_event: Event) -> None:
        with pytest.raises(TicketVerificationError):
            ticket_service.verify_ticket(confirmed.ticket_id, "é" * 11, free_event.pk)

    def test_cancelled_registration_no_longer_verifies(
        self, confirmed: Registration, free_event: Event, participant: FelicityUser
    ) -> None:
        ticket = ticket_service.issue_ticket(confirmed)
        registration_service.cancel_registration(confirmed, participant)

        with pytest.raises(TicketVerificationError):
            ticket_service.verify_ticket(confirmed.ticket_id, ticket.sig, free_event.pk)

    def test_pending_registration_does_not_verify(self, priced_event: Event, participant: FelicityUser) -> None:
        pending = RegistrationManager(participant, priced_event).register()
        sig = signing.sign_claims(ticket_service.build_claims(pending))

        with pytest.raises(TicketVerificationError):
            ticket_service.verify_ticket(pending.ticket_id, sig, priced_event.pk)
