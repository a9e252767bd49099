"""Tests for the HMAC ticket signing module."""

import hashlib
import hmac

import orjson
import pytest
from django.conf import settings as django_settings
from pytest_django.fixtures import Settings as SettingsWrapper

from common.signing import SIGNATURE_LENGTH, TicketClaims, issue, sign_claims, verify


@pytest.fixture
def claims() -> TicketClaims:
    return TicketClaims(
        ticket_id="FEL-0A1B2C3D",
        event="Hackathon",
        event_id="0b5a3c4e-6f1d-4b6a-9a3e-2f1c0d9e8b7a",
        participant="Ada Lovelace",
        email="ada@example.com",
    )


class TestSerialization:
    def test_keys_are_serialized_in_signing_order(self, claims: TicketClaims) -> None:
        assert list(orjson.loads(claims.serialize()).keys()) == ["ticketID", "event", "eventId", "participant", "email"]

    def test_serialization_is_compact(self, claims: TicketClaims) -> None:
        assert b", " not in claims.serialize()
        assert b": " not in claims.serialize()

    def test_signed_ticket_appends_sig_last(self, claims: TicketClaims) -> None:
        ticket = issue(claims)
        payload = orjson.loads(ticket.serialize())
        assert list(payload.keys())[-1] == "sig"
        assert payload["sig"] == ticket.sig


class TestIssue:
    def test_signature_has_correct_length(self, claims: TicketClaims) -> None:
        assert len(issue(claims).sig) == SIGNATURE_LENGTH

    def test_signature_is_hex(self, claims: TicketClaims) -> None:
        assert all(c in "0123456789abcdef" for c in issue(claims).sig)

    def test_signature_is_deterministic(self, claims: TicketClaims) -> None:
        assert issue(claims).sig == issue(claims).sig

    def test_signature_is_truncated_hmac_sha256_of_claims(
        self, claims: TicketClaims, settings: SettingsWrapper
    ) -> None:
        settings.TICKET_SIGNING_KEY = "test-key"
        expected = hmac.new(b"test-key", claims.serialize(), hashlib.sha256).hexdigest()[:12]
        assert sign_claims(claims) == expected


class TestVerify:
    def test_issued_ticket_verifies(self, claims: TicketClaims) -> None:
        ticket = issue(claims)
        assert verify(ticket.claims, ticket.sig) is True

    @pytest.mark.parametrize("field", TicketClaims._fields)
    def test_mutating_any_claim_fails(self, claims: TicketClaims, field: str) -> None:
        ticket = issue(claims)
        tampered = claims._replace(**{field: getattr(claims, field) + "x"})
        assert verify(tampered, ticket.sig) is False

    def test_wrong_signature_fails(self, claims: TicketClaims) -> None:
        assert verify(claims, "000000000000") is False

    @pytest.mark.parametrize("sig", [None, "", "abc"])
    def test_missing_or_malformed_signature_fails(self, claims: TicketClaims, sig: str | None) -> None:
        assert verify(claims, sig) is False

    def test_signature_is_compared_exactly(self, claims: TicketClaims) -> None:
        sig = issue(claims).sig
        assert verify(claims, sig.upper()) is (sig == sig.upper())
        assert verify(claims, sig + " ") is False

    @pytest.mark.parametrize("sig", ["\u00e9" * 12, "\u00e9", "a1b2c3d4e5f\u00e9"])
    def test_non_ascii_signature_fails(self, claims: TicketClaims, sig: str) -> None:
        assert verify(claims, sig) is False

    def test_key_change_invalidates_tickets(self, claims: TicketClaims, settings: SettingsWrapper) -> None:
        settings.TICKET_SIGNING_KEY = "first-key"
        ticket = issue(claims)
        settings.TICKET_SIGNING_KEY = "second-key"
        assert verify(claims, ticket.sig) is False

    def test_default_key_is_derived_from_secret_key(self, claims: TicketClaims, settings: SettingsWrapper) -> None:
        settings.TICKET_SIGNING_KEY = ""
        key = hashlib.sha256(f"felicity:ticket:v1:{django_settings.SECRET_KEY}".encode()).digest()
        expected = hmac.new(key, claims.serialize(), hashlib.sha256).hexdigest()[:12]
        assert sign_claims(claims) == expected
