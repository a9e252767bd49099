"""HMAC-based signing for event tickets.

A ticket is a small set of claims that identifies the holder and the event.
The claims are serialized to compact JSON in a fixed key order and signed
with HMAC-SHA256. The signature is carried next to the claims as ``sig``
and rendered, together with the claims, into the ticket QR code.

Ticket Format:
    {"ticketID": "FEL-1A2B3C4D", "event": "Hackathon", "eventId": "...",
     "participant": "Ada Lovelace", "email": "ada@example.com", "sig": "a1b2c3d4e5f6"}

Security:
    - Uses TICKET_SIGNING_KEY, or Django's SECRET_KEY with a domain-specific prefix for isolation
    - Signatures are 12 hex chars (48 bits). Tickets are verified server-side against the
      database record, so the signature only has to make forged QR codes impractical.
    - Uses hmac.compare_digest() to prevent timing attacks
    - There is no key rotation: changing the key invalidates every issued ticket
"""

import hashlib
import hmac
import typing as t
from functools import lru_cache

import orjson
from django.conf import settings
from django.core.signals import setting_changed
from django.dispatch import receiver

__all__ = [
    "SIGNATURE_LENGTH",
    "TicketClaims",
    "SignedTicket",
    "sign_claims",
    "issue",
    "verify",
]

# Signature length in hex characters (48 bits = 12 hex chars)
SIGNATURE_LENGTH = 12

# Domain separator for key derivation
# Ensures the ticket key is isolated from other SECRET_KEY uses
_KEY_DOMAIN = "felicity:ticket:v1"


class TicketClaims(t.NamedTuple):
    """The signed part of a ticket. Field order is the serialization order."""

    ticket_id: str
    event: str
    event_id: str
    participant: str
    email: str

    def as_payload(self) -> dict[str, str]:
        """Wire representation, keys in signing order."""
        return {
            "ticketID": self.ticket_id,
            "event": self.event,
            "eventId": self.event_id,
            "participant": self.participant,
            "email": self.email,
        }

    def serialize(self) -> bytes:
        """Compact JSON bytes of the claims."""
        return orjson.dumps(self.as_payload())


class SignedTicket(t.NamedTuple):
    claims: TicketClaims
    sig: str

    def as_payload(self) -> dict[str, str]:
        """The claims with the signature appended."""
        return {**self.claims.as_payload(), "sig": self.sig}

    def serialize(self) -> bytes:
        """Compact JSON bytes of the full ticket, as embedded in the QR code."""
        return orjson.dumps(self.as_payload())


@lru_cache(maxsize=1)
def _get_signing_key() -> bytes:
    """Get the ticket signing key.

    An explicit TICKET_SIGNING_KEY wins. Otherwise the key is derived from
    SECRET_KEY with a domain separator, so that it is distinct from every
    other use of SECRET_KEY.

    The key is computed on first use and cached for the lifetime of the process.
    """
    if settings.TICKET_SIGNING_KEY:
        return str(settings.TICKET_SIGNING_KEY).encode()
    return hashlib.sha256(f"{_KEY_DOMAIN}:{settings.SECRET_KEY}".encode()).digest()


@receiver(setting_changed)
def _reset_signing_key(setting: str, **kwargs: t.Any) -> None:
    if setting in ("TICKET_SIGNING_KEY", "SECRET_KEY"):
        _get_signing_key.cache_clear()


def sign_claims(claims: TicketClaims) -> str:
    """Generate the HMAC signature for a set of claims.

    Returns:
        Hex-encoded signature (truncated to SIGNATURE_LENGTH chars).
    """
    return hmac.new(_get_signing_key(), claims.serialize(), hashlib.sha256).hexdigest()[:SIGNATURE_LENGTH]


def issue(claims: TicketClaims) -> SignedTicket:
    """Sign the claims and return the ticket."""
    return SignedTicket(claims=claims, sig=sign_claims(claims))


def verify(claims: TicketClaims, sig: str | None) -> bool:
    """Check a signature against freshly serialized claims.

    Args:
        claims: The claims as rebuilt by the server, never as presented by the client.
        sig: The signature presented with the ticket.

    Returns:
        True if the signature matches byte for byte, False otherwise.
    """
    if not sig or not isinstance(sig, str):
        return False
    return hmac.compare_digest(sig.encode(), sign_claims(claims).encode())
