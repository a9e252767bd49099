"""Types for the registration admission system."""

import uuid

from pydantic import BaseModel

from events.exceptions import ErrorCode

from .enums import NextStep


class RegistrationEligibility(BaseModel):
    """Result of an admission check for a participant on an event."""

    allowed: bool
    event_id: uuid.UUID
    reason: str | None = None  # we don't use the enum here because we want translation
    code: ErrorCode | None = None
    next_step: NextStep | None = None
