"""Errors raised by the registration engine.

Every error carries a stable ``code`` so callers can branch on the kind of
failure without parsing messages. The API maps the kind (the base class) to
an HTTP status in ``api.exception_handlers``.
"""

from enum import StrEnum


class ErrorCode(StrEnum):
    VALIDATION = "validation_error"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    REGISTRATION_CLOSED = "registration_closed"
    EVENT_FULL = "event_full"
    ALREADY_REGISTERED = "already_registered"
    NOT_ELIGIBLE = "not_eligible"
    INSUFFICIENT_STOCK = "insufficient_stock"
    PURCHASE_LIMIT_EXCEEDED = "purchase_limit_exceeded"
    ALREADY_ATTENDED = "already_attended"
    INVALID_STATUS_TRANSITION = "invalid_status_transition"
    ALREADY_IN_TEAM = "already_in_team"
    TEAM_FULL = "team_full"
    TEAM_NOT_FORMING = "team_not_forming"
    EVENT_NOT_EDITABLE = "event_not_editable"
    INVALID_TICKET = "invalid_ticket"


class RegistrationEngineError(Exception):
    """Base class for all domain errors."""

    default_code: ErrorCode = ErrorCode.VALIDATION
    default_message: str = "Invalid request."

    def __init__(self, message: str | None = None, *, code: ErrorCode | None = None) -> None:
        """Store a human-readable message and a machine-readable code."""
        self.message = message or self.default_message
        self.code = code or self.default_code
        super().__init__(self.message)


# ---- Kinds ----


class ValidationError(RegistrationEngineError):
    """The request is malformed or violates a business rule on its own input."""


class NotFoundError(RegistrationEngineError):
    default_code = ErrorCode.NOT_FOUND
    default_message = "Not found."


class AuthorizationError(RegistrationEngineError):
    default_code = ErrorCode.FORBIDDEN
    default_message = "Not authorized."


class ConflictError(RegistrationEngineError):
    """The request is valid but conflicts with the current state."""


class TicketVerificationError(RegistrationEngineError):
    """Raised for any ticket that fails verification.

    The message is always the same so callers cannot tell an unknown ticket
    from a forged signature.
    """

    default_code = ErrorCode.INVALID_TICKET
    default_message = "Invalid ticket."

    def __init__(self) -> None:
        """Always use the generic message."""
        super().__init__()


# ---- Concrete errors ----


class RegistrationClosedError(ValidationError):
    default_code = ErrorCode.REGISTRATION_CLOSED
    default_message = "Registration is closed."


class NotEligibleError(AuthorizationError):
    default_code = ErrorCode.NOT_ELIGIBLE
    default_message = "You are not eligible for this event."


class EventFullError(ConflictError):
    default_code = ErrorCode.EVENT_FULL
    default_message = "Event is full."


class AlreadyRegisteredError(ConflictError):
    default_code = ErrorCode.ALREADY_REGISTERED
    default_message = "You are already registered."


class InsufficientStockError(ConflictError):
    default_code = ErrorCode.INSUFFICIENT_STOCK
    default_message = "Insufficient stock."


class PurchaseLimitExceededError(ConflictError):
    default_code = ErrorCode.PURCHASE_LIMIT_EXCEEDED
    default_message = "Purchase limit reached."


class AlreadyAttendedError(ConflictError):
    default_code = ErrorCode.ALREADY_ATTENDED
    default_message = "Attendance has already been marked."


class InvalidStatusTransitionError(ConflictError):
    default_code = ErrorCode.INVALID_STATUS_TRANSITION
    default_message = "This status change is not allowed."


class AlreadyInTeamError(ConflictError):
    default_code = ErrorCode.ALREADY_IN_TEAM
    default_message = "You already have a team for this event."


class TeamFullError(ConflictError):
    default_code = ErrorCode.TEAM_FULL
    default_message = "Team is full."


class TeamNotFormingError(ConflictError):
    default_code = ErrorCode.TEAM_NOT_FORMING
    default_message = "Team is no longer accepting changes."


class EventNotEditableError(ConflictError):
    default_code = ErrorCode.EVENT_NOT_EDITABLE
    default_message = "This event can no longer be edited."
