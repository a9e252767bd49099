"""Exception handlers for the API."""

import typing as t
from copy import deepcopy

import structlog
from django.core.exceptions import ValidationError
from django.http import HttpRequest
from ninja.responses import Response

from events.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    RegistrationEngineError,
    TicketVerificationError,
)
from events.exceptions import ValidationError as EngineValidationError

logger = structlog.get_logger(__name__)


def handle_general_exception(request: HttpRequest, exc: Exception | t.Type[Exception]) -> Response:
    """Handle a general exception.

    Args:
        request: The incoming HTTP request.
        exc: The exception.

    Returns:
        The response.
    """
    logger.exception(
        "INTERNAL_SERVER_ERROR",
        path=f"{request.method} {request.path}",
        headers=obfuscate(dict(request.headers)),
        user=str(request.user) if getattr(request, "user", None) else None,
    )
    return Response(status=500, data={"detail": "Internal Server Error."})


def handle_django_validation_error(request: HttpRequest, exc: ValidationError | t.Type[ValidationError]) -> Response:
    """Handle a model validation error.

    Args:
        request: The incoming HTTP request.
        exc: The exception.
    """
    logger.warning("VALIDATION_ERROR", path=request.path)
    if hasattr(exc, "error_dict"):
        error_dict = {k: [ee for e in v for ee in e] for k, v in exc.error_dict.items()}
    else:
        error_dict = {"__all__": list(exc.messages)}  # type: ignore[union-attr]
    return Response(status=400, data={"errors": error_dict})


def _engine_error_response(status: int, exc: RegistrationEngineError) -> Response:
    return Response(status=status, data={"code": str(exc.code), "detail": exc.message})


def handle_engine_validation_error(
    request: HttpRequest, exc: EngineValidationError | t.Type[EngineValidationError]
) -> Response:
    """Handle a rejected request, e.g. a closed registration or a missing form answer."""
    return _engine_error_response(400, t.cast(EngineValidationError, exc))


def handle_not_found_error(request: HttpRequest, exc: NotFoundError | t.Type[NotFoundError]) -> Response:
    """Handle a missing resource, e.g. an unknown invite code."""
    return _engine_error_response(404, t.cast(NotFoundError, exc))


def handle_authorization_error(
    request: HttpRequest, exc: AuthorizationError | t.Type[AuthorizationError]
) -> Response:
    """Handle an action the user may not perform, including eligibility mismatches."""
    return _engine_error_response(403, t.cast(AuthorizationError, exc))


def handle_conflict_error(request: HttpRequest, exc: ConflictError | t.Type[ConflictError]) -> Response:
    """Handle a request that conflicts with current state, e.g. a full event."""
    return _engine_error_response(409, t.cast(ConflictError, exc))


def handle_ticket_verification_error(
    request: HttpRequest, exc: TicketVerificationError | t.Type[TicketVerificationError]
) -> Response:
    """Handle a failed ticket verification. The detail never says which check failed."""
    return _engine_error_response(400, t.cast(TicketVerificationError, exc))


SENSITIVE_KEYS = {"password", "token", "x-api-key", "authorization", "authentication", "cookie"}


def obfuscate(data: dict[str, t.Any]) -> dict[str, t.Any]:
    """Obfuscate sensitive data in payloads and headers."""
    new_data = deepcopy(data)
    for key in data.keys():
        if key.lower() in SENSITIVE_KEYS:
            new_data[key] = "********"
    return new_data


