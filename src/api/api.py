from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import HttpRequest
from ninja_extra import NinjaExtraAPI
from ninja_jwt.controller import NinjaJWTDefaultController

from accounts.controllers import AccountController
from common.schema import ResponseOk, VersionResponse
from common.throttling import AnonDefaultThrottle, UserDefaultThrottle
from events.controllers.event_admin import EVENT_ADMIN_CONTROLLERS
from events.controllers.events import EventController
from events.controllers.registrations import RegistrationController
from events.controllers.teams import TeamController
from events.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    TicketVerificationError,
)
from events.exceptions import ValidationError as EngineValidationError

from .exception_handlers import (
    handle_authorization_error,
    handle_conflict_error,
    handle_django_validation_error,
    handle_engine_validation_error,
    handle_general_exception,
    handle_not_found_error,
    handle_ticket_verification_error,
)

api = NinjaExtraAPI(
    title="Felicity Backend API",
    docs_url="/docs",
    version=settings.VERSION,
    description=f"Felicity API {settings.VERSION}",
    app_name=f"felicity-api-{settings.VERSION}",
    urls_namespace="api",
    servers=[
        {"url": settings.SERVICE_URL, "description": settings.SERVICE_DESCRIPTION},
    ],
    throttle=[AnonDefaultThrottle(), UserDefaultThrottle()],
)


@api.get("/version", tags=["Version"], response={200: VersionResponse})
def version(request: HttpRequest) -> tuple[int, VersionResponse]:
    """Get the API version.

    Args:
        request: The incoming HTTP request.

    Returns:
        The response status code and message.
    """
    return 200, VersionResponse(version=settings.VERSION)


@api.get("/healthcheck", tags=["Healthcheck"], response={200: ResponseOk})
def healthcheck(request: HttpRequest) -> tuple[int, ResponseOk]:
    """Check the health of the API."""
    return 200, ResponseOk()


api.register_controllers(
    # Auth/Account controllers
    NinjaJWTDefaultController,
    AccountController,
    # Event controllers
    EventController,
    RegistrationController,
    TeamController,
    *EVENT_ADMIN_CONTROLLERS,
)

EXCEPTION_HANDLERS = {
    Exception: handle_general_exception,
    ValidationError: handle_django_validation_error,
    EngineValidationError: handle_engine_validation_error,
    NotFoundError: handle_not_found_error,
    AuthorizationError: handle_authorization_error,
    ConflictError: handle_conflict_error,
    TicketVerificationError: handle_ticket_verification_error,
}

for exc, handler in EXCEPTION_HANDLERS.items():
    api.add_exception_handler(exc, handler)
