"""RegistrationEligibilityService for checking whether a participant may register."""

import typing as t
from datetime import datetime

from django.utils import timezone

from accounts.models import FelicityUser
from events.exceptions import (
    AlreadyRegisteredError,
    ErrorCode,
    EventFullError,
    NotEligibleError,
    RegistrationClosedError,
    RegistrationEngineError,
    ValidationError,
)
from events.models import Event

from .gates import REGISTRATION_GATES, BaseAdmissionGate
from .types import RegistrationEligibility

_ERRORS: dict[ErrorCode, type[RegistrationEngineError]] = {
    ErrorCode.REGISTRATION_CLOSED: RegistrationClosedError,
    ErrorCode.EVENT_FULL: EventFullError,
    ErrorCode.ALREADY_REGISTERED: AlreadyRegisteredError,
    ErrorCode.NOT_ELIGIBLE: NotEligibleError,
    ErrorCode.VALIDATION: ValidationError,
}


def eligibility_error(eligibility: RegistrationEligibility) -> RegistrationEngineError:
    """Turn a negative admission result into the matching domain error."""
    error_class = _ERRORS.get(eligibility.code or ErrorCode.VALIDATION, ValidationError)
    return error_class(eligibility.reason)


class RegistrationEligibilityService:
    """The Registration Eligibility Service Class.

    Runs the admission gates in order for one participant, one event and a
    requested quantity. It never writes to the database.
    """

    def __init__(
        self,
        user: FelicityUser,
        event: Event,
        quantity: int = 1,
        gates: t.Sequence[type[BaseAdmissionGate]] = REGISTRATION_GATES,
        now: datetime | None = None,
    ) -> None:
        """Initialize the service."""
        self.user = user
        self.event = event
        self.quantity = quantity
        self.now = now or timezone.now()
        self._gates: list[BaseAdmissionGate] = [gate(self) for gate in gates]

    def check_eligibility(self) -> RegistrationEligibility:
        """Run the gates and return the first denial, or an allowed result."""
        for gate in self._gates:
            if result := gate.check():
                return result
        return RegistrationEligibility(allowed=True, event_id=self.event.pk)

    def assert_eligible(self) -> None:
        """Raise the domain error of the first blocking gate.

        Raises:
            RegistrationEngineError
        """
        eligibility = self.check_eligibility()
        if not eligibility.allowed:
            raise eligibility_error(eligibility)
