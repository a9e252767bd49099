"""Registration admission and management package.

This package provides the admission gates that decide whether a participant
may register for an event, and the manager that performs the registration.
"""

from .enums import NextStep, Reasons
from .manager import RegistrationManager
from .service import RegistrationEligibilityService, eligibility_error
from .types import RegistrationEligibility

__all__ = [
    "NextStep",
    "Reasons",
    "RegistrationEligibility",
    "RegistrationEligibilityService",
    "RegistrationManager",
    "eligibility_error",
]
