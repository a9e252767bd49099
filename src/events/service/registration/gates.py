"""Admission gate classes for the registration system.

Each gate performs one admission check. Gates are composed together by the
RegistrationEligibilityService, and the first gate that blocks decides the
outcome, so their order is the order in which errors are reported.
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

from django.utils.translation import gettext as _

from events.exceptions import ErrorCode
from events.models import Event, Registration
from events.service import capacity

from .enums import NextStep, Reasons
from .types import RegistrationEligibility

if TYPE_CHECKING:
    from accounts.models import FelicityUser

    from .service import RegistrationEligibilityService


class BaseAdmissionGate(abc.ABC):
    """Abstract Base Class for a composable admission check."""

    def __init__(self, handler: RegistrationEligibilityService) -> None:
        """Initialize the admission check."""
        self.handler = handler
        self.user: FelicityUser = handler.user
        self.event: Event = handler.event

    def deny(self, reason: str, code: ErrorCode, next_step: NextStep | None = None) -> RegistrationEligibility:
        return RegistrationEligibility(
            allowed=False, event_id=self.event.pk, reason=reason, code=code, next_step=next_step
        )

    @abc.abstractmethod
    def check(self) -> RegistrationEligibility | None:
        """Perform the admission check.

        Returns:
            RegistrationEligibility if this gate blocks access, None to continue to next gate.
        """


class EventStatusGate(BaseAdmissionGate):
    """Gate #1: The event must be published or ongoing, and not over."""

    def check(self) -> RegistrationEligibility | None:
        """Check the event lifecycle."""
        if self.event.has_ended(self.handler.now):
            return self.deny(_(Reasons.EVENT_HAS_FINISHED), ErrorCode.REGISTRATION_CLOSED)
        if self.event.status not in Event.OPEN_STATUSES:
            return self.deny(
                _(Reasons.EVENT_IS_NOT_OPEN),
                ErrorCode.REGISTRATION_CLOSED,
                next_step=NextStep.WAIT_FOR_EVENT_TO_OPEN if self.event.status == Event.EventStatus.DRAFT else None,
            )
        return None


class DeadlineGate(BaseAdmissionGate):
    """Gate #2: The registration deadline must not have passed."""

    def check(self) -> RegistrationEligibility | None:
        """Check the deadline."""
        if self.event.deadline_passed(self.handler.now):
            return self.deny(_(Reasons.REGISTRATION_DEADLINE_PASSED), ErrorCode.REGISTRATION_CLOSED)
        return None


class IndividualRegistrationGate(BaseAdmissionGate):
    """Gate #3: Team events only admit participants through their team."""

    def check(self) -> RegistrationEligibility | None:
        """Check the event is not a team event."""
        if self.event.is_team_event:
            return self.deny(_(Reasons.TEAM_EVENT), ErrorCode.VALIDATION, next_step=NextStep.JOIN_OR_CREATE_TEAM)
        return None


class AvailabilityGate(BaseAdmissionGate):
    """Gate #4: There must be room for the requested quantity.

    For merchandise events Pending orders count against the limit as well.
    """

    def check(self) -> RegistrationEligibility | None:
        """Check remaining capacity."""
        if capacity.available(self.event) < self.handler.quantity:
            return self.deny(_(Reasons.EVENT_IS_FULL), ErrorCode.EVENT_FULL)
        return None


class DuplicateRegistrationGate(BaseAdmissionGate):
    """Gate #5: One active registration per participant for Normal events.

    Merchandise events allow repeat purchases, bounded by the purchase limit.
    """

    def check(self) -> RegistrationEligibility | None:
        """Check for an existing Pending or Confirmed registration."""
        if self.event.is_merchandise:
            return None
        if Registration.objects.active().filter(event=self.event, participant=self.user).exists():
            return self.deny(
                _(Reasons.ALREADY_REGISTERED), ErrorCode.ALREADY_REGISTERED, next_step=NextStep.VIEW_REGISTRATION
            )
        return None


class ParticipantTypeGate(BaseAdmissionGate):
    """Gate #6: Restricted events only admit the matching participant type."""

    def check(self) -> RegistrationEligibility | None:
        """Compare the event eligibility with the participant type."""
        if self.event.eligibility == Event.Eligibility.ALL:
            return None
        if not self.user.participant_type:
            return self.deny(
                _(Reasons.PARTICIPANT_TYPE_MISSING), ErrorCode.NOT_ELIGIBLE, next_step=NextStep.COMPLETE_PROFILE
            )
        if self.user.participant_type != self.event.eligibility:
            label = Event.Eligibility(self.event.eligibility).label
            return self.deny(
                _(Reasons.ELIGIBILITY_MISMATCH).format(eligibility=label.removesuffix(" only")),
                ErrorCode.NOT_ELIGIBLE,
            )
        return None


REGISTRATION_GATES: list[type[BaseAdmissionGate]] = [
    EventStatusGate,
    DeadlineGate,
    IndividualRegistrationGate,
    AvailabilityGate,
    DuplicateRegistrationGate,
    ParticipantTypeGate,
]

TEAM_GATES: list[type[BaseAdmissionGate]] = [
    EventStatusGate,
    DeadlineGate,
    AvailabilityGate,
    DuplicateRegistrationGate,
    ParticipantTypeGate,
]