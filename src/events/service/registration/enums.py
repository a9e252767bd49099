"""Enums for the registration admission system."""

from enum import StrEnum

from django.utils.translation import gettext_noop


class NextStep(StrEnum):
    """Possible next steps for a participant who cannot register right now."""

    JOIN_OR_CREATE_TEAM = "join_or_create_team"
    WAIT_FOR_EVENT_TO_OPEN = "wait_for_event_to_open"
    VIEW_REGISTRATION = "view_registration"
    COMPLETE_PROFILE = "complete_profile"


class Reasons(StrEnum):
    """Reasons why a participant cannot register.

    Note: Strings are marked with _noop() for translation extraction.
    The actual translation happens in gates.py when using _(Reasons.XXX).
    """

    EVENT_IS_NOT_OPEN = gettext_noop("Event is not open for registration.")
    EVENT_HAS_FINISHED = gettext_noop("Event has finished.")
    REGISTRATION_DEADLINE_PASSED = gettext_noop("Registration deadline has passed.")
    TEAM_EVENT = gettext_noop("This is a team event. Create or join a team to register.")
    EVENT_IS_FULL = gettext_noop("Event is full.")
    ALREADY_REGISTERED = gettext_noop("You are already registered.")
    PARTICIPANT_TYPE_MISSING = gettext_noop("Set your participant type to register for this event.")
    ELIGIBILITY_MISMATCH = gettext_noop("This event is only for {eligibility} participants.")
