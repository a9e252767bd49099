from .event import Event, EventVariant
from .registration import Registration, RegistrationStatusChange
from .team import Team, TeamMember

__all__ = [
    "Event",
    "EventVariant",
    "Registration",
    "RegistrationStatusChange",
    "Team",
    "TeamMember",
]
