"""Team formation for team events.

A team collects accepted members until it reaches its target size. The join
that fills the last slot completes the team: it consumes capacity for the whole
team and creates one Confirmed registration per member in the same
transaction, so a team is never Complete without every member's ticket.
"""

from functools import partial
from uuid import UUID

import structlog
from django.db import transaction
from django.db.models import QuerySet

from accounts.models import FelicityUser
from events import tasks
from events.exceptions import (
    AlreadyInTeamError,
    AlreadyRegisteredError,
    AuthorizationError,
    NotFoundError,
    TeamFullError,
    TeamNotFormingError,
    ValidationError,
)
from events.models import Event, Registration, Team, TeamMember
from events.service import capacity
from events.service.capacity import event_lock
from events.service.registration.gates import TEAM_GATES
from events.service.registration.service import RegistrationEligibilityService

logger = structlog.get_logger(__name__)


def _assert_not_in_team(user: FelicityUser, event: Event) -> None:
    if Team.objects.not_cancelled().filter(event=event, members__user=user).exists():
        raise AlreadyInTeamError()


def create_team(leader: FelicityUser, event: Event, name: str, team_size: int) -> Team:
    """Create a Forming team with the leader as its first accepted member.

    A team of one completes immediately.

    Raises:
        ValidationError: if the event is not a team event or the size is out of bounds.
        AlreadyInTeamError: if the leader already has a team for the event.
        RegistrationClosedError, EventFullError, AlreadyRegisteredError, NotEligibleError
    """
    with event_lock(event.pk) as event:
        if not event.is_team_event:
            raise ValidationError("This event does not accept teams.")
        if not event.min_team_size <= team_size <= event.max_team_size:
            raise ValidationError(
                f"Team size must be between {event.min_team_size} and {event.max_team_size}."
            )
        RegistrationEligibilityService(leader, event, quantity=team_size, gates=TEAM_GATES).assert_eligible()
        _assert_not_in_team(leader, event)

        team = Team.objects.create(
            event=event,
            name=name,
            leader=leader,
            team_size=team_size,
            invite_code=Team.objects.generate_invite_code(),
        )
        TeamMember.objects.create(team=team, user=leader, status=TeamMember.Status.ACCEPTED)
        if team_size == 1:
            _complete_team(team, event)

    logger.info("team_created", team_id=str(team.pk), event_id=str(event.pk), team_size=team_size)
    return team


def join_team(user: FelicityUser, invite_code: str) -> Team:
    """Join a Forming team by invite code, completing it if this fills the last slot.

    Raises:
        NotFoundError: if no team has the invite code.
        TeamNotFormingError, AlreadyInTeamError, TeamFullError
        RegistrationClosedError, EventFullError, AlreadyRegisteredError, NotEligibleError
    """
    code = (invite_code or "").strip().upper()
    team_event_id = Team.objects.filter(invite_code=code).values_list("event_id", flat=True).first()
    if team_event_id is None:
        raise NotFoundError("Invalid invite code.")

    with event_lock(team_event_id) as event:
        team = Team.objects.select_for_update().get(invite_code=code)
        if not team.is_forming:
            raise TeamNotFormingError()
        if team.members.filter(user=user).exists():
            raise AlreadyInTeamError("You are already a member of this team.")
        _assert_not_in_team(user, event)
        RegistrationEligibilityService(user, event, quantity=team.team_size, gates=TEAM_GATES).assert_eligible()
        accepted = team.members.filter(status=TeamMember.Status.ACCEPTED).count()
        if accepted >= team.team_size:
            raise TeamFullError()

        TeamMember.objects.create(team=team, user=user, status=TeamMember.Status.ACCEPTED)
        if accepted + 1 == team.team_size:
            _complete_team(team, event)

    logger.info("team_joined", team_id=str(team.pk), event_id=str(event.pk), status=team.status)
    return team


def _complete_team(team: Team, event: Event) -> list[Registration]:
    """Forming -> Complete. Must run inside ``event_lock``.

    Raises:
        AlreadyRegisteredError: if a member registered for the event in the meantime.
        EventFullError: if the team no longer fits; the caller's transaction rolls back.
    """
    members = [member.user for member in team.accepted_members()]
    if Registration.objects.active().filter(event=event, participant__in=members).exists():
        raise AlreadyRegisteredError("A team member is already registered for this event.")

    capacity.commit(event, team.team_size)
    registrations = []
    for member in members:
        registration = Registration.objects.create(
            participant=member,
            event=event,
            team=team,
            status=Registration.Status.CONFIRMED,
            ticket_id=Registration.objects.generate_ticket_id(),
            responses=[{"label": "Team", "value": team.name}],
            quantity=1,
        )
        registration.status_history.create(status=Registration.Status.CONFIRMED, changed_by=member)
        registrations.append(registration)

    team.mark_complete([registration.ticket_id for registration in registrations])
    transaction.on_commit(partial(tasks.send_team_registration_emails.delay, str(team.pk)), robust=True)
    logger.info("team_completed", team_id=str(team.pk), event_id=str(event.pk), members=len(registrations))
    return registrations


def leave_team(team: Team, user: FelicityUser) -> None:
    """Remove a non-leader member from a Forming team.

    Raises:
        TeamNotFormingError, ValidationError, NotFoundError
    """
    with event_lock(team.event_id):
        team = Team.objects.select_for_update().get(pk=team.pk)
        if not team.is_forming:
            raise TeamNotFormingError()
        if team.leader_id == user.id:
            raise ValidationError("Team leader cannot leave. Cancel the team instead.")
        deleted, _ = team.members.filter(user=user).delete()
        if not deleted:
            raise NotFoundError("You are not a member of this team.")
    logger.info("team_left", team_id=str(team.pk), user_id=str(user.pk))


def cancel_team(team: Team, user: FelicityUser) -> Team:
    """Cancel a Forming team. Leader only.

    Raises:
        AuthorizationError, TeamNotFormingError
    """
    if team.leader_id != user.id:
        raise AuthorizationError("Only the team leader can cancel the team.")
    with event_lock(team.event_id):
        team = Team.objects.select_for_update().get(pk=team.pk)
        team.cancel()
    logger.info("team_cancelled", team_id=str(team.pk))
    return team


def get_my_teams(user: FelicityUser) -> QuerySet[Team]:
    return Team.objects.for_member(user).full()


def get_event_teams(event: Event, user: FelicityUser) -> QuerySet[Team]:
    """All teams of an event, for its organizer."""
    if not event.can_be_managed_by(user):
        raise AuthorizationError()
    return Team.objects.filter(event=event).full()


def get_team(team_id: UUID, user: FelicityUser) -> Team:
    """Team detail, visible to its members and the event organizer."""
    team = Team.objects.full().filter(pk=team_id).first()
    if team is None:
        raise NotFoundError("Team not found.")
    if not team.members.filter(user=user).exists() and not team.event.can_be_managed_by(user):
        raise AuthorizationError()
    return team
