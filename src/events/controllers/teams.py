from uuid import UUID

from django.shortcuts import get_object_or_404
from ninja_extra import api_controller, route
from ninja_jwt.authentication import JWTAuth

from common.controllers import UserAwareController
from common.throttling import RegistrationThrottle, UserDefaultThrottle, WriteThrottle
from events import models, schema
from events.service import team_service


@api_controller("/teams", auth=JWTAuth(), tags=["Teams"], throttle=WriteThrottle())
class TeamController(UserAwareController):
    @route.get("/", url_name="my_teams", response=list[schema.TeamSchema], throttle=UserDefaultThrottle())
    def my_teams(self) -> list[models.Team]:
        """List the teams the user leads or belongs to."""
        return list(team_service.get_my_teams(self.user()))

    @route.post("/", url_name="create_team", response={201: schema.TeamSchema}, throttle=RegistrationThrottle())
    def create_team(self, payload: schema.TeamCreateSchema) -> tuple[int, models.Team]:
        """Create a team for a team event and become its leader.

        Share the returned invite code with teammates. The team registers once
        it has `team_size` accepted members.
        """
        event = get_object_or_404(models.Event.objects.published(), pk=payload.event_id)
        team = team_service.create_team(self.user(), event, payload.name, payload.team_size)
        return 201, team_service.get_team(team.pk, self.user())

    @route.post("/join", url_name="join_team", response=schema.TeamSchema, throttle=RegistrationThrottle())
    def join_team(self, payload: schema.TeamJoinSchema) -> models.Team:
        """Join a team by invite code. The last member to join completes the team."""
        team = team_service.join_team(self.user(), payload.invite_code)
        return team_service.get_team(team.pk, self.user())

    @route.get("/{uuid:team_id}", url_name="get_team", response=schema.TeamSchema, throttle=UserDefaultThrottle())
    def get_team(self, team_id: UUID) -> models.Team:
        return team_service.get_team(team_id, self.user())

    @route.post("/{uuid:team_id}/leave", url_name="leave_team", response={204: None})
    def leave_team(self, team_id: UUID) -> tuple[int, None]:
        """Leave a team that is still forming. The leader cancels instead."""
        team_service.leave_team(team_service.get_team(team_id, self.user()), self.user())
        return 204, None

    @route.post("/{uuid:team_id}/cancel", url_name="cancel_team", response=schema.TeamSchema)
    def cancel_team(self, team_id: UUID) -> models.Team:
        team = team_service.cancel_team(team_service.get_team(team_id, self.user()), self.user())
        return team_service.get_team(team.pk, self.user())
