"""Team schemas."""

from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import Field

from accounts.schema import MinimalFelicityUserSchema
from common.schema import OneToOneFiftyString
from events.models import Team, TeamMember

from .event import MinimalEventSchema


class TeamCreateSchema(Schema):
    event_id: UUID
    name: OneToOneFiftyString
    team_size: int = Field(..., ge=1)


class TeamJoinSchema(Schema):
    invite_code: str = Field(..., min_length=1, max_length=16)


class TeamMemberSchema(ModelSchema):
    user: MinimalFelicityUserSchema
    status: TeamMember.Status

    class Meta:
        model = TeamMember
        fields = ["created_at"]


class TeamSchema(ModelSchema):
    id: UUID
    event: MinimalEventSchema
    leader: MinimalFelicityUserSchema
    status: Team.Status
    members: list[TeamMemberSchema]

    class Meta:
        model = Team
        fields = ["name", "team_size", "invite_code", "ticket_ids", "created_at"]

    @staticmethod
    def resolve_members(obj: Team) -> list[TeamMember]:
        return list(obj.members.all())
