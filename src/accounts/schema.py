"""Schema for accounts module."""

from ninja import ModelSchema, Schema
from pydantic import UUID4

from common.schema import StrippedString

from .models import FelicityUser


class FelicityUserSchema(ModelSchema):
    id: UUID4
    display_name: str
    role: FelicityUser.Role
    participant_type: FelicityUser.ParticipantType | None = None

    class Meta:
        model = FelicityUser
        fields = ["username", "email", "first_name", "last_name", "contact_number", "college"]


class MinimalFelicityUserSchema(ModelSchema):
    id: UUID4
    display_name: str

    class Meta:
        model = FelicityUser
        fields = ["email", "first_name", "last_name"]


class ProfileUpdateSchema(Schema):
    first_name: StrippedString = ""
    last_name: StrippedString = ""
    contact_number: StrippedString = ""
    college: StrippedString = ""
    participant_type: FelicityUser.ParticipantType | None = None
