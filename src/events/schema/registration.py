"""Registration, ticket and payment review schemas."""

import typing as t
from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import AwareDatetime, Field

from accounts.schema import MinimalFelicityUserSchema
from common.schema import StrippedString
from events.models import Registration, RegistrationStatusChange

from .event import MinimalEventSchema


class FormResponseSchema(Schema):
    label: str
    value: t.Any = None


class VariantSelectionSchema(Schema):
    name: str
    option: str = ""


class RegistrationCreateSchema(Schema):
    responses: list[FormResponseSchema] = Field(default_factory=list)
    selected_variants: list[VariantSelectionSchema] = Field(default_factory=list)
    quantity: int = Field(1, ge=1)


class StatusChangeSchema(ModelSchema):
    status: Registration.Status
    changed_at: AwareDatetime

    class Meta:
        model = RegistrationStatusChange
        fields = ["comment"]


class RegistrationSchema(ModelSchema):
    id: UUID
    event: MinimalEventSchema
    status: Registration.Status
    team_id: UUID | None = None
    payment_proof: str | None = None

    class Meta:
        model = Registration
        fields = [
            "ticket_id",
            "responses",
            "selected_variants",
            "quantity",
            "attended",
            "attended_at",
            "rejection_comment",
            "created_at",
        ]

    @staticmethod
    def resolve_payment_proof(obj: Registration) -> str | None:
        return obj.payment_proof.url if obj.payment_proof else None


class AdminRegistrationSchema(RegistrationSchema):
    participant: MinimalFelicityUserSchema
    status_history: list[StatusChangeSchema]

    @staticmethod
    def resolve_status_history(obj: Registration) -> list[RegistrationStatusChange]:
        return list(obj.status_history.all())


class RejectRegistrationSchema(Schema):
    comment: StrippedString = ""


class TicketSchema(Schema):
    """The signed ticket payload, in its wire key names, plus its QR rendering."""

    ticketID: str
    event: str
    eventId: str
    participant: str
    email: str
    sig: str
    qrCode: str


class TicketVerifySchema(Schema):
    ticketID: str = Field(..., min_length=1, max_length=32)
    sig: str = Field(..., pattern=r"^[0-9a-fA-F]{12}$")


class TicketVerificationResultSchema(Schema):
    valid: bool = True
    ticket_id: str
    participant: str
    email: str
    status: Registration.Status
    attended: bool
