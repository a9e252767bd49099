"""Event-related schemas."""

import typing as t
from decimal import Decimal
from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import AwareDatetime, Field, model_validator

from accounts.schema import MinimalFelicityUserSchema
from common.schema import OneToOneFiftyString, StrippedString
from events.models import Event, EventVariant


class FormFieldSchema(Schema):
    label: OneToOneFiftyString
    type: t.Literal["text", "number", "email", "select", "checkbox", "textarea"] = "text"
    required: bool = False
    options: list[str] = Field(default_factory=list)


class VariantCreateSchema(Schema):
    name: OneToOneFiftyString
    options: list[str] = Field(default_factory=list)
    stock: int = Field(0, ge=0)


class VariantSchema(ModelSchema):
    id: UUID

    class Meta:
        model = EventVariant
        fields = ["name", "options", "stock"]


class EventEditSchema(Schema):
    description: StrippedString | None = None
    venue: StrippedString | None = None
    event_type: Event.EventType | None = None
    eligibility: Event.Eligibility | None = None
    start_date: AwareDatetime | None = None
    end_date: AwareDatetime | None = None
    registration_deadline: AwareDatetime | None = None
    limit: int | None = Field(None, ge=1)
    price: Decimal | None = Field(None, ge=0)
    form_fields: list[FormFieldSchema] | None = None
    purchase_limit_per_user: int | None = Field(None, ge=1)
    is_team_event: bool | None = None
    min_team_size: int | None = Field(None, ge=1)
    max_team_size: int | None = Field(None, ge=1)
    tags: list[str] | None = None


class EventCreateSchema(EventEditSchema):
    name: OneToOneFiftyString
    start_date: AwareDatetime
    end_date: AwareDatetime
    registration_deadline: AwareDatetime
    limit: int = Field(..., ge=1)
    description: StrippedString = ""
    venue: StrippedString = ""
    event_type: Event.EventType = Event.EventType.NORMAL
    eligibility: Event.Eligibility = Event.Eligibility.ALL
    price: Decimal = Field(Decimal("0"), ge=0)
    form_fields: list[FormFieldSchema] = Field(default_factory=list)
    purchase_limit_per_user: int = Field(1, ge=1)
    is_team_event: bool = False
    min_team_size: int = Field(2, ge=1)
    max_team_size: int = Field(4, ge=1)
    tags: list[str] = Field(default_factory=list)
    variants: list[VariantCreateSchema] = Field(default_factory=list)

    @model_validator(mode="after")
    def variants_only_for_merchandise(self) -> t.Self:
        """Only merchandise events sell variants."""
        if self.variants and self.event_type != Event.EventType.MERCHANDISE:
            raise ValueError("Only merchandise events can have variants.")
        return self


class EventUpdateSchema(EventEditSchema):
    """Partial update. Which fields may change depends on the event status."""

    name: OneToOneFiftyString | None = None
    status: Event.EventStatus | None = None
    variants: list[VariantCreateSchema] | None = None


class EventStatusSchema(Schema):
    status: Event.EventStatus


class MinimalEventSchema(Schema):
    id: UUID
    name: str
    event_type: Event.EventType
    status: Event.EventStatus
    start_date: AwareDatetime
    end_date: AwareDatetime


class EventSchema(ModelSchema):
    id: UUID
    organizer: MinimalFelicityUserSchema
    event_type: Event.EventType
    status: Event.EventStatus
    eligibility: Event.Eligibility
    variants: list[VariantSchema]

    class Meta:
        model = Event
        fields = [
            "name",
            "description",
            "venue",
            "start_date",
            "end_date",
            "registration_deadline",
            "limit",
            "registered_count",
            "price",
            "form_fields",
            "purchase_limit_per_user",
            "is_team_event",
            "min_team_size",
            "max_team_size",
            "tags",
            "created_at",
            "updated_at",
        ]

    @staticmethod
    def resolve_variants(obj: Event) -> list[EventVariant]:
        return list(obj.variants.all())
