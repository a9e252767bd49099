"""Events schema package.

Schemas are grouped by the model they describe and re-exported here.
"""

from .event import (
    EventCreateSchema,
    EventSchema,
    EventStatusSchema,
    EventUpdateSchema,
    FormFieldSchema,
    MinimalEventSchema,
    VariantCreateSchema,
    VariantSchema,
)
from .registration import (
    AdminRegistrationSchema,
    FormResponseSchema,
    RegistrationCreateSchema,
    RegistrationSchema,
    RejectRegistrationSchema,
    StatusChangeSchema,
    TicketSchema,
    TicketVerificationResultSchema,
    TicketVerifySchema,
    VariantSelectionSchema,
)
from .team import TeamCreateSchema, TeamJoinSchema, TeamMemberSchema, TeamSchema

__all__ = [
    "AdminRegistrationSchema",
    "EventCreateSchema",
    "EventSchema",
    "EventStatusSchema",
    "EventUpdateSchema",
    "FormFieldSchema",
    "FormResponseSchema",
    "MinimalEventSchema",
    "RegistrationCreateSchema",
    "RegistrationSchema",
    "RejectRegistrationSchema",
    "StatusChangeSchema",
    "TeamCreateSchema",
    "TeamJoinSchema",
    "TeamMemberSchema",
    "TeamSchema",
    "TicketSchema",
    "TicketVerificationResultSchema",
    "TicketVerifySchema",
    "VariantCreateSchema",
    "VariantSchema",
    "VariantSelectionSchema",
]
