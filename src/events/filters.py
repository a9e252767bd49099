from datetime import datetime
from functools import reduce
from uuid import UUID

from django.db.models import Q
from ninja import Field, FilterSchema

from events.models import Event, Registration


class EventFilterSchema(FilterSchema):
    organizer: list[UUID] | None = Field(None, q="organizer_id__in")  # type: ignore[call-overload]
    event_type: Event.EventType | None = None
    status: Event.EventStatus | None = None
    eligibility: Event.Eligibility | None = None
    is_team_event: bool | None = None
    start_date: datetime | None = Field(None, q="start_date__gte")  # type: ignore[call-overload]
    end_date: datetime | None = Field(None, q="end_date__lte")  # type: ignore[call-overload]
    tags: list[str] | None = None

    def filter_eligibility(self, eligibility: Event.Eligibility | None) -> Q:
        """Events open to everyone match any eligibility."""
        if not eligibility or eligibility == Event.Eligibility.ALL:
            return Q()
        return Q(eligibility__in=[eligibility, Event.Eligibility.ALL])

    def filter_tags(self, tags: list[str] | None) -> Q:
        """Events carrying any of the tags."""
        if not tags:
            return Q()
        # Tags are stored as a JSON list, so match the quoted element.
        return reduce(lambda acc, tag: acc | Q(tags__icontains=f'"{tag}"'), tags, Q())


class RegistrationFilterSchema(FilterSchema):
    status: Registration.Status | None = None
    attended: bool | None = None
