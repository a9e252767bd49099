import typing as t
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from accounts.models import FelicityUser
from events.models import Event, EventVariant


@pytest.fixture
def organizer(felicity_user_factory: t.Callable[..., FelicityUser]) -> FelicityUser:
    return felicity_user_factory(username="organizer", role=FelicityUser.Role.ORGANIZER)


@pytest.fixture
def other_organizer(felicity_user_factory: t.Callable[..., FelicityUser]) -> FelicityUser:
    return felicity_user_factory(username="other_organizer", role=FelicityUser.Role.ORGANIZER)


@pytest.fixture
def admin_user(felicity_user_factory: t.Callable[..., FelicityUser]) -> FelicityUser:
    return felicity_user_factory(username="admin", role=FelicityUser.Role.ADMIN)


@pytest.fixture
def participant(felicity_user_factory: t.Callable[..., FelicityUser]) -> FelicityUser:
    return felicity_user_factory(
        username="participant", first_name="Ada", last_name="Lovelace", participant_type="non_iiit"
    )


@pytest.fixture
def other_participant(felicity_user_factory: t.Callable[..., FelicityUser]) -> FelicityUser:
    return felicity_user_factory(username="other_participant", participant_type="non_iiit")


@pytest.fixture
def iiit_participant(felicity_user_factory: t.Callable[..., FelicityUser]) -> FelicityUser:
    return felicity_user_factory(
        username="iiit_participant", email="student@students.iiit.ac.in", participant_type="iiit"
    )


class EventFactory(t.Protocol):
    def __call__(self, **kwargs: t.Any) -> Event: ...


@pytest.fixture
def event_factory(organizer: FelicityUser, next_week: datetime) -> EventFactory:
    """Create published events that are open for registration unless told otherwise."""

    def _create(**kwargs: t.Any) -> Event:
        defaults: dict[str, t.Any] = {
            "organizer": organizer,
            "name": "Hackathon",
            "status": Event.EventStatus.PUBLISHED,
            "start_date": next_week,
            "end_date": next_week + timedelta(days=1),
            "registration_deadline": next_week - timedelta(days=1),
            "limit": 10,
        }
        defaults.update(kwargs)
        return Event.objects.create(**defaults)

    return _create


@pytest.fixture
def free_event(event_factory: EventFactory) -> Event:
    return event_factory(name="Free Talk")


@pytest.fixture
def priced_event(event_factory: EventFactory) -> Event:
    return event_factory(name="Paid Workshop", price=Decimal("200.00"))


@pytest.fixture
def merch_event(event_factory: EventFactory) -> Event:
    event = event_factory(
        name="Felicity T-Shirt",
        event_type=Event.EventType.MERCHANDISE,
        price=Decimal("350.00"),
        purchase_limit_per_user=5,
    )
    EventVariant.objects.create(event=event, name="T-Shirt", options=["S", "M", "L"], stock=2)
    return event


@pytest.fixture
def team_event(event_factory: EventFactory) -> Event:
    return event_factory(name="Team Hackathon", is_team_event=True, min_team_size=2, max_team_size=3, limit=6)

