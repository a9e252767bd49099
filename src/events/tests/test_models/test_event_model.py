import typing as t
from datetime import timedelta

import pytest
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from freezegun import freeze_time

from accounts.models import FelicityUser
from events.exceptions import InvalidStatusTransitionError
from events.models import Event

pytestmark = pytest.mark.django_db


class TestClean:
    def test_valid_event(self, free_event: Event) -> None:
        free_event.clean()

    def test_end_before_start(self, free_event: Event) -> None:
        free_event.end_date = free_event.start_date - timedelta(hours=1)
        with pytest.raises(ValidationError) as exc_info:
            free_event.clean()
        assert "end_date" in exc_info.value.error_dict

    def test_deadline_after_end(self, free_event: Event) -> None:
        free_event.registration_deadline = free_event.end_date + timedelta(minutes=1)
        with pytest.raises(ValidationError) as exc_info:
            free_event.clean()
        assert "registration_deadline" in exc_info.value.error_dict

    def test_merchandise_team_event(self, merch_event: Event) -> None:
        merch_event.is_team_event = True
        with pytest.raises(ValidationError) as exc_info:
            merch_event.clean()
        assert "is_team_event" in exc_info.value.error_dict

    def test_team_bounds(self, team_event: Event) -> None:
        team_event.min_team_size = 4
        with pytest.raises(ValidationError) as exc_info:
            team_event.clean()
        assert "min_team_size" in exc_info.value.error_dict


class TestLifecycle:
    def test_forward_transitions(self, event_factory: t.Any) -> None:
        event = event_factory(status=Event.EventStatus.DRAFT)

        for status in (Event.EventStatus.PUBLISHED, Event.EventStatus.ONGOING, Event.EventStatus.COMPLETED):
            event.transition_to(status)

        event.refresh_from_db()
        assert event.status == Event.EventStatus.COMPLETED

    def test_closed_is_terminal(self, event_factory: t.Any) -> None:
        event = event_factory(status=Event.EventStatus.CLOSED)
        for status in Event.EventStatus.values:
            assert not event.can_transition_to(status)
        with pytest.raises(InvalidStatusTransitionError):
            event.transition_to(Event.EventStatus.PUBLISHED)


class TestRegistrationWindow:
    def test_open(self, free_event: Event) -> None:
        assert not free_event.has_ended()
        assert not free_event.deadline_passed()

    def test_past_deadline(self, free_event: Event) -> None:
        now = free_event.registration_deadline + timedelta(seconds=1)
        assert free_event.deadline_passed(now)
        assert not free_event.has_ended(now)

    def test_draft_is_hidden(self, event_factory: t.Any) -> None:
        event = event_factory(status=Event.EventStatus.DRAFT)
        assert event not in Event.objects.published()


def test_managed_by(free_event: Event, organizer: FelicityUser, other_organizer: FelicityUser) -> None:
    admin = FelicityUser.objects.create_superuser("root", "root@example.com", "password")

    assert free_event.can_be_managed_by(organizer)
    assert free_event.can_be_managed_by(admin)
    assert not free_event.can_be_managed_by(other_organizer)
    assert set(Event.objects.for_organizer(other_organizer)) == set()
    assert set(Event.objects.for_organizer(organizer)) == {free_event}
    assert free_event in Event.objects.for_organizer(admin)


def test_count_cannot_exceed_limit(event_factory: t.Any) -> None:
    event = event_factory(limit=1)
    with pytest.raises(IntegrityError), transaction.atomic():
        Event.objects.filter(pk=event.pk).update(registered_count=2)


def test_deadline_follows_the_clock(free_event: Event) -> None:
    with freeze_time(free_event.registration_deadline):
        assert not free_event.deadline_passed()
    with freeze_time(free_event.registration_deadline + timedelta(seconds=1)):
        assert free_event.deadline_passed()
