"""Tests for RegistrationManager and the admission gates."""

import re
import typing as t
from datetime import timedelta

import pytest
from django.core import mail
from django.utils import timezone

from accounts.models import FelicityUser
from events.exceptions import (
    AlreadyRegisteredError,
    ErrorCode,
    EventFullError,
    InsufficientStockError,
    NotEligibleError,
    PurchaseLimitExceededError,
    RegistrationClosedError,
    ValidationError,
)
from events.models import Event, EventVariant, Registration
from events.service.registration import NextStep, RegistrationManager

pytestmark = pytest.mark.django_db

TSHIRT_M = [{"name": "T-Shirt", "option": "M"}]


class TestInitialStatus:
    def test_free_event_confirms_immediately(self, free_event: Event, participant: FelicityUser) -> None:
        registration = RegistrationManager(participant, free_event).register()

        assert registration.status == Registration.Status.CONFIRMED
        assert re.fullmatch(r"FEL-[0-9A-F]{8}", registration.ticket_id)
        free_event.refresh_from_db()
        assert free_event.registered_count == 1
        assert list(registration.status_history.values_list("status", flat=True)) == ["confirmed"]

    def test_priced_event_starts_pending_and_holds_a_seat(
        self, priced_event: Event, participant: FelicityUser
    ) -> None:
        registration = RegistrationManager(participant, priced_event).register()

        assert registration.status == Registration.Status.PENDING
        priced_event.refresh_from_db()
        assert priced_event.registered_count == 1

    def test_merchandise_order_starts_pending_without_capacity(
        self, merch_event: Event, participant: FelicityUser
    ) -> None:
        registration = RegistrationManager(participant, merch_event).register(
            selected_variants=TSHIRT_M, quantity=2
        )

        assert registration.status == Registration.Status.PENDING
        assert registration.quantity == 2
        assert registration.selected_variants == TSHIRT_M
        merch_event.refresh_from_db()
        assert merch_event.registered_count == 0

    def test_normal_event_quantity_is_always_one(self, free_event: Event, participant: FelicityUser) -> None:
        registration = RegistrationManager(participant, free_event).register(quantity=5)
        assert registration.quantity == 1


class TestAdmission:
    def test_last_seat_goes_to_the_first_registrant(
        self, event_factory: t.Any, participant: FelicityUser, other_participant: FelicityUser
    ) -> None:
        event = event_factory(limit=1)
        RegistrationManager(participant, event).register()

        with pytest.raises(EventFullError):
            RegistrationManager(other_participant, event).register()

        event.refresh_from_db()
        assert event.registered_count == 1
        assert not Registration.objects.filter(participant=other_participant).exists()

    def test_duplicate_registration_is_rejected(self, free_event: Event, participant: FelicityUser) -> None:
        RegistrationManager(participant, free_event).register()
        with pytest.raises(AlreadyRegisteredError):
            RegistrationManager(participant, free_event).register()

    def test_cancelled_registration_does_not_block_a_new_one(
        self, free_event: Event, participant: FelicityUser
    ) -> None:
        first = RegistrationManager(participant, free_event).register()
        first.transition_to(Registration.Status.CANCELLED)

        second = RegistrationManager(participant, free_event).register()
        assert second.ticket_id != first.ticket_id

    def test_draft_event_is_closed(self, event_factory: t.Any, participant: FelicityUser) -> None:
        event = event_factory(status=Event.EventStatus.DRAFT)
        with pytest.raises(RegistrationClosedError):
            RegistrationManager(participant, event).register()

    def test_completed_event_is_closed(self, event_factory: t.Any, participant: FelicityUser) -> None:
        event = event_factory(status=Event.EventStatus.COMPLETED)
        with pytest.raises(RegistrationClosedError):
            RegistrationManager(participant, event).register()

    def test_past_deadline_is_closed(self, event_factory: t.Any, participant: FelicityUser) -> None:
        event = event_factory(registration_deadline=timezone.now() - timedelta(hours=1))
        with pytest.raises(RegistrationClosedError):
            RegistrationManager(participant, event).register()

    def test_ended_event_is_closed(self, event_factory: t.Any, participant: FelicityUser) -> None:
        now = timezone.now()
        event = event_factory(
            start_date=now - timedelta(days=2),
            end_date=now - timedelta(days=1),
            registration_deadline=now - timedelta(days=3),
        )
        with pytest.raises(RegistrationClosedError):
            RegistrationManager(participant, event).register()

    def test_ongoing_event_accepts_registrations(self, event_factory: t.Any, participant: FelicityUser) -> None:
        event = event_factory(status=Event.EventStatus.ONGOING)
        assert RegistrationManager(participant, event).register().status == Registration.Status.CONFIRMED

    def test_team_event_rejects_individual_registration(
        self, team_event: Event, participant: FelicityUser
    ) -> None:
        with pytest.raises(ValidationError):
            RegistrationManager(participant, team_event).register()


class TestEligibility:
    def test_iiit_event_rejects_non_iiit_participant(self, event_factory: t.Any, participant: FelicityUser) -> None:
        event = event_factory(eligibility=Event.Eligibility.IIIT)
        with pytest.raises(NotEligibleError):
            RegistrationManager(participant, event).register()

    def test_iiit_event_admits_iiit_participant(self, event_factory: t.Any, iiit_participant: FelicityUser) -> None:
        event = event_factory(eligibility=Event.Eligibility.IIIT)
        assert RegistrationManager(iiit_participant, event).register().status == Registration.Status.CONFIRMED

    def test_restricted_event_requires_a_participant_type(self, event_factory: t.Any, user: FelicityUser) -> None:
        event = event_factory(eligibility=Event.Eligibility.NON_IIIT)
        eligibility = RegistrationManager(user, event).check_eligibility()
        assert eligibility.allowed is False
        assert eligibility.code == ErrorCode.NOT_ELIGIBLE
        assert eligibility.next_step == NextStep.COMPLETE_PROFILE

    def test_check_eligibility_does_not_write(self, free_event: Event, participant: FelicityUser) -> None:
        eligibility = RegistrationManager(participant, free_event).check_eligibility()
        assert eligibility.allowed is True
        assert eligibility.event_id == free_event.pk
        assert not Registration.objects.exists()

    def test_check_eligibility_reports_full_event(self, event_factory: t.Any, participant: FelicityUser) -> None:
        event = event_factory(limit=1)
        Event.objects.filter(pk=event.pk).update(registered_count=1)
        eligibility = RegistrationManager(participant, event).check_eligibility()
        assert eligibility.allowed is False
        assert eligibility.code == ErrorCode.EVENT_FULL

    def test_closed_is_reported_before_full(self, event_factory: t.Any, participant: FelicityUser) -> None:
        event = event_factory(limit=1, status=Event.EventStatus.DRAFT)
        Event.objects.filter(pk=event.pk).update(registered_count=1)
        eligibility = RegistrationManager(participant, event).check_eligibility()
        assert eligibility.code == ErrorCode.REGISTRATION_CLOSED
        assert eligibility.next_step == NextStep.WAIT_FOR_EVENT_TO_OPEN


class TestFormResponses:
    @pytest.fixture
    def event_with_form(self, event_factory: t.Any) -> Event:
        return event_factory(
            form_fields=[
                {"label": "Roll number", "type": "text", "required": True},
                {"label": "Dietary needs", "type": "text", "required": False},
            ]
        )

    def test_required_field_must_be_answered(self, event_with_form: Event, participant: FelicityUser) -> None:
        with pytest.raises(ValidationError, match="Roll number"):
            RegistrationManager(participant, event_with_form).register(
                responses=[{"label": "Dietary needs", "value": "none"}]
            )

    def test_unknown_field_is_rejected(self, event_with_form: Event, participant: FelicityUser) -> None:
        with pytest.raises(ValidationError):
            RegistrationManager(participant, event_with_form).register(
                responses=[{"label": "Roll number", "value": "2021101"}, {"label": "Shoe size", "value": "9"}]
            )

    def test_answers_are_stored(self, event_with_form: Event, participant: FelicityUser) -> None:
        registration = RegistrationManager(participant, event_with_form).register(
            responses=[{"label": "Roll number", "value": "2021101"}]
        )
        assert registration.responses == [{"label": "Roll number", "value": "2021101"}]

    def test_failed_validation_releases_nothing(self, event_with_form: Event, participant: FelicityUser) -> None:
        with pytest.raises(ValidationError):
            RegistrationManager(participant, event_with_form).register()
        event_with_form.refresh_from_db()
        assert event_with_form.registered_count == 0
        assert not Registration.objects.exists()


class TestMerchandiseAdmission:
    def test_pending_orders_reserve_stock(
        self, merch_event: Event, participant: FelicityUser, other_participant: FelicityUser
    ) -> None:
        RegistrationManager(participant, merch_event).register(selected_variants=TSHIRT_M, quantity=2)

        with pytest.raises(InsufficientStockError, match="Variant T-Shirt has only 0 available"):
            RegistrationManager(other_participant, merch_event).register(selected_variants=TSHIRT_M)

    def test_purchase_limit_spans_orders(self, merch_event: Event, participant: FelicityUser) -> None:
        EventVariant.objects.filter(event=merch_event).update(stock=10)
        RegistrationManager(participant, merch_event).register(selected_variants=TSHIRT_M, quantity=3)

        with pytest.raises(PurchaseLimitExceededError):
            RegistrationManager(participant, merch_event).register(selected_variants=TSHIRT_M, quantity=3)

    def test_repeat_purchases_are_allowed(self, merch_event: Event, participant: FelicityUser) -> None:
        RegistrationManager(participant, merch_event).register(selected_variants=TSHIRT_M)
        RegistrationManager(participant, merch_event).register(selected_variants=TSHIRT_M)
        assert Registration.objects.filter(participant=participant).count() == 2

    def test_pending_orders_count_against_the_limit(self, event_factory: t.Any, participant: FelicityUser) -> None:
        event = event_factory(event_type=Event.EventType.MERCHANDISE, limit=2, purchase_limit_per_user=5)
        EventVariant.objects.create(event=event, name="Mug", stock=10)
        RegistrationManager(participant, event).register(selected_variants=[{"name": "Mug"}], quantity=2)

        with pytest.raises(EventFullError):
            RegistrationManager(participant, event).register(selected_variants=[{"name": "Mug"}])

    def test_a_variant_must_be_selected(self, merch_event: Event, participant: FelicityUser) -> None:
        with pytest.raises(ValidationError):
            RegistrationManager(participant, merch_event).register()

    def test_quantity_must_be_positive(self, merch_event: Event, participant: FelicityUser) -> None:
        with pytest.raises(ValidationError):
            RegistrationManager(participant, merch_event).register(selected_variants=TSHIRT_M, quantity=0)


class TestNotification:
    def test_confirmation_email_is_sent_after_commit(
        self, free_event: Event, participant: FelicityUser, django_capture_on_commit_callbacks: t.Any
    ) -> None:
        with django_capture_on_commit_callbacks(execute=True):
            registration = RegistrationManager(participant, free_event).register()

        assert len(mail.outbox) == 1
        assert mail.outbox[0].subject == "Registration confirmed: Free Talk"
        assert registration.ticket_id in mail.outbox[0].body
        assert mail.outbox[0].to == [participant.email]

    def test_pending_email_for_priced_event(
        self, priced_event: Event, participant: FelicityUser, django_capture_on_commit_callbacks: t.Any
    ) -> None:
        with django_capture_on_commit_callbacks(execute=True):
            RegistrationManager(participant, priced_event).register()

        assert mail.outbox[0].subject == "Registration received: Paid Workshop"
        assert "pending" in mail.outbox[0].body

    def test_failed_registration_sends_nothing(
        self, event_factory: t.Any, participant: FelicityUser, django_capture_on_commit_callbacks: t.Any
    ) -> None:
        event = event_factory(status=Event.EventStatus.DRAFT)
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            with pytest.raises(RegistrationClosedError):
                RegistrationManager(participant, event).register()
        assert callbacks == []
        assert mail.outbox == []
