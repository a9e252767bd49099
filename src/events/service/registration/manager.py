"""RegistrationManager for handling individual registrations and purchases."""

import typing as t
from functools import partial

import structlog
from django.db import transaction

from accounts.models import FelicityUser
from events import tasks
from events.exceptions import ValidationError
from events.models import Event, Registration
from events.service import capacity, stock
from events.service.capacity import event_lock

from .service import RegistrationEligibilityService
from .types import RegistrationEligibility

logger = structlog.get_logger(__name__)


class RegistrationManager:
    """The Registration Manager Class.

    It is responsible for admitting a participant to an event and creating the
    registration, ensuring the admission checks pass and that there are no
    race conditions on capacity or stock.
    """

    def __init__(self, user: FelicityUser, event: Event) -> None:
        """Initialize the RegistrationManager."""
        self.user = user
        self.event = event

    def check_eligibility(self, quantity: int = 1) -> RegistrationEligibility:
        """Run the admission gates without registering."""
        service = RegistrationEligibilityService(self.user, self.event, quantity=self._quantity(quantity))
        return service.check_eligibility()

    def register(
        self,
        *,
        responses: list[dict[str, t.Any]] | None = None,
        selected_variants: list[dict[str, t.Any]] | None = None,
        quantity: int = 1,
    ) -> Registration:
        """Register the participant.

        Normal events: one seat is reserved whether the registration starts
        Confirmed (free) or Pending (priced). Merchandise orders always start
        Pending and do not touch the counter until approved.

        Returns:
            The new Registration.

        Raises:
            RegistrationClosedError, EventFullError, AlreadyRegisteredError, NotEligibleError,
            InsufficientStockError, PurchaseLimitExceededError, ValidationError
        """
        quantity = self._quantity(quantity)
        with event_lock(self.event.pk) as event:
            self.event = event
            RegistrationEligibilityService(self.user, event, quantity=quantity).assert_eligible()
            cleaned_responses = self._validate_responses(responses or [])

            selections: list[stock.Selection] = []
            if event.is_merchandise:
                selections = stock.normalize_selections(event, selected_variants or [])
                stock.assert_purchase_limit(event, self.user, quantity)
                stock.assert_admissible(event, selections, quantity)

            status = self._initial_status()
            registration = Registration.objects.create(
                participant=self.user,
                event=event,
                status=status,
                ticket_id=Registration.objects.generate_ticket_id(),
                responses=cleaned_responses,
                selected_variants=selections,
                quantity=quantity,
            )
            registration.status_history.create(status=status, changed_by=self.user)

            if not event.is_merchandise:
                capacity.reserve(event, quantity)

            transaction.on_commit(partial(tasks.send_registration_email.delay, str(registration.pk)), robust=True)

        logger.info(
            "registration_created",
            event_id=str(event.pk),
            registration_id=str(registration.pk),
            status=status,
            quantity=quantity,
        )
        return registration

    def _quantity(self, quantity: int) -> int:
        if self.event.is_merchandise:
            if quantity < 1:
                raise ValidationError("Quantity must be at least 1.")
            return quantity
        return 1

    def _initial_status(self) -> str:
        if self.event.is_merchandise or self.event.is_priced:
            return Registration.Status.PENDING
        return Registration.Status.CONFIRMED

    def _validate_responses(self, responses: list[dict[str, t.Any]]) -> list[dict[str, t.Any]]:
        """Check the answers against the event's custom form.

        Raises:
            ValidationError: if a required field is missing or an answer refers to an unknown field.
        """
        fields = {str(field.get("label", "")): field for field in self.event.form_fields or []}
        answers: dict[str, t.Any] = {}
        for response in responses:
            label = str(response.get("label", ""))
            if fields and label not in fields:
                raise ValidationError(f'Unknown form field "{label}".')
            answers[label] = response.get("value")
        for label, field in fields.items():
            if field.get("required") and answers.get(label) in (None, "", []):
                raise ValidationError(f'"{label}" is required.')
        return [{"label": label, "value": value} for label, value in answers.items()]
