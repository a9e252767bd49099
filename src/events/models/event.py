import typing as t
from datetime import datetime

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from common.models import TimeStampedModel
from events.exceptions import InvalidStatusTransitionError


class EventQuerySet(models.QuerySet["Event"]):
    def published(self) -> t.Self:
        """Events that participants can see."""
        return self.exclude(status=Event.EventStatus.DRAFT)

    def for_organizer(self, user: t.Any) -> t.Self:
        """Events the user may administer. Admins see everything."""
        if getattr(user, "is_admin", False):
            return self.all()
        return self.filter(organizer=user)

    def with_variants(self) -> t.Self:
        """Prefetch the variants of merchandise events."""
        return self.prefetch_related("variants")


class Event(TimeStampedModel):
    class EventType(models.TextChoices):
        NORMAL = "normal", "Normal"
        MERCHANDISE = "merchandise", "Merchandise"

    class EventStatus(models.TextChoices):
        DRAFT = "draft", "Draft"
        PUBLISHED = "published", "Published"
        ONGOING = "ongoing", "Ongoing"
        COMPLETED = "completed", "Completed"
        CLOSED = "closed", "Closed"

    class Eligibility(models.TextChoices):
        ALL = "all", "All"
        IIIT = "iiit", "IIIT only"
        NON_IIIT = "non_iiit", "Non-IIIT only"

    ALLOWED_TRANSITIONS: t.ClassVar[dict[str, frozenset[str]]] = {
        EventStatus.DRAFT: frozenset({EventStatus.PUBLISHED}),
        EventStatus.PUBLISHED: frozenset({EventStatus.ONGOING, EventStatus.CLOSED}),
        EventStatus.ONGOING: frozenset({EventStatus.COMPLETED, EventStatus.CLOSED}),
        EventStatus.COMPLETED: frozenset({EventStatus.CLOSED}),
        EventStatus.CLOSED: frozenset(),
    }
    OPEN_STATUSES: t.ClassVar[tuple[str, ...]] = (EventStatus.PUBLISHED, EventStatus.ONGOING)

    organizer = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="organized_events"
    )
    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True, default="")
    venue = models.CharField(max_length=255, blank=True, default="")
    event_type = models.CharField(
        max_length=20, choices=EventType.choices, default=EventType.NORMAL, db_index=True
    )
    status = models.CharField(max_length=20, choices=EventStatus.choices, default=EventStatus.DRAFT, db_index=True)
    eligibility = models.CharField(max_length=20, choices=Eligibility.choices, default=Eligibility.ALL)
    start_date = models.DateTimeField(db_index=True)
    end_date = models.DateTimeField()
    registration_deadline = models.DateTimeField()
    limit = models.PositiveIntegerField(validators=[MinValueValidator(1)], help_text="Capacity ceiling.")
    registered_count = models.PositiveIntegerField(default=0, editable=False)
    price = models.DecimalField(max_digits=10, decimal_places=2, default=0, validators=[MinValueValidator(0)])
    form_fields = models.JSONField(default=list, blank=True, help_text="Custom registration form definition.")
    purchase_limit_per_user = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    is_team_event = models.BooleanField(default=False)
    min_team_size = models.PositiveIntegerField(default=2, validators=[MinValueValidator(1)])
    max_team_size = models.PositiveIntegerField(default=4, validators=[MinValueValidator(1)])
    tags = models.JSONField(default=list, blank=True)

    objects = EventQuerySet.as_manager()

    class Meta:
        ordering = ["start_date"]
        constraints = [
            models.CheckConstraint(
                condition=Q(registered_count__lte=F("limit")),
                name="event_registered_count_within_limit",
            ),
        ]

    def __str__(self) -> str:
        return self.name

    def clean(self) -> None:
        """Validate dates and team bounds."""
        errors: dict[str, str] = {}
        if self.start_date and self.end_date and self.end_date < self.start_date:
            errors["end_date"] = "End date must be after the start date."
        if self.registration_deadline and self.end_date and self.registration_deadline > self.end_date:
            errors["registration_deadline"] = "Registration deadline must not be after the end date."
        if self.is_team_event:
            if self.event_type == self.EventType.MERCHANDISE:
                errors["is_team_event"] = "Merchandise events cannot be team events."
            elif self.min_team_size > self.max_team_size:
                errors["min_team_size"] = "Minimum team size must not exceed the maximum."
        if errors:
            raise ValidationError(errors)

    @property
    def is_merchandise(self) -> bool:
        return self.event_type == self.EventType.MERCHANDISE

    @property
    def is_priced(self) -> bool:
        return self.price > 0

    def has_ended(self, now: datetime | None = None) -> bool:
        """Whether the event end date is in the past."""
        return (now or timezone.now()) > self.end_date

    def deadline_passed(self, now: datetime | None = None) -> bool:
        """Whether the registration deadline is in the past."""
        return (now or timezone.now()) > self.registration_deadline

    def can_be_managed_by(self, user: t.Any) -> bool:
        """Organizers manage their own events, admins manage every event."""
        return bool(getattr(user, "is_admin", False) or self.organizer_id == getattr(user, "id", None))

    def can_transition_to(self, status: str) -> bool:
        return status in self.ALLOWED_TRANSITIONS[self.status]

    def transition_to(self, status: str) -> None:
        """Move the event along its lifecycle.

        Raises:
            InvalidStatusTransitionError: if the edge is not in the lifecycle graph.
        """
        if not self.can_transition_to(status):
            raise InvalidStatusTransitionError(f"Cannot change event status from {self.status} to {status}.")
        self.status = status
        self.save(update_fields=["status", "updated_at"])


class EventVariant(TimeStampedModel):
    """A purchasable variant of a merchandise event, e.g. a T-shirt size."""

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="variants")
    name = models.CharField(max_length=100)
    options = models.JSONField(default=list, blank=True)
    stock = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(fields=["event", "name"], name="unique_variant_name_per_event"),
        ]

    def __str__(self) -> str:
        return f"{self.event_id}:{self.name}"
