import secrets
import typing as t

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from common.models import TimeStampedModel
from events.exceptions import InvalidStatusTransitionError

from .event import Event


class RegistrationQuerySet(models.QuerySet["Registration"]):
    def active(self) -> t.Self:
        """Registrations that still count against the participant (Pending or Confirmed)."""
        return self.filter(status__in=Registration.ACTIVE_STATUSES)

    def pending(self) -> t.Self:
        return self.filter(status=Registration.Status.PENDING)

    def full(self) -> t.Self:
        """Select the related objects needed to render a ticket."""
        return self.select_related("event", "participant", "team")

    def generate_ticket_id(self) -> str:
        """Allocate a ticket id that is not in use yet, regenerating on collision."""
        while True:
            ticket_id = f"{settings.TICKET_ID_PREFIX}{secrets.token_hex(4).upper()}"
            if not self.filter(ticket_id=ticket_id).exists():
                return ticket_id


class Registration(TimeStampedModel):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        CONFIRMED = "confirmed", "Confirmed"
        CANCELLED = "cancelled", "Cancelled"
        REJECTED = "rejected", "Rejected"

    ALLOWED_TRANSITIONS: t.ClassVar[dict[str, frozenset[str]]] = {
        Status.PENDING: frozenset({Status.CONFIRMED, Status.CANCELLED, Status.REJECTED}),
        Status.CONFIRMED: frozenset({Status.CANCELLED}),
        Status.CANCELLED: frozenset(),
        Status.REJECTED: frozenset(),
    }
    ACTIVE_STATUSES: t.ClassVar[tuple[str, ...]] = (Status.PENDING, Status.CONFIRMED)

    participant = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="registrations"
    )
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="registrations")
    team = models.ForeignKey(
        "events.Team", on_delete=models.SET_NULL, null=True, blank=True, related_name="registrations"
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING, db_index=True)
    ticket_id = models.CharField(max_length=32, unique=True, editable=False)
    responses = models.JSONField(default=list, blank=True)
    selected_variants = models.JSONField(default=list, blank=True)
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    attended = models.BooleanField(default=False)
    attended_at = models.DateTimeField(null=True, blank=True)
    payment_proof = models.FileField(upload_to="payment_proofs/", null=True, blank=True)
    rejection_comment = models.TextField(blank=True, default="")

    objects = RegistrationQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["event", "status"], name="ix_registration_event_status"),
            models.Index(fields=["participant", "event"], name="ix_registration_participant_evt"),
        ]

    def __str__(self) -> str:
        return self.ticket_id

    @property
    def is_active(self) -> bool:
        return self.status in self.ACTIVE_STATUSES

    def can_transition_to(self, status: str) -> bool:
        return status in self.ALLOWED_TRANSITIONS[self.status]

    def transition_to(
        self, status: str, *, comment: str = "", changed_by: t.Any = None
    ) -> "RegistrationStatusChange":
        """Change status and append the change to the history.

        Raises:
            InvalidStatusTransitionError: if the registration cannot move to ``status``.
        """
        if not self.can_transition_to(status):
            raise InvalidStatusTransitionError(f"Cannot change registration from {self.status} to {status}.")
        self.status = status
        update_fields = ["status", "updated_at"]
        if status == self.Status.REJECTED:
            self.rejection_comment = comment
            update_fields.append("rejection_comment")
        self.save(update_fields=update_fields)
        return self.status_history.create(status=status, comment=comment, changed_by=changed_by)

    def mark_attended(self) -> None:
        """Set the attendance latch."""
        self.attended = True
        self.attended_at = timezone.now()
        self.save(update_fields=["attended", "attended_at", "updated_at"])


class RegistrationStatusChange(TimeStampedModel):
    """Append-only audit trail of registration status changes."""

    registration = models.ForeignKey(Registration, on_delete=models.CASCADE, related_name="status_history")
    status = models.CharField(max_length=20, choices=Registration.Status.choices)
    comment = models.TextField(blank=True, default="")
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )

    class Meta:
        ordering = ["created_at"]

    def __str__(self) -> str:
        return f"{self.registration_id} -> {self.status}"

    @property
    def changed_at(self) -> t.Any:
        return self.created_at
