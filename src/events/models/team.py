import secrets
import typing as t

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from common.models import TimeStampedModel
from events.exceptions import TeamNotFormingError

from .event import Event


class TeamQuerySet(models.QuerySet["Team"]):
    def not_cancelled(self) -> t.Self:
        return self.exclude(status=Team.Status.CANCELLED)

    def for_member(self, user: t.Any) -> t.Self:
        """Teams the user belongs to, as leader or member."""
        return self.filter(members__user=user).distinct()

    def full(self) -> t.Self:
        return self.select_related("event", "leader").prefetch_related("members__user")

    def generate_invite_code(self) -> str:
        """Allocate an unused invite code, regenerating on collision."""
        while True:
            code = secrets.token_hex(4).upper()
            if not self.filter(invite_code=code).exists():
                return code


class Team(TimeStampedModel):
    class Status(models.TextChoices):
        FORMING = "forming", "Forming"
        COMPLETE = "complete", "Complete"
        CANCELLED = "cancelled", "Cancelled"

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="teams")
    name = models.CharField(max_length=150)
    leader = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="led_teams")
    team_size = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.FORMING, db_index=True)
    invite_code = models.CharField(max_length=16, unique=True, editable=False)
    ticket_ids = models.JSONField(default=list, blank=True)

    objects = TeamQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.name

    @property
    def is_forming(self) -> bool:
        return self.status == self.Status.FORMING

    def accepted_members(self) -> models.QuerySet["TeamMember"]:
        return self.members.filter(status=TeamMember.Status.ACCEPTED).select_related("user").order_by("created_at")

    def mark_complete(self, ticket_ids: list[str]) -> None:
        """Forming -> Complete, recording the tickets issued to the members."""
        if not self.is_forming:
            raise TeamNotFormingError()
        self.status = self.Status.COMPLETE
        self.ticket_ids = ticket_ids
        self.save(update_fields=["status", "ticket_ids", "updated_at"])

    def cancel(self) -> None:
        """Forming -> Cancelled."""
        if not self.is_forming:
            raise TeamNotFormingError("Cannot cancel a completed team.")
        self.status = self.Status.CANCELLED
        self.save(update_fields=["status", "updated_at"])


class TeamMember(TimeStampedModel):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        ACCEPTED = "accepted", "Accepted"
        REJECTED = "rejected", "Rejected"

    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name="members")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="team_memberships")
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(fields=["team", "user"], name="unique_team_member"),
        ]

    def __str__(self) -> str:
        return f"{self.team_id}:{self.user_id}"
