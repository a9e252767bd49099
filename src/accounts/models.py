import re
import typing as t
import uuid

from django.conf import settings
from django.contrib.auth.models import AbstractUser, UserManager
from django.core.exceptions import ValidationError
from django.db import models


class FelicityUserQueryset(models.QuerySet["FelicityUser"]):
    """Queryset for FelicityUser."""

    def organizers(self) -> "FelicityUserQueryset":
        """Users allowed to run events."""
        return self.filter(role=FelicityUser.Role.ORGANIZER)


class FelicityUserManager(UserManager["FelicityUser"]):
    def get_queryset(self) -> FelicityUserQueryset:
        """Get queryset for FelicityUser."""
        return FelicityUserQueryset(self.model)

    def create_superuser(  # type: ignore[override]
        self, username: str, email: str | None = None, password: str | None = None, **extra_fields: t.Any
    ) -> "FelicityUser":
        """Superusers always get the admin role."""
        extra_fields.setdefault("role", FelicityUser.Role.ADMIN)
        return super().create_superuser(username, email, password, **extra_fields)


class FelicityUser(AbstractUser):
    class Role(models.TextChoices):
        PARTICIPANT = "participant", "Participant"
        ORGANIZER = "organizer", "Organizer"
        ADMIN = "admin", "Admin"

    class ParticipantType(models.TextChoices):
        IIIT = "iiit", "IIIT"
        NON_IIIT = "non_iiit", "Non-IIIT"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.PARTICIPANT, db_index=True)
    participant_type = models.CharField(
        max_length=20,
        choices=ParticipantType.choices,
        null=True,
        blank=True,
        help_text="Used to enforce event eligibility restrictions.",
    )
    contact_number = models.CharField(max_length=20, blank=True)
    college = models.CharField(max_length=255, blank=True)

    objects = FelicityUserManager()  # type: ignore[misc]

    class Meta:
        ordering = ["username"]

    def clean(self) -> None:
        """IIIT participants must sign up with an institute address."""
        super().clean()
        domain = settings.IIIT_EMAIL_DOMAIN
        if self.participant_type == self.ParticipantType.IIIT and not (self.email or "").lower().endswith(domain):
            raise ValidationError({"email": f"IIIT participants must register with an address ending in {domain}."})

    @property
    def is_admin(self) -> bool:
        """Admins and superusers may act on every event."""
        return self.role == self.Role.ADMIN or self.is_superuser

    @property
    def display_name(self) -> str:
        """Display name."""
        return self.get_display_name()

    def get_display_name(self) -> str:
        """Returns the user's full name, falling back to the username."""
        return self.get_full_name() or re.sub(r"(\W|_)+", " ", self.username.split("@")[0]).title()
