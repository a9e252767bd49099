import typing as t
from uuid import UUID

from django.db.models import QuerySet
from django.shortcuts import get_object_or_404

from common.controllers import UserAwareController
from events import models


class EventAdminBaseController(UserAwareController):
    """Base controller for event admin endpoints.

    Object permissions decide access, so every event is looked up and a
    non-organizer gets a 403 rather than a 404.
    Subclasses should be decorated with @api_controller to register routes.
    """

    def get_queryset(self) -> QuerySet[models.Event]:
        return models.Event.objects.select_related("organizer").with_variants()

    def get_one(self, event_id: UUID) -> models.Event:
        """Wrapper helper."""
        return t.cast(models.Event, self.get_object_or_exception(self.get_queryset(), pk=event_id))

    def fetch_registration(self, event: models.Event, registration_id: UUID) -> models.Registration:
        return get_object_or_404(models.Registration.objects.full(), pk=registration_id, event=event)
