from uuid import UUID

from ninja_extra import api_controller, route
from ninja_jwt.authentication import JWTAuth

from common.throttling import UserDefaultThrottle, WriteThrottle
from events import models, schema
from events.controllers.permissions import EventPermission
from events.service import event_service, team_service

from .base import EventAdminBaseController


@api_controller(
    "/event-admin/{uuid:event_id}",
    auth=JWTAuth(),
    permissions=[EventPermission()],
    tags=["Event Admin"],
    throttle=WriteThrottle(),
)
class EventAdminCoreController(EventAdminBaseController):
    """Event editing and lifecycle endpoints."""

    @route.patch("", url_name="update_event", response=schema.EventSchema)
    def update_event(self, event_id: UUID, payload: schema.EventUpdateSchema) -> models.Event:
        """Edit an event.

        Drafts accept any change. Published events only accept a new description,
        form fields, a later deadline or a larger limit. Once registrations exist,
        only the status can change, and closed events cannot be edited at all.
        """
        event = event_service.update_event(self.get_one(event_id), self.user(), payload)
        return self.get_one(event.pk)

    @route.post("/status", url_name="update_event_status", response=schema.EventSchema)
    def update_status(self, event_id: UUID, payload: schema.EventStatusSchema) -> models.Event:
        """Move the event to the next lifecycle status."""
        event = event_service.transition_status(self.get_one(event_id), self.user(), payload.status)
        return self.get_one(event.pk)

    @route.get(
        "/teams",
        url_name="list_event_teams",
        response=list[schema.TeamSchema],
        throttle=UserDefaultThrottle(),
    )
    def list_teams(self, event_id: UUID) -> list[models.Team]:
        """List every team formed for the event, with members and invite codes."""
        return list(team_service.get_event_teams(self.get_one(event_id), self.user()))
