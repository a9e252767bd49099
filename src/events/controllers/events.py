import typing as t
from uuid import UUID

from django.db.models import Q, QuerySet
from ninja import Query
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate
from ninja_extra.searching import Searching, searching
from ninja_jwt.authentication import JWTAuth

from common.authentication import OptionalAuth
from common.controllers import UserAwareController
from common.throttling import RegistrationThrottle, WriteThrottle
from events import filters, models, schema
from events.service import event_service
from events.service.registration import RegistrationEligibility, RegistrationManager


@api_controller("/events", auth=OptionalAuth(), tags=["Events"])
class EventController(UserAwareController):
    """Event discovery, creation and registration."""

    def get_queryset(self) -> QuerySet[models.Event]:
        """Published events, plus the user's own drafts. Admins see everything."""
        qs = models.Event.objects.select_related("organizer").with_variants()
        user = self.maybe_user()
        if not user.is_authenticated:
            return qs.published()
        if user.is_admin:
            return qs
        return qs.filter(~Q(status=models.Event.EventStatus.DRAFT) | Q(organizer=user))

    def get_one(self, event_id: UUID) -> models.Event:
        return t.cast(models.Event, self.get_object_or_exception(self.get_queryset(), pk=event_id))

    @route.get("/", url_name="list_events", response=PaginatedResponseSchema[schema.EventSchema])
    @paginate(PageNumberPaginationExtra, page_size=20)
    @searching(Searching, search_fields=["name", "description", "venue", "tags"])
    def list_events(
        self,
        params: filters.EventFilterSchema = Query(...),  # type: ignore[type-arg]
    ) -> QuerySet[models.Event]:
        """Browse events.

        Filter by organizer, type, status, eligibility, team format, tags or a date window.
        An eligibility filter also matches events open to all. `search` looks at the name,
        description, venue and tags.
        """
        return params.filter(self.get_queryset())

    @route.get("/mine", url_name="my_events", response=PaginatedResponseSchema[schema.EventSchema], auth=JWTAuth())
    @paginate(PageNumberPaginationExtra, page_size=20)
    def list_my_events(self) -> QuerySet[models.Event]:
        """Events the authenticated organizer manages, drafts included. Admins see every event."""
        return event_service.get_organizer_events(self.user())

    @route.post(
        "/",
        url_name="create_event",
        response={201: schema.EventSchema},
        auth=JWTAuth(),
        throttle=WriteThrottle(),
    )
    def create_event(self, payload: schema.EventCreateSchema) -> tuple[int, models.Event]:
        """Create a Draft event. Organizers and admins only.

        Merchandise events may define variants, each with its own stock.
        """
        return 201, event_service.create_event(self.user(), payload)

    @route.get("/{uuid:event_id}", url_name="get_event", response=schema.EventSchema)
    def get_event(self, event_id: UUID) -> models.Event:
        """Retrieve event details, including remaining variant stock."""
        return self.get_one(event_id)

    @route.get(
        "/{uuid:event_id}/eligibility",
        url_name="check_eligibility",
        response=RegistrationEligibility,
        auth=JWTAuth(),
    )
    def check_eligibility(self, event_id: UUID, quantity: int = 1) -> RegistrationEligibility:
        """Check whether the authenticated user may register, without registering.

        A denial carries a `reason`, a machine-readable `code` and, where one exists,
        the `next_step` the user can take.
        """
        event = self.get_one(event_id)
        return RegistrationManager(self.user(), event).check_eligibility(quantity)

    @route.post(
        "/{uuid:event_id}/register",
        url_name="register",
        response={201: schema.RegistrationSchema},
        auth=JWTAuth(),
        throttle=RegistrationThrottle(),
    )
    def register(self, event_id: UUID, payload: schema.RegistrationCreateSchema) -> tuple[int, models.Registration]:
        """Register for a Normal event or place a merchandise order.

        Free events confirm immediately. Priced events and merchandise orders start
        Pending until an organizer reviews the payment proof.
        """
        event = self.get_one(event_id)
        registration = RegistrationManager(self.user(), event).register(
            responses=[r.model_dump() for r in payload.responses],
            selected_variants=[v.model_dump() for v in payload.selected_variants],
            quantity=payload.quantity,
        )
        return 201, registration
