from uuid import UUID

from django.db.models import QuerySet
from ninja import Query
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate
from ninja_extra.searching import Searching, searching
from ninja_jwt.authentication import JWTAuth

from common.throttling import TicketVerificationThrottle, UserDefaultThrottle, WriteThrottle
from events import filters, models, schema
from events.controllers.permissions import EventPermission
from events.service import event_service, payment_service, registration_service, ticket_service

from .base import EventAdminBaseController


@api_controller(
    "/event-admin/{uuid:event_id}",
    auth=JWTAuth(),
    permissions=[EventPermission()],
    tags=["Event Admin"],
    throttle=WriteThrottle(),
)
class EventAdminRegistrationsController(EventAdminBaseController):
    """Registration review, attendance and ticket verification endpoints."""

    @route.get(
        "/registrations",
        url_name="list_registrations",
        response=PaginatedResponseSchema[schema.AdminRegistrationSchema],
        throttle=UserDefaultThrottle(),
    )
    @paginate(PageNumberPaginationExtra, page_size=20)
    @searching(
        Searching,
        search_fields=[
            "participant__email",
            "participant__first_name",
            "participant__last_name",
            "participant__username",
            "ticket_id",
        ],
    )
    def list_registrations(
        self,
        event_id: UUID,
        params: filters.RegistrationFilterSchema = Query(...),  # type: ignore[type-arg]
    ) -> QuerySet[models.Registration]:
        """List registrations for an event.

        Supports filtering by:
        - status: PENDING, CONFIRMED, CANCELLED or REJECTED
        - attended: whether attendance was marked
        """
        event = self.get_one(event_id)
        return params.filter(event_service.get_event_registrations(event))

    @route.get(
        "/registrations/{uuid:registration_id}",
        url_name="get_event_registration",
        response=schema.AdminRegistrationSchema,
        throttle=UserDefaultThrottle(),
    )
    def get_registration(self, event_id: UUID, registration_id: UUID) -> models.Registration:
        return self.fetch_registration(self.get_one(event_id), registration_id)

    @route.post(
        "/registrations/{uuid:registration_id}/approve",
        url_name="approve_registration",
        response=schema.AdminRegistrationSchema,
    )
    def approve(self, event_id: UUID, registration_id: UUID) -> models.Registration:
        """Approve the payment of a Pending registration.

        Merchandise orders take their stock and capacity here. If either ran out
        in the meantime the order stays Pending and a 409 is returned.
        """
        registration = self.fetch_registration(self.get_one(event_id), registration_id)
        payment_service.approve(registration, self.user())
        return self.fetch_registration(registration.event, registration_id)

    @route.post(
        "/registrations/{uuid:registration_id}/reject",
        url_name="reject_registration",
        response=schema.AdminRegistrationSchema,
    )
    def reject(
        self, event_id: UUID, registration_id: UUID, payload: schema.RejectRegistrationSchema
    ) -> models.Registration:
        """Reject the payment of a Pending registration with a comment for the participant."""
        registration = self.fetch_registration(self.get_one(event_id), registration_id)
        payment_service.reject(registration, self.user(), payload.comment)
        return self.fetch_registration(registration.event, registration_id)

    @route.post(
        "/registrations/{uuid:registration_id}/attend",
        url_name="mark_attended",
        response=schema.AdminRegistrationSchema,
    )
    def mark_attended(self, event_id: UUID, registration_id: UUID) -> models.Registration:
        """Mark a confirmed participant as attended. This can only happen once."""
        registration = self.fetch_registration(self.get_one(event_id), registration_id)
        registration_service.mark_attended(registration, self.user())
        return self.fetch_registration(registration.event, registration_id)

    @route.post(
        "/verify-ticket",
        url_name="verify_ticket",
        response=schema.TicketVerificationResultSchema,
        throttle=TicketVerificationThrottle(),
    )
    def verify_ticket(
        self, event_id: UUID, payload: schema.TicketVerifySchema
    ) -> schema.TicketVerificationResultSchema:
        """Verify a scanned ticket against this event.

        Unknown tickets and bad signatures get the same 400 response.
        """
        event = self.get_one(event_id)
        registration = ticket_service.verify_ticket(payload.ticketID, payload.sig, event.pk)
        return schema.TicketVerificationResultSchema(
            ticket_id=registration.ticket_id,
            participant=registration.participant.get_display_name(),
            email=registration.participant.email,
            status=registration.status,
            attended=registration.attended,
        )
