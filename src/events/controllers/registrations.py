from uuid import UUID

from django.db.models import QuerySet
from ninja import File
from ninja.files import UploadedFile
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate
from ninja_jwt.authentication import JWTAuth

from common.controllers import UserAwareController
from common.throttling import UserDefaultThrottle, WriteThrottle
from events import models, schema
from events.service import event_service, registration_service, ticket_service


@api_controller("/registrations", auth=JWTAuth(), tags=["Registrations"], throttle=WriteThrottle())
class RegistrationController(UserAwareController):
    """The authenticated participant's own registrations and tickets."""

    def get_queryset(self) -> QuerySet[models.Registration]:
        return event_service.get_my_registrations(self.user())

    def get_one(self, registration_id: UUID) -> models.Registration:
        return self.get_object_or_exception(self.get_queryset(), pk=registration_id)  # type: ignore[no-any-return]

    @route.get(
        "/",
        url_name="my_registrations",
        response=PaginatedResponseSchema[schema.RegistrationSchema],
        throttle=UserDefaultThrottle(),
    )
    @paginate(PageNumberPaginationExtra, page_size=20)
    def list_registrations(self) -> QuerySet[models.Registration]:
        """List the user's registrations and orders, newest first."""
        return self.get_queryset()

    @route.get(
        "/{uuid:registration_id}",
        url_name="get_registration",
        response=schema.RegistrationSchema,
        throttle=UserDefaultThrottle(),
    )
    def get_registration(self, registration_id: UUID) -> models.Registration:
        return self.get_one(registration_id)

    @route.get(
        "/{uuid:registration_id}/ticket",
        url_name="get_ticket",
        response=schema.TicketSchema,
        throttle=UserDefaultThrottle(),
    )
    def get_ticket(self, registration_id: UUID) -> schema.TicketSchema:
        """Retrieve the signed ticket of a confirmed registration and its QR code.

        The QR code encodes the ticket JSON, signature included.
        """
        ticket = ticket_service.get_ticket(self.get_one(registration_id), self.user())
        return schema.TicketSchema(**ticket.as_payload(), qrCode=ticket_service.ticket_qr_code(ticket))

    @route.post("/{uuid:registration_id}/cancel", url_name="cancel_registration", response=schema.RegistrationSchema)
    def cancel_registration(self, registration_id: UUID) -> models.Registration:
        """Cancel a registration. Cancelling twice is harmless."""
        return registration_service.cancel_registration(self.get_one(registration_id), self.user())

    @route.post(
        "/{uuid:registration_id}/payment-proof",
        url_name="upload_payment_proof",
        response=schema.RegistrationSchema,
    )
    def upload_payment_proof(self, registration_id: UUID, proof: File[UploadedFile]) -> models.Registration:
        """Attach a payment proof to a Pending registration for organizer review."""
        return registration_service.upload_payment_proof(self.get_one(registration_id), self.user(), proof)
