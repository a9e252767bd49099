"""This module contains the controllers for the accounts app."""

import typing as t

from ninja_extra import ControllerBase, api_controller, route
from ninja_jwt.authentication import JWTAuth

from accounts.models import FelicityUser
from accounts.schema import FelicityUserSchema, ProfileUpdateSchema
from common.throttling import UserDefaultThrottle


@api_controller("/account", tags=["Account"], auth=JWTAuth(), throttle=UserDefaultThrottle())
class AccountController(ControllerBase):
    def user(self) -> FelicityUser:
        """Get the user for this request."""
        return t.cast(FelicityUser, self.context.request.user)  # type: ignore[union-attr]

    @route.get("/me", response=FelicityUserSchema, url_name="me")
    def me(self) -> FelicityUser:
        """Retrieve the authenticated user's profile.

        The participant type decides which restricted events the user may register for.
        """
        return self.user()

    @route.put("/me", response=FelicityUserSchema, url_name="update-profile")
    def update_profile(self, payload: ProfileUpdateSchema) -> FelicityUser:
        """Update the authenticated user's profile.

        Choosing the IIIT participant type requires an institute email address.
        """
        user = self.user()
        data = payload.model_dump()
        for key, value in data.items():
            setattr(user, key, value)
        user.full_clean()
        user.save(update_fields=list(data.keys()))
        return user
