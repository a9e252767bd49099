import pytest
from django.test.client import Client
from ninja_jwt.tokens import RefreshToken

from accounts.models import FelicityUser


def client_for(user: FelicityUser) -> Client:
    refresh = RefreshToken.for_user(user)
    return Client(HTTP_AUTHORIZATION=f"Bearer {str(refresh.access_token)}")  # type: ignore[attr-defined]


@pytest.fixture
def organizer_client(organizer: FelicityUser) -> Client:
    """API client for the organizer of the test events."""
    return client_for(organizer)


@pytest.fixture
def other_organizer_client(other_organizer: FelicityUser) -> Client:
    """API client for an organizer who does not own the test events."""
    return client_for(other_organizer)


@pytest.fixture
def admin_client_jwt(admin_user: FelicityUser) -> Client:
    """API client for an admin."""
    return client_for(admin_user)


@pytest.fixture
def participant_client(participant: FelicityUser) -> Client:
    """API client for a participant."""
    return client_for(participant)


@pytest.fixture
def other_participant_client(other_participant: FelicityUser) -> Client:
    return client_for(other_participant)
