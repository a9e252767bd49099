import typing as t

import pytest
from django.core.exceptions import ValidationError

from accounts.models import FelicityUser

pytestmark = pytest.mark.django_db


def test_iiit_participants_need_an_institute_address(felicity_user_factory: t.Callable[..., FelicityUser]) -> None:
    user = felicity_user_factory(email="someone@gmail.com")
    user.participant_type = FelicityUser.ParticipantType.IIIT

    with pytest.raises(ValidationError) as exc_info:
        user.full_clean()

    assert "email" in exc_info.value.message_dict


def test_institute_address_is_accepted(felicity_user_factory: t.Callable[..., FelicityUser]) -> None:
    user = felicity_user_factory(email="Student@Students.IIIT.ac.in")
    user.participant_type = FelicityUser.ParticipantType.IIIT
    user.full_clean()


def test_non_iiit_participants_may_use_any_address(felicity_user_factory: t.Callable[..., FelicityUser]) -> None:
    user = felicity_user_factory(email="someone@gmail.com", participant_type=FelicityUser.ParticipantType.NON_IIIT)
    user.full_clean()


def test_roles(felicity_user_factory: t.Callable[..., FelicityUser], superuser: FelicityUser) -> None:
    participant = felicity_user_factory()
    admin = felicity_user_factory(role=FelicityUser.Role.ADMIN)

    assert participant.role == FelicityUser.Role.PARTICIPANT
    assert not participant.is_admin
    assert admin.is_admin
    assert superuser.is_admin


def test_create_superuser_gets_the_admin_role() -> None:
    user = FelicityUser.objects.create_superuser("root", "root@example.com", "password")
    assert user.role == FelicityUser.Role.ADMIN


def test_organizers_queryset(felicity_user_factory: t.Callable[..., FelicityUser]) -> None:
    organizer = felicity_user_factory(role=FelicityUser.Role.ORGANIZER)
    felicity_user_factory()
    assert list(FelicityUser.objects.organizers()) == [organizer]


@pytest.mark.parametrize(
    "first_name,last_name,username,expected",
    [
        ("Ada", "Lovelace", "ada", "Ada Lovelace"),
        ("", "", "grace_hopper", "Grace Hopper"),
        ("", "", "alan.turing@example.com", "Alan Turing"),
    ],
)
def test_display_name(
    felicity_user_factory: t.Callable[..., FelicityUser], first_name: str, last_name: str, username: str, expected: str
) -> None:
    user = felicity_user_factory(first_name=first_name, last_name=last_name, username=username)
    assert user.display_name == expected
