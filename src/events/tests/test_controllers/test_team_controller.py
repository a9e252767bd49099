import typing as t

import orjson
import pytest
from django.shortcuts import reverse  # type: ignore[attr-defined]
from django.test.client import Client

from accounts.models import FelicityUser
from events.models import Event, Registration, Team
from events.service import team_service

pytestmark = pytest.mark.django_db


def _post(client: Client, url: str, payload: dict[str, t.Any] | None = None) -> t.Any:
    return client.post(url, data=orjson.dumps(payload or {}), content_type="application/json")


@pytest.fixture
def forming_team(team_event: Event, participant: FelicityUser) -> Team:
    return team_service.create_team(participant, team_event, "Byte Me", 2)


def test_create_team(participant_client: Client, team_event: Event, participant: FelicityUser) -> None:
    payload = {"event_id": str(team_event.pk), "name": "Byte Me", "team_size": 3}

    response = _post(participant_client, reverse("api:create_team"), payload)

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "forming"
    assert data["leader"]["id"] == str(participant.pk)
    assert len(data["invite_code"]) == 8
    assert [m["status"] for m in data["members"]] == ["accepted"]


def test_create_team_for_draft_event(participant_client: Client, event_factory: t.Any) -> None:
    event = event_factory(is_team_event=True, status=Event.EventStatus.DRAFT)
    payload = {"event_id": str(event.pk), "name": "Early Birds", "team_size": 2}
    assert _post(participant_client, reverse("api:create_team"), payload).status_code == 404


def test_create_team_with_invalid_size(participant_client: Client, team_event: Event) -> None:
    payload = {"event_id": str(team_event.pk), "name": "Crowd", "team_size": 10}
    response = _post(participant_client, reverse("api:create_team"), payload)
    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"


def test_join_team_completes_registration(
    other_participant_client: Client, forming_team: Team, team_event: Event
) -> None:
    response = _post(other_participant_client, reverse("api:join_team"), {"invite_code": forming_team.invite_code})

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "complete"
    assert len(data["members"]) == 2
    assert len(data["ticket_ids"]) == 2
    assert Registration.objects.filter(team=forming_team, status=Registration.Status.CONFIRMED).count() == 2


def test_join_with_unknown_code(other_participant_client: Client, team_event: Event) -> None:
    response = _post(other_participant_client, reverse("api:join_team"), {"invite_code": "NOPE1234"})
    assert response.status_code == 404
    assert response.json() == {"code": "not_found", "detail": "Invalid invite code."}


def test_join_own_team(participant_client: Client, forming_team: Team) -> None:
    response = _post(participant_client, reverse("api:join_team"), {"invite_code": forming_team.invite_code})
    assert response.status_code == 409
    assert response.json()["code"] == "already_in_team"


def test_my_teams(participant_client: Client, other_participant_client: Client, forming_team: Team) -> None:
    assert [team["name"] for team in participant_client.get(reverse("api:my_teams")).json()] == ["Byte Me"]
    assert other_participant_client.get(reverse("api:my_teams")).json() == []


def test_outsider_cannot_see_team(other_participant_client: Client, forming_team: Team) -> None:
    response = other_participant_client.get(reverse("api:get_team", kwargs={"team_id": forming_team.pk}))
    assert response.status_code == 403


def test_leave_team(
    other_participant_client: Client, team_event: Event, participant: FelicityUser, other_participant: FelicityUser
) -> None:
    team = team_service.create_team(participant, team_event, "Trio", 3)
    team_service.join_team(other_participant, team.invite_code)

    response = _post(other_participant_client, reverse("api:leave_team", kwargs={"team_id": team.pk}))

    assert response.status_code == 204
    assert not team.members.filter(user=other_participant).exists()


def test_leader_cannot_leave(participant_client: Client, forming_team: Team) -> None:
    response = _post(participant_client, reverse("api:leave_team", kwargs={"team_id": forming_team.pk}))
    assert response.status_code == 400


def test_cancel_team(participant_client: Client, forming_team: Team) -> None:
    response = _post(participant_client, reverse("api:cancel_team", kwargs={"team_id": forming_team.pk}))
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"


def test_member_cannot_cancel_team(
    other_participant_client: Client, team_event: Event, participant: FelicityUser, other_participant: FelicityUser
) -> None:
    team = team_service.create_team(participant, team_event, "Trio", 3)
    team_service.join_team(other_participant, team.invite_code)

    response = _post(other_participant_client, reverse("api:cancel_team", kwargs={"team_id": team.pk}))

    assert response.status_code == 403
