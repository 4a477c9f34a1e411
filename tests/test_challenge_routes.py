import pytest

from scout_backend.extensions import db
from scout_backend.models import ChallengeParticipant, UserRole


@pytest.fixture
def scout(make_user):
    return make_user(name="Scout", role=UserRole.SCOUT)


@pytest.fixture
def headers(auth_headers, scout):
    return auth_headers(scout)


def create(client, headers, **payload):
    body = {"title": "Run 100km", **payload}
    return client.post("/api/challenges", json=body, headers=headers)


def test_create_challenge_defaults_target(client, headers, scout):
    response = create(client, headers, description="A month of running")

    assert response.status_code == 201
    body = response.get_json()
    assert body["msg"] == "Challenge created"
    assert body["data"]["title"] == "Run 100km"
    assert body["data"]["targetProgress"] == 100
    assert body["data"]["creatorId"] == scout.id
    assert body["data"]["creator"]["name"] == "Scout"
    assert body["data"]["participantCount"] == 0


def test_create_challenge_validation(client, headers):
    missing_title = client.post("/api/challenges", json={"description": "No title"}, headers=headers)
    assert missing_title.status_code == 400
    assert "title" in missing_title.get_json()["errors"]

    bad_target = create(client, headers, targetProgress=0)
    assert bad_target.status_code == 400
    assert "targetProgress" in bad_target.get_json()["errors"]

    backwards = create(client, headers, startAt="2024-03-01T00:00:00", endAt="2024-02-01T00:00:00")
    assert backwards.status_code == 400
    assert "endAt" in backwards.get_json()["errors"]


def test_target_above_cap_logs_a_warning(client, headers, caplog):
    with caplog.at_level("WARNING", logger="scout_backend.services.challenges"):
        response = create(client, headers, targetProgress=150)

    assert response.status_code == 201
    assert "cannot be completed" in caplog.text


def test_list_and_get(client, headers):
    created = create(client, headers).get_json()["data"]

    listed = client.get("/api/challenges", headers=headers).get_json()
    fetched = client.get(f"/api/challenges/{created['id']}", headers=headers)

    assert [c["id"] for c in listed] == [created["id"]]
    assert fetched.get_json()["title"] == "Run 100km"
    assert client.get("/api/challenges/999", headers=headers).status_code == 404


def test_only_creator_or_admin_may_update(client, headers, auth_headers, make_user):
    created = create(client, headers).get_json()["data"]
    url = f"/api/challenges/{created['id']}"

    stranger = auth_headers(make_user())
    assert client.put(url, json={"title": "Hijacked"}, headers=stranger).status_code == 403

    admin = auth_headers(make_user(role=UserRole.ADMIN))
    response = client.put(url, json={"title": "Run 120km"}, headers=admin)
    assert response.status_code == 200
    assert response.get_json()["data"]["title"] == "Run 120km"

    own = client.put(url, json={"description": "Updated"}, headers=headers)
    assert own.get_json()["data"]["title"] == "Run 120km"
    assert own.get_json()["data"]["description"] == "Updated"


def test_delete_challenge_removes_participants(client, headers, make_user, engine):
    created = create(client, headers).get_json()["data"]
    participant = engine.join_challenge(created["id"], make_user().id)
    engine.record_progress(participant.id, 10, "Started")
    participant_id = participant.id

    response = client.delete(f"/api/challenges/{created['id']}", headers=headers)

    assert response.status_code == 200
    assert db.session.query(ChallengeParticipant).filter_by(id=participant_id).count() == 0


@pytest.fixture
def finished(client, headers, make_user, engine):
    """Challenge with participants at 100 (completed), 100 (completed) and 40."""
    challenge_id = create(client, headers).get_json()["data"]["id"]
    ids = []
    for delta in (100, 100, 40):
        participant = engine.join_challenge(challenge_id, make_user().id)
        engine.record_progress(participant.id, delta, "Effort")
        ids.append(participant.id)
    return challenge_id, ids


def test_completed_endpoint(client, headers, finished):
    challenge_id, ids = finished

    body = client.get(f"/api/challenges/{challenge_id}/completed", headers=headers).get_json()

    assert body["challengeId"] == challenge_id
    assert body["totalCompleted"] == 2
    assert [p["participantId"] for p in body["participants"]] == ids[:2]
    assert body["participants"][0]["rank"] == 1

    by_progress = client.get(f"/api/challenges/{challenge_id}/completed?sortBy=progress", headers=headers)
    assert by_progress.get_json()["totalCompleted"] == 2


def test_leaderboard_endpoint(client, headers, finished):
    challenge_id, ids = finished
    url = f"/api/challenges/{challenge_id}/leaderboard"

    board = client.get(url, headers=headers).get_json()["leaderboard"]
    assert [entry["participantId"] for entry in board] == ids
    assert board[2]["progress"] == 40
    assert board[0]["totalActivities"] == 1

    assert len(client.get(f"{url}?limit=2", headers=headers).get_json()["leaderboard"]) == 2
    assert client.get(f"{url}?limit=abc", headers=headers).status_code == 400
    assert client.get(f"{url}?status=WRONG", headers=headers).status_code == 400

    active = client.get(f"{url}?status=ACTIVE", headers=headers).get_json()["leaderboard"]
    assert [entry["participantId"] for entry in active] == [ids[2]]


def test_statistics_endpoint(client, headers, finished):
    challenge_id, _ = finished

    body = client.get(f"/api/challenges/{challenge_id}/statistics", headers=headers).get_json()

    assert body["challengeTitle"] == "Run 100km"
    stats = body["statistics"]
    assert stats["totalParticipants"] == 3
    assert stats["completedCount"] == 2
    assert stats["completionRate"] == "66.67%"
    assert stats["averageProgress"] == 80
    assert stats["statusBreakdown"] == {"COMPLETED": 2, "ACTIVE": 1}
    assert stats["fastestCompletion"]["days"] == 0

    assert client.get("/api/challenges/999/statistics", headers=headers).status_code == 404
