"""API tests using FastAPI TestClient."""
import pytest

from conftest import course_payload, game_payload, lesson_payloads
from review_app.api.auth import create_token
from review_app.core import config
from review_app.persistence.db import transaction


# ------------------------------------------------------------------
# Health
# ------------------------------------------------------------------
def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


# ------------------------------------------------------------------
# Auth
# ------------------------------------------------------------------
def test_login_success(client):
    resp = client.post("/auth/login", json={"username": "admin", "password": "admin"})
    assert resp.status_code == 200
    data = resp.json()
    assert "token" in data
    assert data["user"]["username"] == "admin"
    assert data["user"]["role"] == "admin"


def test_login_bad_password(client):
    resp = client.post("/auth/login", json={"username": "admin", "password": "wrongpassword"})
    assert resp.status_code == 401


def test_get_profile(client, auth_headers):
    resp = client.get("/auth/profile", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["username"] == "admin"


def test_review_routes_require_token(client):
    assert client.get("/admin/test-games").status_code == 401
    assert client.post("/admin/test-courses", json=course_payload()).status_code == 401


def test_review_routes_require_admin_role(client):
    token = create_token("u-2", "tester", "reviewer")
    resp = client.get("/admin/test-games", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 403


def test_garbage_token_rejected(client):
    resp = client.get("/admin/test-courses", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


# ------------------------------------------------------------------
# Games
# ------------------------------------------------------------------
@pytest.fixture
def game_id(client, auth_headers):
    resp = client.post("/admin/test-games", json=game_payload(), headers=auth_headers)
    assert resp.status_code == 201
    return resp.json()["game"]["id"]


def test_create_and_list_games(client, auth_headers, game_id):
    games = client.get("/admin/test-games", headers=auth_headers).json()["games"]
    assert [g["id"] for g in games] == [game_id]
    assert games[0]["status"] == "NOT_TESTED"
    assert games[0]["catalogued"] is False


def test_duplicate_game_conflict(client, auth_headers, game_id):
    resp = client.post("/admin/test-games", json=game_payload(), headers=auth_headers)
    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "ALREADY_EXISTS"


def test_game_review_and_promotion_flow(client, auth_headers, game_id):
    base = f"/admin/test-games/{game_id}"

    resp = client.patch(f"{base}/status", json={"status": "IN_TESTING"}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["game"]["status"] == "IN_TESTING"

    resp = client.post(
        f"{base}/approvals",
        json={"decision": "APPROVE", "engagement_level": 5, "educational_quality": True},
        headers=auth_headers,
    )
    assert resp.status_code == 201
    approval = resp.json()["approval"]
    assert approval["kind"] == "game"
    assert approval["reviewer_name"] == "Administrator"
    assert "curriculum_quality" not in approval

    # recording an approval does not move the status
    detail = client.get(base, headers=auth_headers).json()
    assert detail["game"]["status"] == "IN_TESTING"
    assert detail["game"]["approval_count"] == 1
    assert len(detail["approvals"]) == 1

    client.patch(f"{base}/status", json={"status": "APPROVED"}, headers=auth_headers)

    resp = client.post(f"{base}/promote", headers=auth_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Game added to mathGames"
    assert body["catalog_entry"]["html_path"] == "/games/fraction-pizza.html"

    resp = client.post(f"{base}/promote", headers=auth_headers)
    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "ALREADY_PROMOTED"

    assert client.get(base, headers=auth_headers).json()["game"]["catalogued"] is True


def test_promote_unapproved_game_conflict(client, auth_headers, game_id):
    resp = client.post(f"/admin/test-games/{game_id}/promote", headers=auth_headers)
    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "NOT_APPROVED"


def test_invalid_status_is_bad_request(client, auth_headers, game_id):
    resp = client.patch(f"/admin/test-games/{game_id}/status", json={"status": "LIVE"}, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "INVALID_STATUS"


def test_engagement_out_of_range_is_bad_request(client, auth_headers, game_id):
    resp = client.post(
        f"/admin/test-games/{game_id}/approvals",
        json={"decision": "APPROVE", "engagement_level": 6},
        headers=auth_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "INVALID_APPROVAL"


def test_game_feedback_roundtrip(client, auth_headers, game_id):
    resp = client.post(
        f"/admin/test-games/{game_id}/feedback",
        json={"feedback_type": "BUG", "issue_severity": "MINOR", "message": "Score overlaps timer"},
        headers=auth_headers,
    )
    assert resp.status_code == 201
    entry = resp.json()["feedback"]
    assert "lesson_index" not in entry

    feedback = client.get(f"/admin/test-games/{game_id}/feedback", headers=auth_headers).json()["feedback"]
    assert [f["message"] for f in feedback] == ["Score overlaps timer"]


def test_unknown_game_is_not_found(client, auth_headers):
    assert client.get("/admin/test-games/missing", headers=auth_headers).status_code == 404
    resp = client.post("/admin/test-games/missing/promote", headers=auth_headers)
    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "CONTENT_NOT_FOUND"


# ------------------------------------------------------------------
# Courses
# ------------------------------------------------------------------
@pytest.fixture
def course_id(client, auth_headers):
    resp = client.post(
        "/admin/test-courses",
        json={**course_payload(), "lessons": lesson_payloads()},
        headers=auth_headers,
    )
    assert resp.status_code == 201
    return resp.json()["course"]["id"]


def test_course_listing_by_slug(client, auth_headers, course_id):
    resp = client.get("/admin/test-courses", params={"slug": "intro-to-fractions"}, headers=auth_headers)
    assert [c["id"] for c in resp.json()["courses"]] == [course_id]
    resp = client.get("/admin/test-courses", params={"slug": "nope"}, headers=auth_headers)
    assert resp.json()["courses"] == []


def test_course_lesson_feedback_bounds(client, auth_headers, course_id):
    url = f"/admin/test-courses/{course_id}/feedback"
    ok = client.post(url, json={"message": "Audio is quiet", "lesson_index": 2}, headers=auth_headers)
    assert ok.status_code == 201
    assert ok.json()["feedback"]["lesson_index"] == 2

    bad = client.post(url, json={"message": "Audio is quiet", "lesson_index": 3}, headers=auth_headers)
    assert bad.status_code == 400
    assert bad.json()["detail"]["code"] == "INVALID_FEEDBACK"


def test_course_promotion(client, auth_headers, course_id):
    base = f"/admin/test-courses/{course_id}"
    client.post(
        f"{base}/approvals",
        json={"decision": "APPROVE", "curriculum_quality": True, "content_accuracy": True},
        headers=auth_headers,
    )
    client.patch(f"{base}/status", json={"status": "APPROVED"}, headers=auth_headers)

    resp = client.post(f"{base}/promote", headers=auth_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["lessons_created"] == 3
    assert body["difficulty"] == "BEGINNER"
    assert [lesson["order"] for lesson in body["lessons"]] == [1, 2, 3]

    course = client.get(base, headers=auth_headers).json()["course"]
    assert course["promoted_to_course_id"] == body["course_id"]
    assert course["approval_count"] == 1


def test_locked_database_maps_to_503(monkeypatch, client, auth_headers, game_id):
    monkeypatch.setattr(config, "DB_BUSY_TIMEOUT_SECONDS", 0.1)

    with transaction():
        resp = client.patch(f"/admin/test-games/{game_id}/status", json={"status": "APPROVED"}, headers=auth_headers)

    assert resp.status_code == 503
    assert resp.json()["detail"]["code"] == "STORAGE_FAILURE"
