"""Shared fixtures: a fresh SQLite file per test and services wired against it."""
import pytest
from fastapi.testclient import TestClient

from review_app import container
from review_app.application.promotion_app_service import PromotionAppService
from review_app.application.review_app_service import ReviewAppService
from review_app.core import config
from review_app.domain.review.models import APPROVED, COURSE, GAME, IN_TESTING
from review_app.persistence.db import init_db
from review_app.persistence.repositories.sqlite.sqlite_catalog_store import SqliteCatalogStore
from review_app.persistence.repositories.sqlite.sqlite_content_repository import SqliteContentRepository


def _clear_container():
    container.get_content_repo.cache_clear()
    container.get_catalog_store.cache_clear()
    container.get_review_app_service.cache_clear()
    container.get_promotion_app_service.cache_clear()


@pytest.fixture(autouse=True)
def db_path(tmp_path, monkeypatch):
    path = tmp_path / "review.db"
    monkeypatch.setattr(config, "DATABASE_PATH", str(path))
    monkeypatch.setattr(config, "CATALOG_MIRROR_URL", "")
    _clear_container()
    init_db()
    yield path
    _clear_container()


@pytest.fixture
def repo():
    return SqliteContentRepository()


@pytest.fixture
def catalog():
    return SqliteCatalogStore()


@pytest.fixture
def review_svc(repo):
    return ReviewAppService(repo=repo)


@pytest.fixture
def promotion_svc(repo, catalog):
    return PromotionAppService(repo=repo, catalog=catalog)


def game_payload(**overrides):
    data = {
        "game_id": "fraction-pizza",
        "title": "Fraction Pizza",
        "description": "Slice pizzas into equal parts.",
        "category": "math",
        "content_type": "game",
        "grade_levels": ["3", "4"],
        "difficulty": "medium",
        "skills": ["fractions"],
        "estimated_time": "10 mins",
        "file_path": "/staging/games/fraction-pizza.html",
        "is_html_game": True,
        "is_react_component": False,
    }
    data.update(overrides)
    return data


def course_payload(**overrides):
    data = {
        "slug": "intro-to-fractions",
        "title": "Intro to Fractions",
        "description": "Three short lessons on fractions.",
        "subject": "math",
        "grade_levels": ["3"],
        "difficulty": "easy",
        "is_premium": True,
        "estimated_minutes": 45,
        "total_xp": 300,
        "staging_path": "/staging/lessons/courses/intro-to-fractions",
        "thumbnail_path": "/staging/lessons/courses/intro-to-fractions/thumb.png",
    }
    data.update(overrides)
    return data


def lesson_payloads():
    return [
        {"order": 2, "title": "Comparing Fractions", "lesson_type": "game",
         "file": "/staging/lessons/courses/intro-to-fractions/l2.html", "duration": 15, "xp_reward": 100},
        {"order": 1, "title": "What is a Fraction?", "lesson_type": "video",
         "file": "/staging/lessons/courses/intro-to-fractions/l1.html", "duration": 10, "xp_reward": 50},
        {"order": 3, "title": "Fraction Quiz", "lesson_type": "quiz",
         "file": "/staging/lessons/courses/intro-to-fractions/l3.html", "duration": 20, "xp_reward": 150,
         "required_score": 70},
    ]


@pytest.fixture
def staged_game(review_svc):
    return review_svc.create_game(game_payload(), created_by="ingest").value


@pytest.fixture
def staged_course(review_svc):
    return review_svc.create_course(course_payload(), lesson_payloads(), created_by="ingest").value


@pytest.fixture
def approved_game(review_svc, staged_game):
    review_svc.set_status(GAME, staged_game.id, IN_TESTING)
    review_svc.set_status(GAME, staged_game.id, APPROVED)
    return staged_game


@pytest.fixture
def approved_course(review_svc, staged_course):
    review_svc.set_status(COURSE, staged_course.id, APPROVED)
    return staged_course


# ------------------------------------------------------------------
# HTTP
# ------------------------------------------------------------------
@pytest.fixture
def client():
    from review_app.main import app
    return TestClient(app)


@pytest.fixture
def auth_headers(client):
    login = client.post("/auth/login", json={"username": "admin", "password": "admin"})
    token = login.json()["token"]
    return {"Authorization": f"Bearer {token}"}
