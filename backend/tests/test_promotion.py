"""Promotion: preconditions, exactly-once under concurrency, and all-or-nothing writes."""
import sqlite3
import threading
import time

from conftest import game_payload
from review_app.application.promotion_app_service import PromotionAppService
from review_app.core import config
from review_app.domain.common.result import ErrorCode
from review_app.domain.review.models import APPROVED, COURSE, GAME, IN_TESTING, NEEDS_REVISION
from review_app.persistence.db import get_connection
from review_app.persistence.remote.catalog_mirror import CatalogMirrorError
from review_app.persistence.repositories.sqlite.sqlite_catalog_store import SqliteCatalogStore


def _count(table: str) -> int:
    conn = get_connection()
    n = conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
    conn.close()
    return n


class _BrokenCatalog(SqliteCatalogStore):
    def add_game_entry(self, conn, entry):
        raise sqlite3.OperationalError("disk I/O error")

    def add_course(self, conn, course):
        super().add_course(conn, course)
        raise sqlite3.OperationalError("disk I/O error")


class _RecordingMirror:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.games = []
        self.courses = []

    def publish_game(self, entry):
        if self.fail:
            raise CatalogMirrorError("remote unavailable")
        self.games.append(entry)

    def publish_course(self, course):
        if self.fail:
            raise CatalogMirrorError("remote unavailable")
        self.courses.append(course)


class _SlowMirror(_RecordingMirror):
    def __init__(self, delay: float):
        super().__init__()
        self.delay = delay
        self.publishing = threading.Event()

    def publish_game(self, entry):
        self.publishing.set()
        time.sleep(self.delay)
        super().publish_game(entry)


# ------------------------------------------------------------------
# Scenarios
# ------------------------------------------------------------------
def test_full_game_review_then_promotion(review_svc, promotion_svc, repo, catalog, staged_game):
    assert review_svc.set_status(GAME, staged_game.id, IN_TESTING).is_success
    assert review_svc.record_approval(
        GAME, staged_game.id, "Ada", {"decision": "APPROVE", "engagement_level": 5}
    ).is_success
    assert review_svc.set_status(GAME, staged_game.id, APPROVED).is_success

    result = promotion_svc.promote_game(staged_game.id, promoted_by="admin-1")

    assert result.is_success
    stored = repo.get(GAME, staged_game.id)
    assert stored.catalogued is True
    assert stored.catalogued_by == "admin-1"
    assert stored.catalogued_at is not None

    entry = catalog.get_game_entry("fraction-pizza")
    assert entry.title == "Fraction Pizza"
    assert entry.catalog_section == "mathGames"
    assert entry.html_path == "/games/fraction-pizza.html"
    assert entry.grade_levels == ["3", "4"]


def test_second_game_promotion_is_refused(promotion_svc, approved_game):
    assert promotion_svc.promote_game(approved_game.id, "admin-1").is_success

    again = promotion_svc.promote_game(approved_game.id, "admin-1")

    assert again.code == ErrorCode.ALREADY_PROMOTED
    assert _count("catalog_entries") == 1


def test_course_in_testing_cannot_be_promoted(review_svc, promotion_svc, repo, staged_course):
    review_svc.set_status(COURSE, staged_course.id, IN_TESTING)

    result = promotion_svc.promote_course(staged_course.id, "admin-1")

    assert result.code == ErrorCode.NOT_APPROVED
    assert _count("courses") == 0
    assert _count("course_lessons") == 0
    assert repo.get(COURSE, staged_course.id).promoted_to_course_id is None


def test_bug_report_on_approved_game_changes_nothing_else(review_svc, repo, approved_game):
    result = review_svc.record_feedback(
        GAME,
        approved_game.id,
        "Ada",
        {"feedback_type": "BUG", "issue_severity": "CRITICAL", "message": "button unresponsive"},
    )

    assert result.is_success
    stored = repo.get(GAME, approved_game.id)
    assert stored.feedback_count == 1
    assert stored.status == APPROVED
    assert stored.catalogued is False


# ------------------------------------------------------------------
# Preconditions
# ------------------------------------------------------------------
def test_promote_unknown_ids(promotion_svc):
    assert promotion_svc.promote_game("missing", "admin-1").code == ErrorCode.CONTENT_NOT_FOUND
    assert promotion_svc.promote_course("missing", "admin-1").code == ErrorCode.CONTENT_NOT_FOUND


def test_game_needing_revision_cannot_be_promoted(review_svc, promotion_svc, staged_game):
    review_svc.set_status(GAME, staged_game.id, NEEDS_REVISION)
    assert promotion_svc.promote_game(staged_game.id, "admin-1").code == ErrorCode.NOT_APPROVED
    assert _count("catalog_entries") == 0


def test_status_edits_after_promotion_keep_release_flag(review_svc, promotion_svc, repo, approved_game):
    promotion_svc.promote_game(approved_game.id, "admin-1")
    review_svc.set_status(GAME, approved_game.id, IN_TESTING)
    review_svc.set_status(GAME, approved_game.id, APPROVED)

    assert repo.get(GAME, approved_game.id).catalogued is True
    assert promotion_svc.promote_game(approved_game.id, "admin-1").code == ErrorCode.ALREADY_PROMOTED


# ------------------------------------------------------------------
# Course materialisation
# ------------------------------------------------------------------
def test_course_promotion_copies_lessons_in_order(promotion_svc, repo, catalog, approved_course):
    result = promotion_svc.promote_course(approved_course.id, "admin-1")

    assert result.is_success
    production = catalog.get_course(result.value.id)
    assert production.slug == "intro-to-fractions"
    assert production.difficulty == "BEGINNER"
    assert production.is_premium is True
    assert production.is_published is True
    assert production.total_xp == 300
    assert production.thumbnail_url == "/lessons/courses/intro-to-fractions/thumb.png"
    assert [lesson.order for lesson in production.lessons] == [1, 2, 3]
    assert [lesson.title for lesson in production.lessons] == [
        "What is a Fraction?",
        "Comparing Fractions",
        "Fraction Quiz",
    ]
    assert [lesson.lesson_type for lesson in production.lessons] == ["VIDEO", "GAME", "QUIZ"]
    assert production.lessons[0].content_path == "/lessons/courses/intro-to-fractions/l1.html"
    assert production.lessons[2].required_score == 70

    staged = repo.get(COURSE, approved_course.id)
    assert staged.promoted_to_course_id == production.id
    assert staged.promoted_by == "admin-1"


def test_second_course_promotion_is_refused(promotion_svc, repo, approved_course):
    first = promotion_svc.promote_course(approved_course.id, "admin-1")
    second = promotion_svc.promote_course(approved_course.id, "admin-2")

    assert second.code == ErrorCode.ALREADY_PROMOTED
    assert _count("courses") == 1
    assert repo.get(COURSE, approved_course.id).promoted_to_course_id == first.value.id


# ------------------------------------------------------------------
# Concurrency
# ------------------------------------------------------------------
def _race(fn, content_id, workers=8):
    barrier = threading.Barrier(workers)
    results = []
    lock = threading.Lock()

    def run(i):
        barrier.wait()
        r = fn(content_id, f"admin-{i}")
        with lock:
            results.append(r)

    threads = [threading.Thread(target=run, args=(i,)) for i in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return results


def test_concurrent_game_promotion_yields_one_entry(promotion_svc, approved_game):
    results = _race(promotion_svc.promote_game, approved_game.id)

    assert sum(r.is_success for r in results) == 1
    assert all(r.code == ErrorCode.ALREADY_PROMOTED for r in results if not r.is_success)
    assert _count("catalog_entries") == 1


def test_concurrent_course_promotion_yields_one_course(promotion_svc, approved_course):
    results = _race(promotion_svc.promote_course, approved_course.id)

    assert sum(r.is_success for r in results) == 1
    assert all(r.code == ErrorCode.ALREADY_PROMOTED for r in results if not r.is_success)
    assert _count("courses") == 1
    assert _count("course_lessons") == 3


# ------------------------------------------------------------------
# Atomicity
# ------------------------------------------------------------------
def test_catalog_write_failure_leaves_game_unreleased(repo, approved_game):
    broken = PromotionAppService(repo=repo, catalog=_BrokenCatalog())

    result = broken.promote_game(approved_game.id, "admin-1")

    assert result.code == ErrorCode.STORAGE_FAILURE
    assert repo.get(GAME, approved_game.id).catalogued is False
    assert _count("catalog_entries") == 0


def test_failed_course_promotion_rolls_back_lessons_and_flag(repo, approved_course):
    broken = PromotionAppService(repo=repo, catalog=_BrokenCatalog())

    result = broken.promote_course(approved_course.id, "admin-1")

    assert result.code == ErrorCode.STORAGE_FAILURE
    assert repo.get(COURSE, approved_course.id).promoted_to_course_id is None
    assert _count("courses") == 0
    assert _count("course_lessons") == 0


def test_retry_after_storage_failure_succeeds(repo, catalog, approved_game):
    PromotionAppService(repo=repo, catalog=_BrokenCatalog()).promote_game(approved_game.id, "admin-1")

    retry = PromotionAppService(repo=repo, catalog=catalog).promote_game(approved_game.id, "admin-1")

    assert retry.is_success
    assert repo.get(GAME, approved_game.id).catalogued is True


def test_mirror_failure_rolls_back_local_promotion(repo, catalog, approved_game):
    svc = PromotionAppService(repo=repo, catalog=catalog, mirror=_RecordingMirror(fail=True))

    result = svc.promote_game(approved_game.id, "admin-1")

    assert result.code == ErrorCode.STORAGE_FAILURE
    assert repo.get(GAME, approved_game.id).catalogued is False
    assert catalog.get_game_entry("fraction-pizza") is None


def test_mirror_receives_promoted_records(repo, catalog, approved_game, approved_course):
    mirror = _RecordingMirror()
    svc = PromotionAppService(repo=repo, catalog=catalog, mirror=mirror)

    svc.promote_game(approved_game.id, "admin-1")
    svc.promote_course(approved_course.id, "admin-1")

    assert [e.game_id for e in mirror.games] == ["fraction-pizza"]
    assert [c.slug for c in mirror.courses] == ["intro-to-fractions"]


def test_course_mirror_failure_removes_production_course(repo, catalog, approved_course):
    failing = PromotionAppService(repo=repo, catalog=catalog, mirror=_RecordingMirror(fail=True))

    result = failing.promote_course(approved_course.id, "admin-1")

    assert result.code == ErrorCode.STORAGE_FAILURE
    assert repo.get(COURSE, approved_course.id).promoted_to_course_id is None
    assert _count("courses") == 0
    assert _count("course_lessons") == 0

    retry = PromotionAppService(repo=repo, catalog=catalog, mirror=_RecordingMirror()).promote_course(
        approved_course.id, "admin-1"
    )
    assert retry.is_success
    assert repo.get(COURSE, approved_course.id).promoted_to_course_id == retry.value.id


def test_mirror_publish_does_not_hold_the_write_lock(monkeypatch, review_svc, repo, catalog, approved_game):
    monkeypatch.setattr(config, "DB_BUSY_TIMEOUT_SECONDS", 0.5)
    other = review_svc.create_game(game_payload(game_id="number-line"), created_by="ingest").value
    mirror = _SlowMirror(delay=1.5)
    svc = PromotionAppService(repo=repo, catalog=catalog, mirror=mirror)

    results = []
    worker = threading.Thread(target=lambda: results.append(svc.promote_game(approved_game.id, "admin-1")))
    worker.start()
    assert mirror.publishing.wait(timeout=5)

    feedback = review_svc.record_feedback(
        GAME, other.id, "Ada", {"feedback_type": "GENERAL", "message": "Works on tablet"}
    )
    worker.join()

    assert feedback.is_success
    assert results[0].is_success
    assert [e.game_id for e in mirror.games] == ["fraction-pizza"]
