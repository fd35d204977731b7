"""Application service — orchestrates validate → domain op → persist for review operations."""
from __future__ import annotations
import sqlite3
from typing import List, Optional

from review_app.core.logging import get_logger
from review_app.domain.common.result import ErrorCode, Result
from review_app.domain.review.models import (
    ApprovalEntry,
    FeedbackEntry,
    StagedContent,
    StagedCourse,
    StagedGame,
)
from review_app.domain.review.service import ReviewDomainService
from review_app.persistence.interfaces.content_repository import ContentRepository

logger = get_logger(__name__)


def _not_found(kind: str, content_id: str) -> Result:
    return Result.fail(f"Staged {kind} '{content_id}' not found.", ErrorCode.CONTENT_NOT_FOUND)


def _storage_failure(operation: str, e: sqlite3.Error) -> Result:
    logger.warning("storage_failure", operation=operation, error=str(e))
    return Result.fail(f"Storage unavailable during {operation}, try again: {e}", ErrorCode.STORAGE_FAILURE)


class ReviewAppService:
    def __init__(self, repo: ContentRepository):
        self._repo = repo
        self._domain = ReviewDomainService()

    # ------------------------------------------------------------------
    # INGESTION
    # ------------------------------------------------------------------
    def create_game(self, data: dict, created_by: str) -> Result[StagedGame]:
        result = self._domain.create_game(data, created_by)
        if not result.is_success:
            return result
        game = result.value
        try:
            if self._repo.game_id_exists(game.game_id):
                return Result.fail(f"Game with id '{game.game_id}' already exists.", ErrorCode.ALREADY_EXISTS)
            self._repo.save_game(game)
        except sqlite3.IntegrityError:
            return Result.fail(f"Game with id '{game.game_id}' already exists.", ErrorCode.ALREADY_EXISTS)
        except sqlite3.Error as e:
            return _storage_failure("create_game", e)
        logger.info("staged_game_created", content_id=game.id, game_id=game.game_id)
        return Result.ok(game)

    def create_course(self, data: dict, lessons: List[dict], created_by: str) -> Result[StagedCourse]:
        result = self._domain.create_course(data, lessons, created_by)
        if not result.is_success:
            return result
        course = result.value
        try:
            if self._repo.slug_exists(course.slug):
                return Result.fail(f"Course with slug '{course.slug}' already exists.", ErrorCode.ALREADY_EXISTS)
            self._repo.save_course(course)
        except sqlite3.IntegrityError:
            return Result.fail(f"Course with slug '{course.slug}' already exists.", ErrorCode.ALREADY_EXISTS)
        except sqlite3.Error as e:
            return _storage_failure("create_course", e)
        logger.info("staged_course_created", content_id=course.id, slug=course.slug, lessons=len(course.lessons))
        return Result.ok(course)

    # ------------------------------------------------------------------
    # READ
    # ------------------------------------------------------------------
    def get_content(self, kind: str, content_id: str) -> Result[StagedContent]:
        try:
            content = self._repo.get(kind, content_id)
        except sqlite3.Error as e:
            return _storage_failure("get_content", e)
        if not content:
            return _not_found(kind, content_id)
        return Result.ok(content)

    def list_games(self) -> Result[List[StagedGame]]:
        try:
            return Result.ok(self._repo.list_games())
        except sqlite3.Error as e:
            return _storage_failure("list_games", e)

    def list_courses(self, slug: Optional[str] = None) -> Result[List[StagedCourse]]:
        try:
            return Result.ok(self._repo.list_courses(slug))
        except sqlite3.Error as e:
            return _storage_failure("list_courses", e)

    # ------------------------------------------------------------------
    # STATUS
    # ------------------------------------------------------------------
    def set_status(self, kind: str, content_id: str, new_status: str) -> Result[StagedContent]:
        try:
            content = self._repo.get(kind, content_id)
            if not content:
                return _not_found(kind, content_id)

            previous = content.status
            result = self._domain.transition_status(content, new_status)
            if not result.is_success:
                return result

            if not self._repo.update_status(result.value):
                return _not_found(kind, content_id)
        except sqlite3.Error as e:
            return _storage_failure("set_status", e)

        logger.info("status_changed", kind=kind, content_id=content_id, previous=previous, status=new_status)
        return Result.ok(result.value)

    # ------------------------------------------------------------------
    # APPROVAL LEDGER
    # ------------------------------------------------------------------
    def record_approval(self, kind: str, content_id: str, reviewer_name: str, data: dict) -> Result[ApprovalEntry]:
        try:
            content = self._repo.get(kind, content_id)
            if not content:
                return _not_found(kind, content_id)

            result = self._domain.new_approval(content, reviewer_name, data)
            if not result.is_success:
                return result

            if not self._repo.append_approval(result.value):
                return _not_found(kind, content_id)
        except sqlite3.Error as e:
            return _storage_failure("record_approval", e)

        logger.info(
            "approval_recorded",
            kind=kind,
            content_id=content_id,
            decision=result.value.decision,
            reviewer=reviewer_name,
        )
        return Result.ok(result.value)

    def list_approvals(self, kind: str, content_id: str) -> Result[List[ApprovalEntry]]:
        try:
            if not self._repo.get(kind, content_id):
                return _not_found(kind, content_id)
            return Result.ok(self._repo.list_approvals(kind, content_id))
        except sqlite3.Error as e:
            return _storage_failure("list_approvals", e)

    # ------------------------------------------------------------------
    # FEEDBACK LOG
    # ------------------------------------------------------------------
    def record_feedback(self, kind: str, content_id: str, reviewer_name: str, data: dict) -> Result[FeedbackEntry]:
        try:
            content = self._repo.get(kind, content_id)
            if not content:
                return _not_found(kind, content_id)

            result = self._domain.new_feedback(content, reviewer_name, data)
            if not result.is_success:
                return result

            if not self._repo.append_feedback(result.value):
                return _not_found(kind, content_id)
        except sqlite3.Error as e:
            return _storage_failure("record_feedback", e)

        logger.info(
            "feedback_recorded",
            kind=kind,
            content_id=content_id,
            feedback_type=result.value.feedback_type,
            severity=result.value.issue_severity,
        )
        return Result.ok(result.value)

    def list_feedback(self, kind: str, content_id: str) -> Result[List[FeedbackEntry]]:
        try:
            if not self._repo.get(kind, content_id):
                return _not_found(kind, content_id)
            return Result.ok(self._repo.list_feedback(kind, content_id))
        except sqlite3.Error as e:
            return _storage_failure("list_feedback", e)
