"""Application service — one-way promotion of approved staged content into the live stores."""
from __future__ import annotations
import sqlite3
from typing import Optional

from review_app.core.logging import get_logger
from review_app.domain.common.result import ErrorCode, Result
from review_app.domain.review.models import COURSE, GAME, CatalogEntry, ProductionCourse
from review_app.domain.review.service import ReviewDomainService
from review_app.persistence.db import transaction
from review_app.persistence.interfaces.catalog_store import CatalogStore
from review_app.persistence.interfaces.content_repository import ContentRepository
from review_app.persistence.remote.catalog_mirror import CatalogMirror, CatalogMirrorError

logger = get_logger(__name__)


def _storage_failure(kind: str, content_id: str, e: Exception) -> Result:
    logger.warning("promotion_failed", kind=kind, content_id=content_id, error=str(e))
    return Result.fail(f"Promotion failed, nothing was changed: {e}", ErrorCode.STORAGE_FAILURE)


class PromotionAppService:
    """
    Promotes APPROVED staged content exactly once.

    The local part runs in one short BEGIN IMMEDIATE transaction: re-read the
    record, check preconditions, claim the release flag with a conditional
    UPDATE, write the live rows, commit. The remote mirror (if any) is
    published after the commit, outside the write lock. If publishing fails,
    a second transaction deletes the live rows and clears the flag, leaving
    the staged record as it was before the call.
    """

    def __init__(self, repo: ContentRepository, catalog: CatalogStore, mirror: Optional[CatalogMirror] = None):
        self._repo = repo
        self._catalog = catalog
        self._mirror = mirror
        self._domain = ReviewDomainService()

    # ------------------------------------------------------------------
    # Games
    # ------------------------------------------------------------------
    def promote_game(self, content_id: str, promoted_by: str) -> Result[CatalogEntry]:
        try:
            with transaction() as conn:
                game = self._repo.get(GAME, content_id, conn=conn)
                if not game:
                    return Result.fail(f"Staged game '{content_id}' not found.", ErrorCode.CONTENT_NOT_FOUND)

                check = self._domain.check_promotable(game)
                if not check.is_success:
                    logger.info("promotion_refused", kind=GAME, content_id=content_id, code=check.code.value)
                    return Result.propagate(check)

                entry = self._domain.build_catalog_entry(game)
                if not self._repo.claim_game_release(conn, content_id, promoted_by, entry.created_at):
                    return Result.fail("Game is already in the catalog.", ErrorCode.ALREADY_PROMOTED)

                self._catalog.add_game_entry(conn, entry)
        except sqlite3.Error as e:
            return _storage_failure(GAME, content_id, e)

        if self._mirror is not None:
            try:
                self._mirror.publish_game(entry)
            except CatalogMirrorError as e:
                return self._undo_game(content_id, entry, e)

        logger.info(
            "game_promoted",
            content_id=content_id,
            game_id=entry.game_id,
            section=entry.catalog_section,
            promoted_by=promoted_by,
        )
        return Result.ok(entry)

    def _undo_game(self, content_id: str, entry: CatalogEntry, cause: CatalogMirrorError) -> Result:
        try:
            with transaction() as conn:
                self._catalog.remove_game_entry(conn, entry.game_id)
                self._repo.release_game_claim(conn, content_id)
        except sqlite3.Error as e:
            logger.error("promotion_undo_failed", kind=GAME, content_id=content_id, cause=str(cause), error=str(e))
            return Result.fail(
                f"Mirror publish failed ({cause}) and the local catalog entry could not be removed: {e}",
                ErrorCode.STORAGE_FAILURE,
            )
        return _storage_failure(GAME, content_id, cause)

    # ------------------------------------------------------------------
    # Courses
    # ------------------------------------------------------------------
    def promote_course(self, content_id: str, promoted_by: str) -> Result[ProductionCourse]:
        try:
            with transaction() as conn:
                course = self._repo.get(COURSE, content_id, conn=conn)
                if not course:
                    return Result.fail(f"Staged course '{content_id}' not found.", ErrorCode.CONTENT_NOT_FOUND)

                check = self._domain.check_promotable(course)
                if not check.is_success:
                    logger.info("promotion_refused", kind=COURSE, content_id=content_id, code=check.code.value)
                    return Result.propagate(check)

                production = self._domain.build_production_course(course)
                claimed = self._repo.claim_course_release(
                    conn, content_id, production.id, promoted_by, production.created_at
                )
                if not claimed:
                    return Result.fail("Course has already been promoted to production.", ErrorCode.ALREADY_PROMOTED)

                self._catalog.add_course(conn, production)
        except sqlite3.Error as e:
            return _storage_failure(COURSE, content_id, e)

        if self._mirror is not None:
            try:
                self._mirror.publish_course(production)
            except CatalogMirrorError as e:
                return self._undo_course(content_id, production, e)

        logger.info(
            "course_promoted",
            content_id=content_id,
            course_id=production.id,
            slug=production.slug,
            lessons=len(production.lessons),
            promoted_by=promoted_by,
        )
        return Result.ok(production)

    def _undo_course(self, content_id: str, production: ProductionCourse, cause: CatalogMirrorError) -> Result:
        try:
            with transaction() as conn:
                self._catalog.remove_course(conn, production.id)
                self._repo.release_course_claim(conn, content_id, production.id)
        except sqlite3.Error as e:
            logger.error("promotion_undo_failed", kind=COURSE, content_id=content_id, cause=str(cause), error=str(e))
            return Result.fail(
                f"Mirror publish failed ({cause}) and the production course could not be removed: {e}",
                ErrorCode.STORAGE_FAILURE,
            )
        return _storage_failure(COURSE, content_id, cause)
