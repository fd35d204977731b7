"""Abstract repository interface for staged content and its review ledgers."""
from __future__ import annotations
import sqlite3
from abc import ABC, abstractmethod
from typing import List, Optional

from review_app.domain.review.models import (
    ApprovalEntry,
    FeedbackEntry,
    StagedContent,
    StagedCourse,
    StagedGame,
)


class ContentRepository(ABC):

    # ------------------------------------------------------------------
    # Staged records
    # ------------------------------------------------------------------
    @abstractmethod
    def save_game(self, game: StagedGame) -> None:
        """Insert a new staged game row."""
        ...

    @abstractmethod
    def save_course(self, course: StagedCourse) -> None:
        """Insert a new staged course row (lessons stored in order)."""
        ...

    @abstractmethod
    def get(self, kind: str, content_id: str, conn: Optional[sqlite3.Connection] = None) -> Optional[StagedContent]:
        """Return the staged record of ``kind``, or None. Uses ``conn`` when inside a transaction."""
        ...

    @abstractmethod
    def list_games(self) -> List[StagedGame]:
        """Return all staged games, newest first."""
        ...

    @abstractmethod
    def list_courses(self, slug: Optional[str] = None) -> List[StagedCourse]:
        """Return staged courses, newest first, optionally filtered by slug."""
        ...

    @abstractmethod
    def game_id_exists(self, game_id: str) -> bool:
        ...

    @abstractmethod
    def slug_exists(self, slug: str) -> bool:
        ...

    @abstractmethod
    def update_status(self, content: StagedContent) -> bool:
        """Overwrite status + updated_at only. Returns False if the row is gone."""
        ...

    # ------------------------------------------------------------------
    # Ledgers: append only, entries are never updated or deleted
    # ------------------------------------------------------------------
    @abstractmethod
    def append_approval(self, entry: ApprovalEntry) -> bool:
        """Insert the entry and bump approval_count atomically. False if the record is gone."""
        ...

    @abstractmethod
    def list_approvals(self, kind: str, content_id: str) -> List[ApprovalEntry]:
        """Return approvals in insertion order (oldest first)."""
        ...

    @abstractmethod
    def append_feedback(self, entry: FeedbackEntry) -> bool:
        """Insert the entry and bump feedback_count atomically. False if the record is gone."""
        ...

    @abstractmethod
    def list_feedback(self, kind: str, content_id: str) -> List[FeedbackEntry]:
        """Return feedback in insertion order (oldest first)."""
        ...

    # ------------------------------------------------------------------
    # Release flags: compare-and-set, caller owns the transaction
    # ------------------------------------------------------------------
    @abstractmethod
    def claim_game_release(self, conn: sqlite3.Connection, content_id: str, promoted_by: str, at: str) -> bool:
        """Set catalogued=1 only if it is 0 and status is APPROVED. True if this call set it."""
        ...

    @abstractmethod
    def claim_course_release(
        self,
        conn: sqlite3.Connection,
        content_id: str,
        course_id: str,
        promoted_by: str,
        at: str,
    ) -> bool:
        """Set promoted_to_course_id only if it is NULL and status is APPROVED. True if this call set it."""
        ...

    @abstractmethod
    def release_game_claim(self, conn: sqlite3.Connection, content_id: str) -> None:
        """Clear the catalogued flag set by a promotion that is being undone."""
        ...

    @abstractmethod
    def release_course_claim(self, conn: sqlite3.Connection, content_id: str, course_id: str) -> None:
        """Clear promoted_to_course_id if it still points at ``course_id``."""
        ...
