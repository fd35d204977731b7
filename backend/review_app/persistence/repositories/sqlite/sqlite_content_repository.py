"""SQLite implementation of ContentRepository."""
from __future__ import annotations
import json
import sqlite3
from dataclasses import asdict
from typing import List, Optional

from review_app.domain.review.models import (
    APPROVED,
    COURSE,
    COURSE_QUALITY_FIELDS,
    GAME,
    GAME_QUALITY_FIELDS,
    ApprovalEntry,
    CourseApproval,
    FeedbackEntry,
    GameApproval,
    LessonDescriptor,
    StagedContent,
    StagedCourse,
    StagedGame,
)
from review_app.persistence.db import get_connection, transaction
from review_app.persistence.interfaces.content_repository import ContentRepository

_CONTENT_TABLES = {GAME: "staged_games", COURSE: "staged_courses"}
_APPROVAL_TABLES = {GAME: "game_approvals", COURSE: "course_approvals"}
_FEEDBACK_TABLES = {GAME: "game_feedback", COURSE: "course_feedback"}


def _kind_of(content: StagedContent) -> str:
    return COURSE if isinstance(content, StagedCourse) else GAME


def _row_to_game(row) -> StagedGame:
    return StagedGame(
        id=row["id"],
        game_id=row["game_id"],
        title=row["title"],
        description=row["description"],
        category=row["category"],
        content_type=row["content_type"],
        grade_levels=json.loads(row["grade_levels"] or "[]"),
        difficulty=row["difficulty"],
        skills=json.loads(row["skills"] or "[]"),
        estimated_time=row["estimated_time"],
        file_path=row["file_path"],
        status=row["status"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        is_html_game=bool(row["is_html_game"]),
        is_react_component=bool(row["is_react_component"]),
        catalogued=bool(row["catalogued"]),
        catalogued_at=row["catalogued_at"],
        catalogued_by=row["catalogued_by"],
        created_by=row["created_by"],
        approval_count=row["approval_count"],
        feedback_count=row["feedback_count"],
    )


def _row_to_course(row) -> StagedCourse:
    lessons = [LessonDescriptor(**d) for d in json.loads(row["lessons"] or "[]")]
    return StagedCourse(
        id=row["id"],
        slug=row["slug"],
        title=row["title"],
        description=row["description"],
        subject=row["subject"],
        grade_levels=json.loads(row["grade_levels"] or "[]"),
        difficulty=row["difficulty"],
        status=row["status"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        is_premium=bool(row["is_premium"]),
        estimated_minutes=row["estimated_minutes"],
        total_xp=row["total_xp"],
        staging_path=row["staging_path"],
        thumbnail_path=row["thumbnail_path"],
        lessons=lessons,
        promoted_to_course_id=row["promoted_to_course_id"],
        promoted_at=row["promoted_at"],
        promoted_by=row["promoted_by"],
        created_by=row["created_by"],
        approval_count=row["approval_count"],
        feedback_count=row["feedback_count"],
    )


def _row_to_approval(kind: str, row) -> ApprovalEntry:
    quality_fields = COURSE_QUALITY_FIELDS if kind == COURSE else GAME_QUALITY_FIELDS
    entry_cls = CourseApproval if kind == COURSE else GameApproval
    return entry_cls(
        id=row["id"],
        content_id=row["content_id"],
        reviewer_name=row["reviewer_name"],
        decision=row["decision"],
        created_at=row["created_at"],
        notes=row["notes"],
        engagement_level=row["engagement_level"],
        **{name: bool(row[name]) for name in quality_fields},
    )


def _row_to_feedback(kind: str, row) -> FeedbackEntry:
    is_course = kind == COURSE
    return FeedbackEntry(
        id=row["id"],
        content_id=row["content_id"],
        kind=kind,
        reviewer_name=row["reviewer_name"],
        feedback_type=row["feedback_type"],
        message=row["message"],
        created_at=row["created_at"],
        issue_severity=row["issue_severity"],
        lesson_index=row["lesson_index"] if is_course else None,
        screenshot_url=row["screenshot_url"] if is_course else None,
    )


class SqliteContentRepository(ContentRepository):

    # ------------------------------------------------------------------
    # Staged records
    # ------------------------------------------------------------------
    def save_game(self, game: StagedGame) -> None:
        conn = get_connection()
        try:
            conn.execute(
                """
                INSERT INTO staged_games (
                    id, game_id, title, description, category, content_type,
                    grade_levels, difficulty, skills, estimated_time, file_path,
                    is_html_game, is_react_component, status, catalogued,
                    created_by, created_at, updated_at
                ) VALUES (
                    :id, :game_id, :title, :description, :category, :content_type,
                    :grade_levels, :difficulty, :skills, :estimated_time, :file_path,
                    :is_html_game, :is_react_component, :status, :catalogued,
                    :created_by, :created_at, :updated_at
                )
                """,
                {
                    "id": game.id,
                    "game_id": game.game_id,
                    "title": game.title,
                    "description": game.description,
                    "category": game.category,
                    "content_type": game.content_type,
                    "grade_levels": json.dumps(game.grade_levels),
                    "difficulty": game.difficulty,
                    "skills": json.dumps(game.skills),
                    "estimated_time": game.estimated_time,
                    "file_path": game.file_path,
                    "is_html_game": int(game.is_html_game),
                    "is_react_component": int(game.is_react_component),
                    "status": game.status,
                    "catalogued": int(game.catalogued),
                    "created_by": game.created_by,
                    "created_at": game.created_at,
                    "updated_at": game.updated_at,
                },
            )
            conn.commit()
        finally:
            conn.close()

    def save_course(self, course: StagedCourse) -> None:
        conn = get_connection()
        try:
            conn.execute(
                """
                INSERT INTO staged_courses (
                    id, slug, title, description, subject, grade_levels, difficulty,
                    is_premium, estimated_minutes, total_xp, staging_path, thumbnail_path,
                    lessons, status, created_by, created_at, updated_at
                ) VALUES (
                    :id, :slug, :title, :description, :subject, :grade_levels, :difficulty,
                    :is_premium, :estimated_minutes, :total_xp, :staging_path, :thumbnail_path,
                    :lessons, :status, :created_by, :created_at, :updated_at
                )
                """,
                {
                    "id": course.id,
                    "slug": course.slug,
                    "title": course.title,
                    "description": course.description,
                    "subject": course.subject,
                    "grade_levels": json.dumps(course.grade_levels),
                    "difficulty": course.difficulty,
                    "is_premium": int(course.is_premium),
                    "estimated_minutes": course.estimated_minutes,
                    "total_xp": course.total_xp,
                    "staging_path": course.staging_path,
                    "thumbnail_path": course.thumbnail_path,
                    "lessons": json.dumps([asdict(lesson) for lesson in course.lessons]),
                    "status": course.status,
                    "created_by": course.created_by,
                    "created_at": course.created_at,
                    "updated_at": course.updated_at,
                },
            )
            conn.commit()
        finally:
            conn.close()

    def get(self, kind: str, content_id: str, conn: Optional[sqlite3.Connection] = None) -> Optional[StagedContent]:
        owns_conn = conn is None
        if owns_conn:
            conn = get_connection()
        try:
            row = conn.execute(
                f"SELECT * FROM {_CONTENT_TABLES[kind]} WHERE id = ?", (content_id,)
            ).fetchone()
        finally:
            if owns_conn:
                conn.close()
        if not row:
            return None
        return _row_to_course(row) if kind == COURSE else _row_to_game(row)

    def list_games(self) -> List[StagedGame]:
        conn = get_connection()
        rows = conn.execute("SELECT * FROM staged_games ORDER BY created_at DESC").fetchall()
        conn.close()
        return [_row_to_game(r) for r in rows]

    def list_courses(self, slug: Optional[str] = None) -> List[StagedCourse]:
        conn = get_connection()
        if slug:
            rows = conn.execute(
                "SELECT * FROM staged_courses WHERE slug = ? ORDER BY created_at DESC", (slug,)
            ).fetchall()
        else:
            rows = conn.execute("SELECT * FROM staged_courses ORDER BY created_at DESC").fetchall()
        conn.close()
        return [_row_to_course(r) for r in rows]

    def game_id_exists(self, game_id: str) -> bool:
        conn = get_connection()
        row = conn.execute("SELECT 1 FROM staged_games WHERE game_id = ?", (game_id,)).fetchone()
        conn.close()
        return row is not None

    def slug_exists(self, slug: str) -> bool:
        conn = get_connection()
        row = conn.execute("SELECT 1 FROM staged_courses WHERE slug = ?", (slug,)).fetchone()
        conn.close()
        return row is not None

    def update_status(self, content: StagedContent) -> bool:
        conn = get_connection()
        try:
            cur = conn.execute(
                f"UPDATE {_CONTENT_TABLES[_kind_of(content)]} SET status = ?, updated_at = ? WHERE id = ?",
                (content.status, content.updated_at, content.id),
            )
            conn.commit()
        finally:
            conn.close()
        return cur.rowcount > 0

    # ------------------------------------------------------------------
    # Ledgers
    # ------------------------------------------------------------------
    def append_approval(self, entry: ApprovalEntry) -> bool:
        kind = entry.kind
        quality_fields = COURSE_QUALITY_FIELDS if kind == COURSE else GAME_QUALITY_FIELDS
        columns = ["id", "content_id", "reviewer_name", "decision", "notes", "engagement_level", "created_at"]
        columns += list(quality_fields)
        values = {name: getattr(entry, name) for name in columns}
        for name in quality_fields:
            values[name] = int(values[name])

        with transaction() as conn:
            cur = conn.execute(
                f"UPDATE {_CONTENT_TABLES[kind]} SET approval_count = approval_count + 1 WHERE id = ?",
                (entry.content_id,),
            )
            if cur.rowcount == 0:
                return False
            conn.execute(
                f"INSERT INTO {_APPROVAL_TABLES[kind]} ({', '.join(columns)}) "
                f"VALUES ({', '.join(':' + c for c in columns)})",
                values,
            )
        return True

    def list_approvals(self, kind: str, content_id: str) -> List[ApprovalEntry]:
        conn = get_connection()
        rows = conn.execute(
            f"SELECT * FROM {_APPROVAL_TABLES[kind]} WHERE content_id = ? ORDER BY seq ASC",
            (content_id,),
        ).fetchall()
        conn.close()
        return [_row_to_approval(kind, r) for r in rows]

    def append_feedback(self, entry: FeedbackEntry) -> bool:
        kind = entry.kind
        columns = ["id", "content_id", "reviewer_name", "feedback_type", "message", "issue_severity", "created_at"]
        if kind == COURSE:
            columns += ["lesson_index", "screenshot_url"]
        values = {name: getattr(entry, name) for name in columns}

        with transaction() as conn:
            cur = conn.execute(
                f"UPDATE {_CONTENT_TABLES[kind]} SET feedback_count = feedback_count + 1 WHERE id = ?",
                (entry.content_id,),
            )
            if cur.rowcount == 0:
                return False
            conn.execute(
                f"INSERT INTO {_FEEDBACK_TABLES[kind]} ({', '.join(columns)}) "
                f"VALUES ({', '.join(':' + c for c in columns)})",
                values,
            )
        return True

    def list_feedback(self, kind: str, content_id: str) -> List[FeedbackEntry]:
        conn = get_connection()
        rows = conn.execute(
            f"SELECT * FROM {_FEEDBACK_TABLES[kind]} WHERE content_id = ? ORDER BY seq ASC",
            (content_id,),
        ).fetchall()
        conn.close()
        return [_row_to_feedback(kind, r) for r in rows]

    # ------------------------------------------------------------------
    # Release flags
    # ------------------------------------------------------------------
    def claim_game_release(self, conn: sqlite3.Connection, content_id: str, promoted_by: str, at: str) -> bool:
        cur = conn.execute(
            """
            UPDATE staged_games
            SET catalogued = 1, catalogued_at = ?, catalogued_by = ?, updated_at = ?
            WHERE id = ? AND catalogued = 0 AND status = ?
            """,
            (at, promoted_by, at, content_id, APPROVED),
        )
        return cur.rowcount == 1

    def claim_course_release(
        self,
        conn: sqlite3.Connection,
        content_id: str,
        course_id: str,
        promoted_by: str,
        at: str,
    ) -> bool:
        cur = conn.execute(
            """
            UPDATE staged_courses
            SET promoted_to_course_id = ?, promoted_at = ?, promoted_by = ?, updated_at = ?
            WHERE id = ? AND promoted_to_course_id IS NULL AND status = ?
            """,
            (course_id, at, promoted_by, at, content_id, APPROVED),
        )
        return cur.rowcount == 1

    def release_game_claim(self, conn: sqlite3.Connection, content_id: str) -> None:
        conn.execute(
            """
            UPDATE staged_games
            SET catalogued = 0, catalogued_at = NULL, catalogued_by = NULL
            WHERE id = ? AND catalogued = 1
            """,
            (content_id,),
        )

    def release_course_claim(self, conn: sqlite3.Connection, content_id: str, course_id: str) -> None:
        conn.execute(
            """
            UPDATE staged_courses
            SET promoted_to_course_id = NULL, promoted_at = NULL, promoted_by = NULL
            WHERE id = ? AND promoted_to_course_id = ?
            """,
            (content_id, course_id),
        )
