"""SQLite implementation of CatalogStore (public catalog + production course tables)."""
from __future__ import annotations
import json
import sqlite3
from typing import List, Optional

from review_app.domain.review.models import CatalogEntry, ProductionCourse, ProductionLesson
from review_app.persistence.db import get_connection
from review_app.persistence.interfaces.catalog_store import CatalogStore


def _row_to_entry(row) -> CatalogEntry:
    return CatalogEntry(
        game_id=row["game_id"],
        title=row["title"],
        description=row["description"],
        content_type=row["content_type"],
        category=row["category"],
        catalog_section=row["catalog_section"],
        grade_levels=json.loads(row["grade_levels"]),
        difficulty=row["difficulty"],
        skills=json.loads(row["skills"]),
        estimated_time=row["estimated_time"],
        source_content_id=row["source_content_id"],
        created_at=row["created_at"],
        featured=bool(row["featured"]),
        html_path=row["html_path"],
        component_game=bool(row["component_game"]),
    )


def _row_to_lesson(row) -> ProductionLesson:
    return ProductionLesson(
        order=row["lesson_order"],
        title=row["title"],
        lesson_type=row["lesson_type"],
        content_path=row["content_path"],
        duration=row["duration"],
        xp_reward=row["xp_reward"],
        description=row["description"],
        required_score=row["required_score"],
    )


def _row_to_course(row, lessons: List[ProductionLesson]) -> ProductionCourse:
    return ProductionCourse(
        id=row["id"],
        title=row["title"],
        slug=row["slug"],
        description=row["description"],
        subject=row["subject"],
        grade_levels=json.loads(row["grade_levels"]),
        difficulty=row["difficulty"],
        is_premium=bool(row["is_premium"]),
        estimated_minutes=row["estimated_minutes"],
        total_xp=row["total_xp"],
        source_content_id=row["source_content_id"],
        created_at=row["created_at"],
        thumbnail_url=row["thumbnail_url"],
        is_published=bool(row["is_published"]),
        lessons=lessons,
    )


class SqliteCatalogStore(CatalogStore):

    def add_game_entry(self, conn: sqlite3.Connection, entry: CatalogEntry) -> None:
        conn.execute(
            """
            INSERT INTO catalog_entries (
                game_id, source_content_id, title, description, content_type, category,
                catalog_section, grade_levels, difficulty, skills, estimated_time,
                featured, html_path, component_game, created_at
            ) VALUES (
                :game_id, :source_content_id, :title, :description, :content_type, :category,
                :catalog_section, :grade_levels, :difficulty, :skills, :estimated_time,
                :featured, :html_path, :component_game, :created_at
            )
            """,
            {
                "game_id": entry.game_id,
                "source_content_id": entry.source_content_id,
                "title": entry.title,
                "description": entry.description,
                "content_type": entry.content_type,
                "category": entry.category,
                "catalog_section": entry.catalog_section,
                "grade_levels": json.dumps(entry.grade_levels),
                "difficulty": entry.difficulty,
                "skills": json.dumps(entry.skills),
                "estimated_time": entry.estimated_time,
                "featured": int(entry.featured),
                "html_path": entry.html_path,
                "component_game": int(entry.component_game),
                "created_at": entry.created_at,
            },
        )

    def add_course(self, conn: sqlite3.Connection, course: ProductionCourse) -> None:
        conn.execute(
            """
            INSERT INTO courses (
                id, source_content_id, title, slug, description, subject, grade_levels,
                difficulty, is_premium, is_published, estimated_minutes, total_xp,
                thumbnail_url, created_at
            ) VALUES (
                :id, :source_content_id, :title, :slug, :description, :subject, :grade_levels,
                :difficulty, :is_premium, :is_published, :estimated_minutes, :total_xp,
                :thumbnail_url, :created_at
            )
            """,
            {
                "id": course.id,
                "source_content_id": course.source_content_id,
                "title": course.title,
                "slug": course.slug,
                "description": course.description,
                "subject": course.subject,
                "grade_levels": json.dumps(course.grade_levels),
                "difficulty": course.difficulty,
                "is_premium": int(course.is_premium),
                "is_published": int(course.is_published),
                "estimated_minutes": course.estimated_minutes,
                "total_xp": course.total_xp,
                "thumbnail_url": course.thumbnail_url,
                "created_at": course.created_at,
            },
        )
        conn.executemany(
            """
            INSERT INTO course_lessons (
                course_id, lesson_order, title, description, lesson_type,
                content_path, duration, xp_reward, required_score
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                (
                    course.id,
                    lesson.order,
                    lesson.title,
                    lesson.description,
                    lesson.lesson_type,
                    lesson.content_path,
                    lesson.duration,
                    lesson.xp_reward,
                    lesson.required_score,
                )
                for lesson in course.lessons
            ],
        )

    def remove_game_entry(self, conn: sqlite3.Connection, game_id: str) -> None:
        conn.execute("DELETE FROM catalog_entries WHERE game_id = ?", (game_id,))

    def remove_course(self, conn: sqlite3.Connection, course_id: str) -> None:
        conn.execute("DELETE FROM course_lessons WHERE course_id = ?", (course_id,))
        conn.execute("DELETE FROM courses WHERE id = ?", (course_id,))

    def get_game_entry(self, game_id: str) -> Optional[CatalogEntry]:
        conn = get_connection()
        row = conn.execute("SELECT * FROM catalog_entries WHERE game_id = ?", (game_id,)).fetchone()
        conn.close()
        return _row_to_entry(row) if row else None

    def get_course(self, course_id: str) -> Optional[ProductionCourse]:
        conn = get_connection()
        row = conn.execute("SELECT * FROM courses WHERE id = ?", (course_id,)).fetchone()
        if not row:
            conn.close()
            return None
        lesson_rows = conn.execute(
            "SELECT * FROM course_lessons WHERE course_id = ? ORDER BY lesson_order ASC",
            (course_id,),
        ).fetchall()
        conn.close()
        return _row_to_course(row, [_row_to_lesson(r) for r in lesson_rows])
