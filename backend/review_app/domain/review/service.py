"""Domain service — pure business logic for staged content review and promotion."""
from __future__ import annotations
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from review_app.domain.common.result import Result
from review_app.domain.review import rules
from review_app.domain.review.models import (
    COURSE,
    COURSE_QUALITY_FIELDS,
    GAME,
    GAME_QUALITY_FIELDS,
    NOT_TESTED,
    ApprovalEntry,
    CatalogEntry,
    CourseApproval,
    FeedbackEntry,
    GameApproval,
    LessonDescriptor,
    ProductionCourse,
    ProductionLesson,
    StagedContent,
    StagedCourse,
    StagedGame,
)

# Production courses use a different difficulty vocabulary
DIFFICULTY_MAP = {
    "easy": "BEGINNER",
    "beginner": "BEGINNER",
    "medium": "INTERMEDIATE",
    "intermediate": "INTERMEDIATE",
    "hard": "ADVANCED",
    "advanced": "ADVANCED",
}

LESSON_TYPE_MAP = {
    "video": "VIDEO",
    "interactive": "INTERACTIVE",
    "game": "GAME",
    "quiz": "QUIZ",
    "reading": "READING",
    "project": "PROJECT",
}

STAGING_SEGMENT = "/staging/"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return str(uuid.uuid4())


def public_path(staged_path: Optional[str]) -> Optional[str]:
    """Map a staged asset path to its public location."""
    if staged_path is None:
        return None
    return staged_path.replace(STAGING_SEGMENT, "/", 1)


class ReviewDomainService:
    """
    Pure domain operations, no I/O. All methods return Result[T] or plain values.
    The application layer calls these and then persists via the repository.
    """

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------
    def create_game(self, data: dict, created_by: str) -> Result[StagedGame]:
        validation = rules.validate_game_metadata(data)
        if not validation.is_success:
            return Result.propagate(validation)

        now = _now_iso()
        game = StagedGame(
            id=_new_id(),
            game_id=data["game_id"].strip(),
            title=data["title"].strip(),
            description=data.get("description") or "",
            category=data["category"].strip(),
            content_type=data.get("content_type") or "game",
            grade_levels=list(data.get("grade_levels") or []),
            difficulty=data["difficulty"].lower(),
            skills=list(data.get("skills") or []),
            estimated_time=data.get("estimated_time") or "",
            file_path=data["file_path"],
            status=NOT_TESTED,
            created_at=now,
            updated_at=now,
            is_html_game=data.get("is_html_game", True),
            is_react_component=data.get("is_react_component", False),
            created_by=created_by,
        )
        return Result.ok(game)

    def create_course(self, data: dict, lessons: List[dict], created_by: str) -> Result[StagedCourse]:
        """Create a staged course in NOT_TESTED with its lessons sorted by ``order``."""
        validation = rules.validate_course_metadata(data, lessons)
        if not validation.is_success:
            return Result.propagate(validation)

        descriptors = [
            LessonDescriptor(
                order=lesson["order"],
                title=lesson["title"],
                lesson_type=lesson.get("lesson_type") or "interactive",
                file=lesson.get("file") or "",
                duration=lesson.get("duration") or 0,
                xp_reward=lesson.get("xp_reward") or 0,
                description=lesson.get("description"),
                required_score=lesson.get("required_score"),
            )
            for lesson in lessons
        ]
        descriptors.sort(key=lambda d: d.order)

        now = _now_iso()
        course = StagedCourse(
            id=_new_id(),
            slug=data["slug"].strip(),
            title=data["title"].strip(),
            description=data.get("description") or "",
            subject=data["subject"].strip(),
            grade_levels=list(data.get("grade_levels") or []),
            difficulty=data["difficulty"].lower(),
            status=NOT_TESTED,
            created_at=now,
            updated_at=now,
            is_premium=data.get("is_premium", False),
            estimated_minutes=data.get("estimated_minutes") or 0,
            total_xp=data.get("total_xp") or 0,
            staging_path=data.get("staging_path") or "",
            thumbnail_path=data.get("thumbnail_path"),
            lessons=descriptors,
            created_by=created_by,
        )
        return Result.ok(course)

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------
    def transition_status(self, content: StagedContent, new_status: str) -> Result[StagedContent]:
        """Apply a status change. Counters and release flags are left alone."""
        validation = rules.validate_status(new_status)
        if not validation.is_success:
            return Result.propagate(validation)

        content.status = new_status
        content.updated_at = _now_iso()
        return Result.ok(content)

    # ------------------------------------------------------------------
    # Ledgers
    # ------------------------------------------------------------------
    def new_approval(self, content: StagedContent, reviewer_name: str, data: dict) -> Result[ApprovalEntry]:
        validation = rules.validate_approval(data)
        if not validation.is_success:
            return Result.propagate(validation)

        is_course = isinstance(content, StagedCourse)
        quality_fields = COURSE_QUALITY_FIELDS if is_course else GAME_QUALITY_FIELDS
        qualities = {name: bool(data.get(name, False)) for name in quality_fields}
        entry_cls = CourseApproval if is_course else GameApproval

        return Result.ok(
            entry_cls(
                id=_new_id(),
                content_id=content.id,
                reviewer_name=reviewer_name,
                decision=data["decision"],
                created_at=_now_iso(),
                notes=data.get("notes"),
                engagement_level=data.get("engagement_level"),
                **qualities,
            )
        )

    def new_feedback(self, content: StagedContent, reviewer_name: str, data: dict) -> Result[FeedbackEntry]:
        is_course = isinstance(content, StagedCourse)
        lesson_count = len(content.lessons) if is_course else None
        validation = rules.validate_feedback(data, lesson_count)
        if not validation.is_success:
            return Result.propagate(validation)

        return Result.ok(
            FeedbackEntry(
                id=_new_id(),
                content_id=content.id,
                kind=COURSE if is_course else GAME,
                reviewer_name=reviewer_name,
                feedback_type=data["feedback_type"],
                message=data["message"].strip(),
                created_at=_now_iso(),
                issue_severity=data.get("issue_severity"),
                lesson_index=data.get("lesson_index"),
                screenshot_url=data.get("screenshot_url") if is_course else None,
            )
        )

    # ------------------------------------------------------------------
    # Promotion
    # ------------------------------------------------------------------
    def check_promotable(self, content: StagedContent) -> Result[StagedContent]:
        return rules.validate_promotable(content)

    def build_catalog_entry(self, game: StagedGame) -> CatalogEntry:
        """Denormalise a staged game into the public catalog shape."""
        section_suffix = "Games" if game.content_type == "game" else "Lessons"
        return CatalogEntry(
            game_id=game.game_id,
            title=game.title,
            description=game.description,
            content_type=game.content_type,
            category=game.category,
            catalog_section=f"{game.category}{section_suffix}",
            grade_levels=list(game.grade_levels),
            difficulty=game.difficulty,
            skills=list(game.skills),
            estimated_time=game.estimated_time,
            source_content_id=game.id,
            created_at=_now_iso(),
            html_path=public_path(game.file_path) if game.is_html_game else None,
            component_game=game.is_react_component,
        )

    def build_production_course(self, course: StagedCourse) -> ProductionCourse:
        """
        Materialise a production course from a staged one.

        Lessons are copied one-to-one in staged ``order``; nothing is dropped,
        merged or renumbered.
        """
        lessons = [
            ProductionLesson(
                order=lesson.order,
                title=lesson.title,
                lesson_type=LESSON_TYPE_MAP.get(lesson.lesson_type.lower(), "INTERACTIVE"),
                content_path=public_path(lesson.file),
                duration=lesson.duration,
                xp_reward=lesson.xp_reward,
                description=lesson.description,
                required_score=lesson.required_score,
            )
            for lesson in sorted(course.lessons, key=lambda d: d.order)
        ]
        return ProductionCourse(
            id=_new_id(),
            title=course.title,
            slug=course.slug,
            description=course.description,
            subject=course.subject,
            grade_levels=list(course.grade_levels),
            difficulty=DIFFICULTY_MAP.get(course.difficulty.lower(), "INTERMEDIATE"),
            is_premium=course.is_premium,
            estimated_minutes=course.estimated_minutes,
            total_xp=course.total_xp,
            source_content_id=course.id,
            created_at=_now_iso(),
            thumbnail_url=public_path(course.thumbnail_path),
            lessons=lessons,
        )
