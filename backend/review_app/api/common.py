"""Shared request schemas, serializers and error mapping for the review routers."""
from __future__ import annotations
from dataclasses import asdict
from typing import Optional

from fastapi import HTTPException, status
from pydantic import BaseModel

from review_app.domain.common.result import ErrorCode, Result
from review_app.domain.review.models import (
    COURSE,
    ApprovalEntry,
    CatalogEntry,
    FeedbackEntry,
    ProductionCourse,
    StagedCourse,
    StagedGame,
)

_HTTP_STATUS = {
    ErrorCode.CONTENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INVALID_STATUS: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_APPROVAL: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_FEEDBACK: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_CONTENT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ErrorCode.NOT_APPROVED: status.HTTP_409_CONFLICT,
    ErrorCode.ALREADY_PROMOTED: status.HTTP_409_CONFLICT,
    ErrorCode.STORAGE_FAILURE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def unwrap(result: Result):
    """Return the value of a successful result or raise the matching HTTPException."""
    if result.is_success:
        return result.value
    raise HTTPException(
        status_code=_HTTP_STATUS.get(result.code, status.HTTP_400_BAD_REQUEST),
        detail={"code": result.code.value, "message": result.error},
    )


# ------------------------------------------------------------------
# Pydantic schemas shared by games and courses
# ------------------------------------------------------------------
class StatusChangeBody(BaseModel):
    status: str


class FeedbackBody(BaseModel):
    feedback_type: str = "GENERAL"
    message: str
    issue_severity: Optional[str] = None
    lesson_index: Optional[int] = None
    screenshot_url: Optional[str] = None


class GameApprovalBody(BaseModel):
    decision: str
    notes: Optional[str] = None
    engagement_level: Optional[int] = None
    educational_quality: bool = False
    technical_quality: bool = False
    accessibility_compliant: bool = False
    age_appropriate: bool = False


class CourseApprovalBody(GameApprovalBody):
    curriculum_quality: bool = False
    content_accuracy: bool = False


# ------------------------------------------------------------------
# Serializers
# ------------------------------------------------------------------
def serialize_game(g: StagedGame) -> dict:
    return {
        "id": g.id,
        "game_id": g.game_id,
        "title": g.title,
        "description": g.description,
        "category": g.category,
        "content_type": g.content_type,
        "grade_levels": g.grade_levels,
        "difficulty": g.difficulty,
        "skills": g.skills,
        "estimated_time": g.estimated_time,
        "file_path": g.file_path,
        "is_html_game": g.is_html_game,
        "is_react_component": g.is_react_component,
        "status": g.status,
        "catalogued": g.catalogued,
        "catalogued_at": g.catalogued_at,
        "catalogued_by": g.catalogued_by,
        "created_by": g.created_by,
        "created_at": g.created_at,
        "updated_at": g.updated_at,
        "approval_count": g.approval_count,
        "feedback_count": g.feedback_count,
    }


def serialize_course(c: StagedCourse) -> dict:
    return {
        "id": c.id,
        "slug": c.slug,
        "title": c.title,
        "description": c.description,
        "subject": c.subject,
        "grade_levels": c.grade_levels,
        "difficulty": c.difficulty,
        "is_premium": c.is_premium,
        "estimated_minutes": c.estimated_minutes,
        "total_xp": c.total_xp,
        "staging_path": c.staging_path,
        "thumbnail_path": c.thumbnail_path,
        "lessons": [asdict(lesson) for lesson in c.lessons],
        "status": c.status,
        "promoted_to_course_id": c.promoted_to_course_id,
        "promoted_at": c.promoted_at,
        "promoted_by": c.promoted_by,
        "created_by": c.created_by,
        "created_at": c.created_at,
        "updated_at": c.updated_at,
        "approval_count": c.approval_count,
        "feedback_count": c.feedback_count,
    }


def serialize_approval(a: ApprovalEntry) -> dict:
    return {"kind": a.kind, **asdict(a)}


def serialize_feedback(f: FeedbackEntry) -> dict:
    data = asdict(f)
    if f.kind != COURSE:
        data.pop("lesson_index")
        data.pop("screenshot_url")
    return data


def serialize_catalog_entry(e: CatalogEntry) -> dict:
    return asdict(e)


def serialize_promoted_course(p: ProductionCourse) -> dict:
    return {
        "course_id": p.id,
        "slug": p.slug,
        "difficulty": p.difficulty,
        "lessons_created": len(p.lessons),
        "lessons": [asdict(lesson) for lesson in p.lessons],
    }
