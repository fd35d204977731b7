"""Staged course review + promotion API endpoints."""
from __future__ import annotations
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from review_app.api.auth import require_admin, reviewer_name
from review_app.api.common import (
    CourseApprovalBody,
    FeedbackBody,
    StatusChangeBody,
    serialize_approval,
    serialize_course,
    serialize_feedback,
    serialize_promoted_course,
    unwrap,
)
from review_app.application.promotion_app_service import PromotionAppService
from review_app.application.review_app_service import ReviewAppService
from review_app.container import get_promotion_app_service, get_review_app_service
from review_app.domain.review.models import COURSE

router = APIRouter(prefix="/admin/test-courses", tags=["test-courses"])


class LessonBody(BaseModel):
    order: int
    title: str
    lesson_type: str = "interactive"
    file: str = ""
    duration: int = 0
    xp_reward: int = 0
    description: Optional[str] = None
    required_score: Optional[int] = None


class CourseCreateBody(BaseModel):
    slug: str
    title: str
    description: str = ""
    subject: str
    grade_levels: List[str] = []
    difficulty: str
    is_premium: bool = False
    estimated_minutes: int = 0
    total_xp: int = 0
    staging_path: str = ""
    thumbnail_path: Optional[str] = None
    lessons: List[LessonBody] = []


@router.get("")
def list_courses(
    slug: Optional[str] = None,
    svc: ReviewAppService = Depends(get_review_app_service),
    current_user: dict = Depends(require_admin),
):
    return {"courses": [serialize_course(c) for c in unwrap(svc.list_courses(slug))]}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_course(
    body: CourseCreateBody,
    svc: ReviewAppService = Depends(get_review_app_service),
    current_user: dict = Depends(require_admin),
):
    data = body.model_dump()
    lessons = data.pop("lessons")
    course = unwrap(svc.create_course(data, lessons, created_by=current_user["sub"]))
    return {"course": serialize_course(course)}


@router.get("/{content_id}")
def get_course(
    content_id: str,
    svc: ReviewAppService = Depends(get_review_app_service),
    current_user: dict = Depends(require_admin),
):
    course = unwrap(svc.get_content(COURSE, content_id))
    return {
        "course": serialize_course(course),
        "approvals": [serialize_approval(a) for a in unwrap(svc.list_approvals(COURSE, content_id))],
        "feedback": [serialize_feedback(f) for f in unwrap(svc.list_feedback(COURSE, content_id))],
    }


@router.patch("/{content_id}/status")
def change_status(
    content_id: str,
    body: StatusChangeBody,
    svc: ReviewAppService = Depends(get_review_app_service),
    current_user: dict = Depends(require_admin),
):
    course = unwrap(svc.set_status(COURSE, content_id, body.status))
    return {"course": serialize_course(course)}


@router.post("/{content_id}/approvals", status_code=status.HTTP_201_CREATED)
def record_approval(
    content_id: str,
    body: CourseApprovalBody,
    svc: ReviewAppService = Depends(get_review_app_service),
    current_user: dict = Depends(require_admin),
):
    approval = unwrap(svc.record_approval(COURSE, content_id, reviewer_name(current_user), body.model_dump()))
    return {"approval": serialize_approval(approval)}


@router.get("/{content_id}/approvals")
def list_approvals(
    content_id: str,
    svc: ReviewAppService = Depends(get_review_app_service),
    current_user: dict = Depends(require_admin),
):
    return {"approvals": [serialize_approval(a) for a in unwrap(svc.list_approvals(COURSE, content_id))]}


@router.post("/{content_id}/feedback", status_code=status.HTTP_201_CREATED)
def record_feedback(
    content_id: str,
    body: FeedbackBody,
    svc: ReviewAppService = Depends(get_review_app_service),
    current_user: dict = Depends(require_admin),
):
    feedback = unwrap(svc.record_feedback(COURSE, content_id, reviewer_name(current_user), body.model_dump()))
    return {"feedback": serialize_feedback(feedback)}


@router.get("/{content_id}/feedback")
def list_feedback(
    content_id: str,
    svc: ReviewAppService = Depends(get_review_app_service),
    current_user: dict = Depends(require_admin),
):
    return {"feedback": [serialize_feedback(f) for f in unwrap(svc.list_feedback(COURSE, content_id))]}


@router.post("/{content_id}/promote")
def promote_course(
    content_id: str,
    svc: PromotionAppService = Depends(get_promotion_app_service),
    current_user: dict = Depends(require_admin),
):
    course = unwrap(svc.promote_course(content_id, promoted_by=current_user["sub"]))
    return {
        "success": True,
        "message": "Course promoted to production successfully",
        **serialize_promoted_course(course),
    }
