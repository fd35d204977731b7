"""Staged game review + promotion API endpoints."""
from __future__ import annotations
from typing import List

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from review_app.api.auth import require_admin, reviewer_name
from review_app.api.common import (
    FeedbackBody,
    GameApprovalBody,
    StatusChangeBody,
    serialize_approval,
    serialize_catalog_entry,
    serialize_feedback,
    serialize_game,
    unwrap,
)
from review_app.application.promotion_app_service import PromotionAppService
from review_app.application.review_app_service import ReviewAppService
from review_app.container import get_promotion_app_service, get_review_app_service
from review_app.domain.review.models import GAME

router = APIRouter(prefix="/admin/test-games", tags=["test-games"])


class GameCreateBody(BaseModel):
    game_id: str
    title: str
    description: str = ""
    category: str
    content_type: str = "game"
    grade_levels: List[str] = []
    difficulty: str
    skills: List[str] = []
    estimated_time: str = ""
    file_path: str
    is_html_game: bool = True
    is_react_component: bool = False


@router.get("")
def list_games(
    svc: ReviewAppService = Depends(get_review_app_service),
    current_user: dict = Depends(require_admin),
):
    return {"games": [serialize_game(g) for g in unwrap(svc.list_games())]}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_game(
    body: GameCreateBody,
    svc: ReviewAppService = Depends(get_review_app_service),
    current_user: dict = Depends(require_admin),
):
    game = unwrap(svc.create_game(body.model_dump(), created_by=current_user["sub"]))
    return {"game": serialize_game(game)}


@router.get("/{content_id}")
def get_game(
    content_id: str,
    svc: ReviewAppService = Depends(get_review_app_service),
    current_user: dict = Depends(require_admin),
):
    game = unwrap(svc.get_content(GAME, content_id))
    return {
        "game": serialize_game(game),
        "approvals": [serialize_approval(a) for a in unwrap(svc.list_approvals(GAME, content_id))],
        "feedback": [serialize_feedback(f) for f in unwrap(svc.list_feedback(GAME, content_id))],
    }


@router.patch("/{content_id}/status")
def change_status(
    content_id: str,
    body: StatusChangeBody,
    svc: ReviewAppService = Depends(get_review_app_service),
    current_user: dict = Depends(require_admin),
):
    game = unwrap(svc.set_status(GAME, content_id, body.status))
    return {"game": serialize_game(game)}


# ------------------------------------------------------------------
# Approval ledger
# ------------------------------------------------------------------
@router.post("/{content_id}/approvals", status_code=status.HTTP_201_CREATED)
def record_approval(
    content_id: str,
    body: GameApprovalBody,
    svc: ReviewAppService = Depends(get_review_app_service),
    current_user: dict = Depends(require_admin),
):
    approval = unwrap(svc.record_approval(GAME, content_id, reviewer_name(current_user), body.model_dump()))
    return {"approval": serialize_approval(approval)}


@router.get("/{content_id}/approvals")
def list_approvals(
    content_id: str,
    svc: ReviewAppService = Depends(get_review_app_service),
    current_user: dict = Depends(require_admin),
):
    return {"approvals": [serialize_approval(a) for a in unwrap(svc.list_approvals(GAME, content_id))]}


# ------------------------------------------------------------------
# Feedback log
# ------------------------------------------------------------------
@router.post("/{content_id}/feedback", status_code=status.HTTP_201_CREATED)
def record_feedback(
    content_id: str,
    body: FeedbackBody,
    svc: ReviewAppService = Depends(get_review_app_service),
    current_user: dict = Depends(require_admin),
):
    feedback = unwrap(svc.record_feedback(GAME, content_id, reviewer_name(current_user), body.model_dump()))
    return {"feedback": serialize_feedback(feedback)}


@router.get("/{content_id}/feedback")
def list_feedback(
    content_id: str,
    svc: ReviewAppService = Depends(get_review_app_service),
    current_user: dict = Depends(require_admin),
):
    return {"feedback": [serialize_feedback(f) for f in unwrap(svc.list_feedback(GAME, content_id))]}


# ------------------------------------------------------------------
# Promotion
# ------------------------------------------------------------------
@router.post("/{content_id}/promote")
def promote_game(
    content_id: str,
    svc: PromotionAppService = Depends(get_promotion_app_service),
    current_user: dict = Depends(require_admin),
):
    entry = unwrap(svc.promote_game(content_id, promoted_by=current_user["sub"]))
    return {
        "success": True,
        "message": f"Game added to {entry.catalog_section}",
        "catalog_entry": serialize_catalog_entry(entry),
    }
