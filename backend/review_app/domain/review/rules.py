"""Business rules for staged content review — status legality, ledger payloads, promotability."""
from __future__ import annotations
from typing import List, Optional

from review_app.domain.common.result import ErrorCode, Result
from review_app.domain.review.models import (
    APPROVED,
    BUG,
    DECISIONS,
    DIFFICULTIES,
    FEEDBACK_TYPES,
    GAME_CONTENT_TYPES,
    ISSUE_SEVERITIES,
    REVIEW_STATUSES,
    StagedContent,
)

VALID_STATUSES = set(REVIEW_STATUSES)

ENGAGEMENT_MIN = 1
ENGAGEMENT_MAX = 5


def validate_status(new_status: str) -> Result[str]:
    """Any of the five statuses may be set from any state; only membership is checked."""
    if new_status not in VALID_STATUSES:
        return Result.fail(
            f"'{new_status}' is not a valid status. Must be one of {sorted(VALID_STATUSES)}.",
            ErrorCode.INVALID_STATUS,
        )
    return Result.ok(new_status)


def validate_approval(data: dict) -> Result[dict]:
    decision = data.get("decision")
    if decision not in DECISIONS:
        return Result.fail(
            f"Invalid decision '{decision}'. Must be APPROVE, REJECT, or REQUEST_CHANGES.",
            ErrorCode.INVALID_APPROVAL,
        )

    engagement = data.get("engagement_level")
    if engagement is not None:
        if isinstance(engagement, bool) or not isinstance(engagement, int):
            return Result.fail("engagement_level must be an integer.", ErrorCode.INVALID_APPROVAL)
        if not ENGAGEMENT_MIN <= engagement <= ENGAGEMENT_MAX:
            return Result.fail(
                f"engagement_level must be between {ENGAGEMENT_MIN} and {ENGAGEMENT_MAX}, got {engagement}.",
                ErrorCode.INVALID_APPROVAL,
            )
    return Result.ok(data)


def validate_feedback(data: dict, lesson_count: Optional[int]) -> Result[dict]:
    """
    Validate a feedback payload.

    ``lesson_count`` is the number of lessons for a course, or None for a game
    (games have no lessons to point at).
    """
    message = (data.get("message") or "").strip()
    if not message:
        return Result.fail("Feedback message is required.", ErrorCode.INVALID_FEEDBACK)

    feedback_type = data.get("feedback_type")
    if feedback_type not in FEEDBACK_TYPES:
        return Result.fail(f"Invalid feedback type '{feedback_type}'.", ErrorCode.INVALID_FEEDBACK)

    severity = data.get("issue_severity")
    if severity is not None:
        if feedback_type != BUG:
            return Result.fail(
                f"issue_severity is only allowed for BUG feedback, not {feedback_type}.",
                ErrorCode.INVALID_FEEDBACK,
            )
        if severity not in ISSUE_SEVERITIES:
            return Result.fail(f"Invalid issue severity '{severity}'.", ErrorCode.INVALID_FEEDBACK)

    lesson_index = data.get("lesson_index")
    if lesson_index is not None:
        if lesson_count is None:
            return Result.fail("lesson_index only applies to course feedback.", ErrorCode.INVALID_FEEDBACK)
        if isinstance(lesson_index, bool) or not isinstance(lesson_index, int):
            return Result.fail("lesson_index must be an integer.", ErrorCode.INVALID_FEEDBACK)
        if not 0 <= lesson_index < lesson_count:
            return Result.fail(
                f"lesson_index {lesson_index} is out of range for a course with {lesson_count} lessons.",
                ErrorCode.INVALID_FEEDBACK,
            )
    return Result.ok(data)


def _validate_common(data: dict, required: List[str]) -> Result[dict]:
    for name in required:
        if not (data.get(name) or "").strip():
            return Result.fail(f"'{name}' is required and cannot be empty.", ErrorCode.INVALID_CONTENT)

    difficulty = (data.get("difficulty") or "").lower()
    if difficulty not in DIFFICULTIES:
        return Result.fail(
            f"Invalid difficulty '{data.get('difficulty')}'. Must be one of {list(DIFFICULTIES)}.",
            ErrorCode.INVALID_CONTENT,
        )
    return Result.ok(data)


def validate_game_metadata(data: dict) -> Result[dict]:
    common = _validate_common(data, ["game_id", "title", "category", "file_path"])
    if not common.is_success:
        return common

    content_type = data.get("content_type") or "game"
    if content_type not in GAME_CONTENT_TYPES:
        return Result.fail(
            f"Invalid content type '{content_type}'. Must be 'game' or 'lesson'.",
            ErrorCode.INVALID_CONTENT,
        )
    return Result.ok(data)


def validate_course_metadata(data: dict, lessons: List[dict]) -> Result[dict]:
    common = _validate_common(data, ["slug", "title", "subject"])
    if not common.is_success:
        return common

    seen_orders = set()
    for position, lesson in enumerate(lessons):
        if not (lesson.get("title") or "").strip():
            return Result.fail(f"Lesson at position {position} has no title.", ErrorCode.INVALID_CONTENT)
        order = lesson.get("order")
        if isinstance(order, bool) or not isinstance(order, int):
            return Result.fail(f"Lesson '{lesson['title']}' has no integer order.", ErrorCode.INVALID_CONTENT)
        if order in seen_orders:
            return Result.fail(f"Duplicate lesson order {order}.", ErrorCode.INVALID_CONTENT)
        seen_orders.add(order)
        if (lesson.get("duration") or 0) < 0 or (lesson.get("xp_reward") or 0) < 0:
            return Result.fail(
                f"Lesson '{lesson['title']}' has a negative duration or XP reward.",
                ErrorCode.INVALID_CONTENT,
            )
    return Result.ok(data)


def validate_promotable(content: StagedContent) -> Result[StagedContent]:
    """Promotion requires APPROVED status and an unset release flag."""
    if content.status != APPROVED:
        return Result.fail(
            f"Content must be approved before promotion (current status: {content.status}).",
            ErrorCode.NOT_APPROVED,
        )
    if content.is_released:
        return Result.fail("Content has already been promoted.", ErrorCode.ALREADY_PROMOTED)
    return Result.ok(content)
