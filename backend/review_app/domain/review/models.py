"""Review domain models — pure Python, no DB or HTTP dependencies."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Union

# Content kinds
GAME = "game"
COURSE = "course"
CONTENT_KINDS = (GAME, COURSE)

# Review statuses
NOT_TESTED = "NOT_TESTED"
IN_TESTING = "IN_TESTING"
APPROVED = "APPROVED"
NEEDS_REVISION = "NEEDS_REVISION"
REJECTED = "REJECTED"
REVIEW_STATUSES = (NOT_TESTED, IN_TESTING, APPROVED, NEEDS_REVISION, REJECTED)

DIFFICULTIES = ("easy", "medium", "hard")
GAME_CONTENT_TYPES = ("game", "lesson")

# Approval decisions
APPROVE = "APPROVE"
REJECT = "REJECT"
REQUEST_CHANGES = "REQUEST_CHANGES"
DECISIONS = (APPROVE, REJECT, REQUEST_CHANGES)

# Feedback
BUG = "BUG"
FEEDBACK_TYPES = (BUG, "SUGGESTION", "PRAISE", "ACCESSIBILITY_ISSUE", "CONTENT_ERROR", "GENERAL")
ISSUE_SEVERITIES = ("CRITICAL", "MAJOR", "MINOR", "TRIVIAL")

GAME_QUALITY_FIELDS = (
    "educational_quality",
    "technical_quality",
    "accessibility_compliant",
    "age_appropriate",
)
COURSE_QUALITY_FIELDS = GAME_QUALITY_FIELDS + ("curriculum_quality", "content_accuracy")


@dataclass
class LessonDescriptor:
    order: int
    title: str
    lesson_type: str
    file: str
    duration: int = 0
    xp_reward: int = 0
    description: Optional[str] = None
    required_score: Optional[int] = None


@dataclass
class StagedGame:
    id: str
    game_id: str
    title: str
    description: str
    category: str
    content_type: str  # game | lesson
    grade_levels: List[str]
    difficulty: str
    skills: List[str]
    estimated_time: str
    file_path: str
    status: str  # one of REVIEW_STATUSES
    created_at: str
    updated_at: str
    is_html_game: bool = True
    is_react_component: bool = False
    catalogued: bool = False
    catalogued_at: Optional[str] = None
    catalogued_by: Optional[str] = None
    created_by: str = ""
    approval_count: int = 0
    feedback_count: int = 0

    @property
    def is_released(self) -> bool:
        return self.catalogued


@dataclass
class StagedCourse:
    id: str
    slug: str
    title: str
    description: str
    subject: str
    grade_levels: List[str]
    difficulty: str
    status: str
    created_at: str
    updated_at: str
    is_premium: bool = False
    estimated_minutes: int = 0
    total_xp: int = 0
    staging_path: str = ""
    thumbnail_path: Optional[str] = None
    lessons: List[LessonDescriptor] = field(default_factory=list)
    promoted_to_course_id: Optional[str] = None
    promoted_at: Optional[str] = None
    promoted_by: Optional[str] = None
    created_by: str = ""
    approval_count: int = 0
    feedback_count: int = 0

    @property
    def is_released(self) -> bool:
        return self.promoted_to_course_id is not None


StagedContent = Union[StagedGame, StagedCourse]


@dataclass(frozen=True)
class GameApproval:
    id: str
    content_id: str
    reviewer_name: str
    decision: str
    created_at: str
    notes: Optional[str] = None
    engagement_level: Optional[int] = None
    educational_quality: bool = False
    technical_quality: bool = False
    accessibility_compliant: bool = False
    age_appropriate: bool = False

    kind = GAME


@dataclass(frozen=True)
class CourseApproval:
    id: str
    content_id: str
    reviewer_name: str
    decision: str
    created_at: str
    notes: Optional[str] = None
    engagement_level: Optional[int] = None
    educational_quality: bool = False
    technical_quality: bool = False
    accessibility_compliant: bool = False
    age_appropriate: bool = False
    curriculum_quality: bool = False
    content_accuracy: bool = False

    kind = COURSE


ApprovalEntry = Union[GameApproval, CourseApproval]


@dataclass(frozen=True)
class FeedbackEntry:
    id: str
    content_id: str
    kind: str  # GAME | COURSE
    reviewer_name: str
    feedback_type: str
    message: str
    created_at: str
    issue_severity: Optional[str] = None
    lesson_index: Optional[int] = None
    screenshot_url: Optional[str] = None


# ------------------------------------------------------------------
# Live-store records produced by promotion
# ------------------------------------------------------------------
@dataclass
class CatalogEntry:
    game_id: str
    title: str
    description: str
    content_type: str
    category: str
    catalog_section: str
    grade_levels: List[str]
    difficulty: str
    skills: List[str]
    estimated_time: str
    source_content_id: str
    created_at: str
    featured: bool = False
    html_path: Optional[str] = None
    component_game: bool = False


@dataclass
class ProductionLesson:
    order: int
    title: str
    lesson_type: str  # VIDEO | INTERACTIVE | GAME | QUIZ | READING | PROJECT
    content_path: str
    duration: int
    xp_reward: int
    description: Optional[str] = None
    required_score: Optional[int] = None


@dataclass
class ProductionCourse:
    id: str
    title: str
    slug: str
    description: str
    subject: str
    grade_levels: List[str]
    difficulty: str  # BEGINNER | INTERMEDIATE | ADVANCED
    is_premium: bool
    estimated_minutes: int
    total_xp: int
    source_content_id: str
    created_at: str
    thumbnail_url: Optional[str] = None
    is_published: bool = True
    lessons: List[ProductionLesson] = field(default_factory=list)
