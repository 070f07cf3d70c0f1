"""
Pydantic request / response schemas
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models import ChangePriority, ReviewDecision, SubmissionStatus


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# ============ Games ============

class GameCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = None
    difficulty: Optional[str] = None
    game_url: Optional[str] = None
    version: Optional[str] = None


class GameUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = None
    difficulty: Optional[str] = None
    game_url: Optional[str] = None


class ScreenshotIn(BaseModel):
    url: str
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    aspect_ratio: Optional[str] = None


class CoverImageIn(ScreenshotIn):
    pass


class ScreenshotsIn(BaseModel):
    screenshots: List[ScreenshotIn] = []


class GameResponse(ORMModel):
    id: str
    developer_id: str
    developer_name: Optional[str] = None
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    difficulty: Optional[str] = None
    game_url: Optional[str] = None
    version: str
    cover_image_url: Optional[str] = None
    screenshots: List[Dict[str, Any]] = []
    submission_status: SubmissionStatus
    is_locked: bool
    submitted_for_review_at: Optional[datetime] = None
    last_reviewed_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    reviewer_comments: Optional[str] = None
    created_at: Optional[datetime] = None


class GameListResponse(BaseModel):
    games: List[GameResponse]
    count: int


class MediaResponse(BaseModel):
    game_id: str
    cover_image_url: Optional[str] = None
    cover_image: Optional[Dict[str, Any]] = None
    screenshots: List[Dict[str, Any]] = []
    screenshot_count: int


class LicenseIn(BaseModel):
    engine_name: Optional[str] = None
    engine_license_type: Optional[str] = None
    ownership_status: Optional[str] = None
    copyright_holder: Optional[str] = None
    copyright_year: Optional[int] = None
    ownership_confirmed: bool = False
    no_infringement: bool = False
    accurate_information: bool = False
    agreement_accepted: bool = False


class LicenseResponse(ORMModel, LicenseIn):
    id: str
    game_id: str


# ============ Submission ============

class ChangeEntry(BaseModel):
    type: str
    description: str


class SubmitRequest(BaseModel):
    change_log: Optional[str] = None
    changes: List[ChangeEntry] = []


class SubmissionResponse(BaseModel):
    game_id: str
    status: SubmissionStatus
    is_locked: bool
    version_id: str
    version_number: str
    submitted_for_review_at: Optional[datetime] = None
    estimated_review_time: str


class RequestedChangeResponse(ORMModel):
    id: str
    change: str
    priority: ChangePriority
    category: Optional[str] = None
    must_fix: bool
    resolved: bool
    resolved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class ResolveChangeResponse(BaseModel):
    change: RequestedChangeResponse
    all_changes_resolved: bool
    remaining_changes: int


class TimelineEntry(BaseModel):
    status: str
    event_type: str
    timestamp: Optional[datetime] = None
    actor_id: Optional[str] = None


class SubmissionStatusResponse(BaseModel):
    game_id: str
    title: str
    current_status: SubmissionStatus
    is_locked: bool
    current_version: Optional[str] = None
    submitted_for_review_at: Optional[datetime] = None
    last_reviewed_at: Optional[datetime] = None
    reviewer_comments: Optional[str] = None
    rejection_reason: Optional[str] = None
    timeline: List[TimelineEntry]
    requested_changes: List[RequestedChangeResponse]


class SubmissionSummary(BaseModel):
    game_id: str
    title: str
    status: SubmissionStatus
    version: str
    submitted_for_review_at: Optional[datetime] = None
    last_reviewed_at: Optional[datetime] = None


class SubmissionListResponse(BaseModel):
    submissions: List[SubmissionSummary]
    count: int


# ============ Versions ============

class VersionResponse(ORMModel):
    id: str
    game_id: str
    sequence: int
    version_number: str
    status: SubmissionStatus
    is_current_version: bool
    is_approved: bool
    approved_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    snapshot: Dict[str, Any]
    change_log: Optional[str] = None
    changes: List[Dict[str, Any]] = []
    is_revert: bool
    reverted_to: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None


class VersionSummary(VersionResponse):
    can_revert_to: bool


class VersionListResponse(BaseModel):
    versions: List[VersionSummary]
    count: int
    current_version: str


class ApprovalHistoryResponse(BaseModel):
    approval_history: List[VersionResponse]
    count: int


class VersionDifference(BaseModel):
    field: str
    version1: Any = None
    version2: Any = None


class CompareResponse(BaseModel):
    version1: VersionResponse
    version2: VersionResponse
    differences: List[VersionDifference]
    has_changes: bool


class RevertRequest(BaseModel):
    confirmation: Optional[str] = None


class RevertResponse(BaseModel):
    game_id: str
    reverted_to_version: str
    new_version_id: str
    new_version_number: str
    new_status: SubmissionStatus
    is_locked: bool
    title: str


# ============ Admin reviews ============

class RequestedChangeIn(BaseModel):
    change: str
    priority: ChangePriority = ChangePriority.MEDIUM
    category: Optional[str] = None
    must_fix: bool = False


class DecisionRequest(BaseModel):
    status: ReviewDecision
    overall_comments: Optional[str] = None
    functionality_test: Optional[Dict[str, Any]] = None
    policy_compliance: Optional[Dict[str, Any]] = None
    content_review: Optional[Dict[str, Any]] = None
    performance_test: Optional[Dict[str, Any]] = None
    uiux_evaluation: Optional[Dict[str, Any]] = None
    requested_changes: List[RequestedChangeIn] = []
    rejection_reason: Optional[str] = None

    def test_results(self) -> Dict[str, Any]:
        results = {
            "functionality_test": self.functionality_test,
            "policy_compliance": self.policy_compliance,
            "content_review": self.content_review,
            "performance_test": self.performance_test,
            "uiux_evaluation": self.uiux_evaluation,
        }
        return {key: value for key, value in results.items() if value is not None}


class ReviewStartResponse(BaseModel):
    id: str
    game_id: str
    game_title: str
    version_id: Optional[str] = None
    reviewer_id: str
    started_at: Optional[datetime] = None


class DecisionResponse(BaseModel):
    message: str
    review_id: str
    game: GameResponse
    requested_changes: List[RequestedChangeResponse] = []


class PendingReviewsResponse(BaseModel):
    games: List[GameResponse]
    count: int
