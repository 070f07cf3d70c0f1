"""
Submission API Endpoints (developer)

Responsibilities:
1. Submit / resubmit a game for review, reopen a decided game as Draft
2. Resolve requested changes
3. Submission tracking
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
import logging

from database import get_db
from models import SubmissionStatus
from schemas import (
    GameResponse,
    SubmitRequest,
    SubmissionResponse,
    ResolveChangeResponse,
    RequestedChangeResponse,
    SubmissionStatusResponse,
    SubmissionSummary,
    SubmissionListResponse,
    TimelineEntry,
)
from core.submission_manager import SubmissionManager
from core.exceptions import WorkflowException
from api.deps import Principal, require_developer
from api.errors import http_error

router = APIRouter(prefix="/api/dev", tags=["submissions"])
logger = logging.getLogger(__name__)


def _submission_response(result) -> SubmissionResponse:
    game = result["game"]
    version = result["version"]
    return SubmissionResponse(
        game_id=game.id,
        status=game.submission_status,
        is_locked=game.is_locked,
        version_id=version.id,
        version_number=version.version_number,
        submitted_for_review_at=game.submitted_for_review_at,
        estimated_review_time=result["estimated_review_time"]
    )


@router.post("/games/{game_id}/submit", response_model=SubmissionResponse)
def submit_game(
    game_id: str,
    payload: SubmitRequest,
    developer: Principal = Depends(require_developer),
    db: Session = Depends(get_db)
):
    """
    Submit a Draft game for review

    Preconditions:
    - status Draft
    - cover image set, 2-5 screenshots
    - complete license declaration

    Returns:
        - version_id: the snapshot created for this submission
        - estimated_review_time
    """
    try:
        result = SubmissionManager.submit(
            db,
            game_id,
            developer.id,
            change_log=payload.change_log,
            changes=[c.model_dump() for c in payload.changes]
        )
        return _submission_response(result)

    except WorkflowException as e:
        raise http_error(e)
    except Exception as e:
        logger.error(f"Failed to submit game: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/games/{game_id}/resubmit", response_model=SubmissionResponse)
def resubmit_game(
    game_id: str,
    payload: SubmitRequest,
    developer: Principal = Depends(require_developer),
    db: Session = Depends(get_db)
):
    """
    Resubmit after changes were requested

    Every Critical requested change must be resolved first.
    """
    try:
        result = SubmissionManager.resubmit(
            db,
            game_id,
            developer.id,
            change_log=payload.change_log,
            changes=[c.model_dump() for c in payload.changes]
        )
        return _submission_response(result)

    except WorkflowException as e:
        raise http_error(e)
    except Exception as e:
        logger.error(f"Failed to resubmit game: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/games/{game_id}/reopen", response_model=GameResponse)
def reopen_game(
    game_id: str,
    developer: Principal = Depends(require_developer),
    db: Session = Depends(get_db)
):
    """
    Put an Approved or Rejected game back into Draft

    Keeps the current fields, use the version revert to restore older ones.
    """
    try:
        game = SubmissionManager.reopen(db, game_id, developer.id)
        return GameResponse.model_validate(game)

    except WorkflowException as e:
        raise http_error(e)
    except Exception as e:
        logger.error(f"Failed to reopen game: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Internal error")


@router.put("/games/{game_id}/changes/{change_id}/resolve", response_model=ResolveChangeResponse)
def resolve_change(
    game_id: str,
    change_id: str,
    developer: Principal = Depends(require_developer),
    db: Session = Depends(get_db)
):
    """Mark a requested change as resolved (does not resubmit)"""
    try:
        result = SubmissionManager.resolve_change(db, game_id, developer.id, change_id)
        return ResolveChangeResponse(
            change=RequestedChangeResponse.model_validate(result["change"]),
            all_changes_resolved=result["all_changes_resolved"],
            remaining_changes=result["remaining_changes"]
        )

    except WorkflowException as e:
        raise http_error(e)
    except Exception as e:
        logger.error(f"Failed to resolve change: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("/games/{game_id}/submission", response_model=SubmissionStatusResponse)
def get_submission_status(
    game_id: str,
    developer: Principal = Depends(require_developer),
    db: Session = Depends(get_db)
):
    """Current status, timeline and requested changes of one game"""
    try:
        result = SubmissionManager.get_submission_status(db, game_id, developer.id)
        game = result["game"]
        current_version = result["current_version"]

        return SubmissionStatusResponse(
            game_id=game.id,
            title=game.title,
            current_status=game.submission_status,
            is_locked=game.is_locked,
            current_version=current_version.version_number if current_version else None,
            submitted_for_review_at=game.submitted_for_review_at,
            last_reviewed_at=game.last_reviewed_at,
            reviewer_comments=game.reviewer_comments,
            rejection_reason=game.rejection_reason,
            timeline=[TimelineEntry(**entry) for entry in result["timeline"]],
            requested_changes=[
                RequestedChangeResponse.model_validate(c) for c in result["requested_changes"]
            ]
        )

    except WorkflowException as e:
        raise http_error(e)


@router.get("/submissions", response_model=SubmissionListResponse)
def list_submissions(
    status: Optional[SubmissionStatus] = Query(None),
    developer: Principal = Depends(require_developer),
    db: Session = Depends(get_db)
):
    """All of the developer's submitted games, optionally filtered by status"""
    games = SubmissionManager.list_submissions(db, developer.id, status)
    submissions = [
        SubmissionSummary(
            game_id=g.id,
            title=g.title,
            status=g.submission_status,
            version=g.version,
            submitted_for_review_at=g.submitted_for_review_at,
            last_reviewed_at=g.last_reviewed_at
        )
        for g in games
    ]
    return SubmissionListResponse(submissions=submissions, count=len(submissions))
