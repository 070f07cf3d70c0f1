"""
Admin Review API Endpoints

Responsibilities:
1. Pending review queue
2. Start a review
3. Record a decision (Approved / Changes Requested / Rejected)

Only principals with the admin role reach these routes.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
import logging

from database import get_db
from models import ReviewDecision
from schemas import (
    DecisionRequest,
    DecisionResponse,
    GameResponse,
    PendingReviewsResponse,
    RequestedChangeResponse,
    ReviewStartResponse,
)
from core.review_manager import ReviewManager
from core.exceptions import WorkflowException
from api.deps import Principal, require_admin
from api.errors import http_error

router = APIRouter(prefix="/api/admin/reviews", tags=["admin-reviews"])
logger = logging.getLogger(__name__)


DECISION_MESSAGES = {
    ReviewDecision.APPROVED: "Game approved",
    ReviewDecision.CHANGES_REQUESTED: "Changes requested from the developer",
    ReviewDecision.REJECTED: "Game rejected",
}


@router.get("/pending", response_model=PendingReviewsResponse)
def list_pending_reviews(
    admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Games In Review, oldest submission first"""
    games = ReviewManager.list_pending(db)
    return PendingReviewsResponse(
        games=[GameResponse.model_validate(g) for g in games],
        count=len(games)
    )


@router.post("/games/{game_id}/start", response_model=ReviewStartResponse)
def start_review(
    game_id: str,
    admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    Start reviewing a game

    Preconditions:
    - game status In Review

    Creates a GameReview record, the game status does not change.
    """
    try:
        review = ReviewManager.start_review(db, game_id, admin.id)
        return ReviewStartResponse(
            id=review.id,
            game_id=review.game_id,
            game_title=review.game.title,
            version_id=review.version_id,
            reviewer_id=review.reviewer_id,
            started_at=review.started_at
        )

    except WorkflowException as e:
        raise http_error(e)
    except Exception as e:
        logger.error(f"Failed to start review: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/games/{game_id}/decision", response_model=DecisionResponse)
def decide(
    game_id: str,
    payload: DecisionRequest,
    admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    Record the review decision

    Effects (all decisions unlock the game):
    - Approved: status Approved, current version approved
    - Changes Requested: requested changes added to the ledger
    - Rejected: status Rejected with rejection reason
    """
    try:
        result = ReviewManager.decide(
            db,
            game_id,
            admin.id,
            payload.status,
            overall_comments=payload.overall_comments,
            test_results=payload.test_results(),
            requested_changes=[c.model_dump() for c in payload.requested_changes],
            rejection_reason=payload.rejection_reason
        )
        return DecisionResponse(
            message=DECISION_MESSAGES[payload.status],
            review_id=result["review"].id,
            game=GameResponse.model_validate(result["game"]),
            requested_changes=[
                RequestedChangeResponse.model_validate(c) for c in result["requested_changes"]
            ]
        )

    except WorkflowException as e:
        raise http_error(e)
    except Exception as e:
        logger.error(f"Failed to record review decision: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Internal error")
