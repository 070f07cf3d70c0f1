"""
Review Manager: the admin side of the review loop

Responsibilities:
1. Pending review queue
2. Start a review (GameReview record, no status change)
3. Record a decision: Approved / Changes Requested / Rejected

Every decision unlocks the game, the review is over once a decision exists.
Calling start_review first is optional, decide() opens a review itself when
the reviewer has none.
"""
from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional
import logging

from models import (
    Game,
    GameReview,
    RequestedChange,
    ChangePriority,
    ReviewDecision,
    SubmissionStatus,
    utcnow,
)
from core.state_machine import GameStateMachine
from core.locks import with_game_lock, with_current_version_lock
from core.exceptions import ConflictError, GameNotFound, ValidationError
from database import transactional

logger = logging.getLogger(__name__)


DECISION_TO_STATUS = {
    ReviewDecision.APPROVED: SubmissionStatus.APPROVED,
    ReviewDecision.CHANGES_REQUESTED: SubmissionStatus.CHANGES_REQUESTED,
    ReviewDecision.REJECTED: SubmissionStatus.REJECTED,
}


class ReviewManager:
    """Admin-side review workflow"""

    @staticmethod
    def _get_game_in_review(db: Session, game_id: str) -> Game:
        game = with_game_lock(game_id, db).first()
        if not game:
            raise GameNotFound(game_id)
        if game.submission_status != SubmissionStatus.IN_REVIEW:
            raise ConflictError(
                f"Game is not in review status (current status: {game.submission_status.value})"
            )
        return game

    @staticmethod
    def list_pending(db: Session) -> List[Game]:
        """Games waiting for a decision, oldest submission first"""
        return db.query(Game).filter(
            Game.submission_status == SubmissionStatus.IN_REVIEW
        ).order_by(Game.submitted_for_review_at.asc()).all()

    @staticmethod
    @transactional
    def start_review(db: Session, game_id: str, reviewer_id: str) -> GameReview:
        """
        Open a GameReview for a game In Review

        Does not change the game's status.

        Raises:
            GameNotFound: game does not exist
            ConflictError: game is not In Review
        """
        game = ReviewManager._get_game_in_review(db, game_id)
        current = with_current_version_lock(game.id, db).first()

        review = GameReview(
            game_id=game.id,
            version_id=current.id if current else None,
            reviewer_id=reviewer_id,
            started_at=utcnow(),
            test_results={}
        )
        db.add(review)
        db.flush()

        logger.info(f"Reviewer {reviewer_id} started review {review.id} of game {game_id}")
        return review

    @staticmethod
    @transactional
    def decide(
        db: Session,
        game_id: str,
        reviewer_id: str,
        decision: ReviewDecision,
        overall_comments: Optional[str] = None,
        test_results: Optional[Dict[str, Any]] = None,
        requested_changes: Optional[List[Dict[str, Any]]] = None,
        rejection_reason: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Apply an admin decision to a game In Review

        Effects:
        - Approved: status Approved, approved_at/approved_by, current version approved
        - Changes Requested: changes appended to the ledger, status Changes Requested
        - Rejected: status Rejected, rejected_at, rejection_reason
        - always: unlocked, last_reviewed_at, reviewer_comments, review completed

        Args:
            db: SQLAlchemy Session
            game_id: Game id
            reviewer_id: admin making the decision
            decision: ReviewDecision
            overall_comments: reviewer comments shown to the developer
            test_results: functionality / policy / content / performance / UI results
            requested_changes: [{"change", "priority", "category", "must_fix"}]
            rejection_reason: required for Rejected (falls back to overall_comments)

        Returns:
            {"game", "review", "requested_changes"}

        Raises:
            GameNotFound: game does not exist
            ConflictError: game is not In Review
            ValidationError: missing requested changes / rejection reason
        """
        # 1. Game must be under review
        game = ReviewManager._get_game_in_review(db, game_id)

        # 2. Decision-specific input
        errors = []
        requested_changes = requested_changes or []
        if decision == ReviewDecision.CHANGES_REQUESTED and not requested_changes:
            errors.append("At least one requested change is required")
        for index, item in enumerate(requested_changes, start=1):
            if not (item.get("change") or "").strip():
                errors.append(f"Requested change #{index} has no description")

        if decision == ReviewDecision.REJECTED:
            rejection_reason = rejection_reason or overall_comments
            if not rejection_reason:
                errors.append("A rejection reason is required")

        if errors:
            raise ValidationError("Invalid review decision", errors)

        now = utcnow()

        # 3. Reuse the reviewer's open review of this version, or open one now
        current = with_current_version_lock(game.id, db).first()
        review = db.query(GameReview).filter(
            GameReview.game_id == game.id,
            GameReview.version_id == (current.id if current else None),
            GameReview.reviewer_id == reviewer_id,
            GameReview.completed_at.is_(None)
        ).order_by(GameReview.started_at.desc()).first()
        if not review:
            review = GameReview(
                game_id=game.id,
                version_id=current.id if current else None,
                reviewer_id=reviewer_id,
                started_at=now
            )
            db.add(review)

        # 4. Status transition
        values = {
            "last_reviewed_at": now,
            "reviewer_comments": overall_comments,
        }
        if decision == ReviewDecision.APPROVED:
            values.update({"approved_at": now, "approved_by": reviewer_id})
        elif decision == ReviewDecision.REJECTED:
            values.update({"rejected_at": now, "rejection_reason": rejection_reason})

        new_status = DECISION_TO_STATUS[decision]
        game = GameStateMachine.transition(
            game.id,
            new_status,
            db,
            event_type="REVIEW_DECISION",
            actor_id=reviewer_id,
            values=values,
            data={"decision": decision.value}
        )

        # 5. Stamp the reviewed version
        if current:
            current.status = new_status
            if decision == ReviewDecision.APPROVED:
                current.is_approved = True
                current.approved_at = now
                current.approved_by = reviewer_id

        # 6. Append requested changes to the ledger
        created_changes = []
        if decision == ReviewDecision.CHANGES_REQUESTED:
            db.flush()
            for item in requested_changes:
                change = RequestedChange(
                    game_id=game.id,
                    review_id=review.id,
                    change=item["change"].strip(),
                    priority=ChangePriority(item.get("priority") or ChangePriority.MEDIUM.value),
                    category=item.get("category"),
                    must_fix=bool(item.get("must_fix", False)),
                    resolved=False
                )
                db.add(change)
                created_changes.append(change)

        # 7. Complete the review
        review.completed_at = now
        review.decision = decision
        review.overall_comments = overall_comments
        review.test_results = test_results or {}
        review.rejection_reason = rejection_reason if decision == ReviewDecision.REJECTED else None
        db.flush()

        logger.info(
            f"Reviewer {reviewer_id} decided '{decision.value}' for game {game_id}"
            f" ({len(created_changes)} changes requested)"
        )
        return {"game": game, "review": review, "requested_changes": created_changes}
