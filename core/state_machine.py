"""
Game submission state machine

Every change of Game.submission_status goes through GameStateMachine.transition,
which:
1. checks the transition table
2. applies the change with a status-guarded UPDATE
3. keeps is_locked in step with the status (locked iff In Review)
4. writes an EventLog row

Transition table:

    Draft             --submit-->   In Review
    In Review         --decide-->   Approved | Changes Requested | Rejected
    Changes Requested --resubmit--> In Review
    any unlocked      --revert-->   Draft
    Approved/Rejected --reopen-->   Draft
"""
from typing import Any, Dict, Optional
import logging

from sqlalchemy.orm import Session

from models import Game, EventLog, SubmissionStatus
from core.locks import with_game_lock, update_if_status
from core.exceptions import ConflictError, GameNotFound

logger = logging.getLogger(__name__)


VALID_TRANSITIONS = {
    SubmissionStatus.DRAFT: {SubmissionStatus.IN_REVIEW, SubmissionStatus.DRAFT},
    SubmissionStatus.IN_REVIEW: {
        SubmissionStatus.APPROVED,
        SubmissionStatus.CHANGES_REQUESTED,
        SubmissionStatus.REJECTED,
    },
    SubmissionStatus.CHANGES_REQUESTED: {SubmissionStatus.IN_REVIEW, SubmissionStatus.DRAFT},
    SubmissionStatus.APPROVED: {SubmissionStatus.DRAFT},
    SubmissionStatus.REJECTED: {SubmissionStatus.DRAFT},
}


class GameStateMachine:
    """Single entry point for submission status changes"""

    @staticmethod
    def can_transition(from_status: SubmissionStatus, to_status: SubmissionStatus) -> bool:
        return to_status in VALID_TRANSITIONS.get(from_status, set())

    @staticmethod
    def transition(
        game_id: str,
        to_status: SubmissionStatus,
        db: Session,
        event_type: str = "STATUS_CHANGED",
        actor_id: Optional[str] = None,
        values: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None
    ) -> Game:
        """
        Move a game to `to_status`

        Args:
            game_id: Game id
            to_status: target status
            db: SQLAlchemy Session (caller owns the transaction)
            event_type: EventLog event type, e.g. "SUBMITTED"
            actor_id: developer or reviewer performing the transition
            values: extra Game columns to set in the same UPDATE
            data: extra EventLog payload

        Returns:
            the refreshed Game

        Raises:
            GameNotFound: game does not exist
            ConflictError: transition not allowed, or lost a race with another request
        """
        # 1. Load and lock the game
        game = with_game_lock(game_id, db).first()
        if not game:
            raise GameNotFound(game_id)

        from_status = game.submission_status

        # 2. Check the transition table
        if not GameStateMachine.can_transition(from_status, to_status):
            logger.warning(
                f"Rejected transition for game {game_id}: "
                f"{from_status.value} -> {to_status.value}"
            )
            raise ConflictError(
                f"Cannot move game from '{from_status.value}' to '{to_status.value}'"
            )

        # 3. Status-guarded update, lock flag derived from the target status
        update_values = dict(values or {})
        update_values["submission_status"] = to_status
        update_values["is_locked"] = to_status == SubmissionStatus.IN_REVIEW

        updated = update_if_status(db, game_id, from_status, update_values)
        if updated == 0:
            logger.warning(f"Concurrent status change detected for game {game_id}")
            raise ConflictError("Game status was changed by another request, please retry")

        # 4. Record the event
        event = EventLog(
            game_id=game_id,
            event_type=event_type,
            from_status=from_status.value,
            to_status=to_status.value,
            actor_id=actor_id,
            data=data or {}
        )
        db.add(event)
        db.flush()
        db.refresh(game)

        logger.info(
            f"Game {game_id} moved {from_status.value} -> {to_status.value} ({event_type})"
        )
        return game
