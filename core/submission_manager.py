"""
Submission Manager: the developer side of the review loop

Responsibilities:
1. Submit a Draft game for review
2. Resubmit after changes were requested
3. Reopen an Approved / Rejected game as Draft
4. Resolve requested changes
5. Submission tracking (status, timeline, submission list)

Principles:
- all status changes go through GameStateMachine
- validation collects every problem before failing
- status change and version snapshot commit together
"""
from sqlalchemy import select
from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional
import logging

from models import (
    Game,
    GameVersion,
    EventLog,
    RequestedChange,
    ChangePriority,
    SubmissionStatus,
    utcnow,
)
from core.state_machine import GameStateMachine
from core.game_manager import GameManager
from core.version_manager import VersionManager
from core.locks import resolve_change_row
from core.exceptions import ChangeNotFound, ConflictError, ValidationError
from services.media_service import media_errors
from services.license_service import license_errors
from services.review_time_service import estimate_review_time, review_queue_length
from services.timeline_service import build_timeline
from database import transactional, get_settings

logger = logging.getLogger(__name__)


class SubmissionManager:
    """Developer-side submission workflow"""

    @staticmethod
    def _precondition_errors(db: Session, game: Game, require_license: bool) -> List[str]:
        errors = media_errors(game)
        if require_license:
            errors.extend(license_errors(db, game.id))
        return errors

    @staticmethod
    def _enter_review(
        db: Session,
        game: Game,
        developer_id: str,
        event_type: str,
        change_log: Optional[str],
        changes: Optional[List[Dict[str, Any]]]
    ) -> Dict[str, Any]:
        """
        Shared transition into In Review for submit and resubmit

        Sets the status, the lock and submitted_for_review_at in one guarded
        update, then snapshots the game as the new current version.
        """
        game = GameStateMachine.transition(
            game.id,
            SubmissionStatus.IN_REVIEW,
            db,
            event_type=event_type,
            actor_id=developer_id,
            values={"submitted_for_review_at": utcnow()},
            data={"change_log": change_log}
        )

        version = VersionManager.create_version(
            db,
            game,
            SubmissionStatus.IN_REVIEW,
            created_by=developer_id,
            change_log=change_log,
            changes=changes
        )

        return {
            "game": game,
            "version": version,
            "estimated_review_time": estimate_review_time(review_queue_length(db)),
        }

    @staticmethod
    @transactional
    def submit(
        db: Session,
        game_id: str,
        developer_id: str,
        change_log: Optional[str] = None,
        changes: Optional[List[Dict[str, Any]]] = None,
        require_license: Optional[bool] = None
    ) -> Dict[str, Any]:
        """
        Submit a Draft game for review (Draft -> In Review)

        Preconditions:
        1. Status is Draft
        2. Cover image is set
        3. 2 to 5 screenshots
        4. Complete License record (when license enforcement is on)

        Args:
            db: SQLAlchemy Session
            game_id: Game id
            developer_id: owner
            change_log: free-text summary of this submission
            changes: list of {"type", "description"} entries
            require_license: override the require_license setting

        Returns:
            {"game", "version", "estimated_review_time"}

        Raises:
            GameNotFound: not the developer's game
            ConflictError: game already In Review, or not a Draft
            ValidationError: every failed precondition listed in `errors`
        """
        if require_license is None:
            require_license = get_settings().require_license

        # 1. Status checks
        game = GameManager.get_owned_game(db, game_id, developer_id, lock=True)

        if game.submission_status == SubmissionStatus.IN_REVIEW:
            raise ConflictError("Game is already in review")

        if game.submission_status != SubmissionStatus.DRAFT:
            raise ConflictError(
                f"Only draft games can be submitted "
                f"(current status: {game.submission_status.value})"
            )

        # 2. Collect every precondition failure
        errors = SubmissionManager._precondition_errors(db, game, require_license)
        if errors:
            logger.info(f"Submission of game {game_id} refused: {errors}")
            raise ValidationError("Game is not ready for submission", errors)

        # 3. Transition + snapshot
        result = SubmissionManager._enter_review(
            db, game, developer_id, "SUBMITTED", change_log, changes
        )
        logger.info(f"Game {game_id} submitted for review as version {result['version'].version_number}")
        return result

    @staticmethod
    @transactional
    def resubmit(
        db: Session,
        game_id: str,
        developer_id: str,
        change_log: Optional[str] = None,
        changes: Optional[List[Dict[str, Any]]] = None,
        require_license: Optional[bool] = None
    ) -> Dict[str, Any]:
        """
        Resubmit after a Changes Requested decision (Changes Requested -> In Review)

        Preconditions:
        1. Status is Changes Requested
        2. Every Critical requested change is resolved
           (unresolved Low/Medium/High changes do not block)
        3. Media and license preconditions still hold

        Raises:
            ConflictError: status is not Changes Requested
            ValidationError: unresolved critical changes or media/license problems
        """
        if require_license is None:
            require_license = get_settings().require_license

        # 1. Status check
        game = GameManager.get_owned_game(db, game_id, developer_id, lock=True)

        if game.submission_status != SubmissionStatus.CHANGES_REQUESTED:
            raise ConflictError("Game can only be resubmitted if changes were requested")

        # 2. Critical changes
        errors = []
        unresolved_critical = db.query(RequestedChange).filter(
            RequestedChange.game_id == game.id,
            RequestedChange.priority == ChangePriority.CRITICAL,
            RequestedChange.resolved == False
        ).count()
        if unresolved_critical:
            errors.append(
                f"All critical changes must be resolved before resubmitting "
                f"({unresolved_critical} unresolved)"
            )

        # 3. Media / license
        errors.extend(SubmissionManager._precondition_errors(db, game, require_license))
        if errors:
            logger.info(f"Resubmission of game {game_id} refused: {errors}")
            raise ValidationError(errors[0], errors)

        # 4. Transition + snapshot
        result = SubmissionManager._enter_review(
            db, game, developer_id, "RESUBMITTED", change_log, changes
        )
        logger.info(f"Game {game_id} resubmitted as version {result['version'].version_number}")
        return result

    @staticmethod
    @transactional
    def reopen(db: Session, game_id: str, developer_id: str) -> Game:
        """
        Move a decided game back to Draft as it stands (Approved / Rejected -> Draft)

        Unlike revert, no earlier version is needed: the current fields are
        kept, so a game rejected on its first submission can be fixed and
        submitted again. No version is recorded, the next submit snapshots it.

        Raises:
            GameNotFound: not the developer's game
            ConflictError: status is not Approved or Rejected
        """
        game = GameManager.get_owned_game(db, game_id, developer_id, lock=True)

        if game.submission_status not in (SubmissionStatus.APPROVED, SubmissionStatus.REJECTED):
            raise ConflictError(
                f"Only approved or rejected games can be reopened "
                f"(current status: {game.submission_status.value})"
            )

        game = GameStateMachine.transition(
            game.id,
            SubmissionStatus.DRAFT,
            db,
            event_type="REOPENED",
            actor_id=developer_id
        )
        logger.info(f"Game {game_id} reopened as draft")
        return game

    @staticmethod
    @transactional
    def resolve_change(db: Session, game_id: str, developer_id: str, change_id: str) -> Dict[str, Any]:
        """
        Mark one requested change as resolved

        Idempotent: resolving twice keeps the first resolved_at.
        Does not change the submission status.

        Returns:
            {"change", "all_changes_resolved", "remaining_changes"}

        Raises:
            GameNotFound: not the developer's game
            ChangeNotFound: change id not in this game's ledger
        """
        game = GameManager.get_owned_game(db, game_id, developer_id)

        change = db.query(RequestedChange).filter(
            RequestedChange.id == change_id,
            RequestedChange.game_id == game.id
        ).first()
        if not change:
            raise ChangeNotFound(change_id)

        if resolve_change_row(db, game.id, change_id, {"resolved": True, "resolved_at": utcnow()}):
            logger.info(f"Requested change {change_id} on game {game_id} resolved")
        db.refresh(change)

        remaining = db.query(RequestedChange).filter(
            RequestedChange.game_id == game.id,
            RequestedChange.resolved == False
        ).count()

        return {
            "change": change,
            "all_changes_resolved": remaining == 0,
            "remaining_changes": remaining,
        }

    @staticmethod
    def get_submission_status(db: Session, game_id: str, developer_id: str) -> Dict[str, Any]:
        """
        Submission tracker view

        Returns:
            status, lock flag, timestamps, timeline, requested changes,
            reviewer comments, current version
        """
        game = GameManager.get_owned_game(db, game_id, developer_id)

        events = db.query(EventLog).filter(
            EventLog.game_id == game.id
        ).order_by(EventLog.id).all()

        changes = db.query(RequestedChange).filter(
            RequestedChange.game_id == game.id
        ).order_by(RequestedChange.created_at).all()

        return {
            "game": game,
            "timeline": build_timeline(game, events),
            "requested_changes": changes,
            "current_version": VersionManager.get_current_version(db, game.id),
        }

    @staticmethod
    def list_submissions(
        db: Session,
        developer_id: str,
        status: Optional[SubmissionStatus] = None
    ) -> List[Game]:
        """
        The developer's games that have been submitted at least once

        Args:
            status: only games currently in this status
        """
        submitted_ids = select(GameVersion.game_id).distinct()
        query = db.query(Game).filter(
            Game.developer_id == developer_id,
            Game.id.in_(submitted_ids)
        )
        if status is not None:
            query = query.filter(Game.submission_status == status)
        return query.order_by(Game.submitted_for_review_at.desc()).all()
