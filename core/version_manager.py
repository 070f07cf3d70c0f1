"""
Version Manager: the append-only GameVersion store and the Revert Handler

Responsibilities:
1. Create snapshots (submission, resubmission, revert)
2. Keep exactly one current version per game
3. Revert a game to an earlier version
4. Read side: version list, detail, comparison, approval history
"""
from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional, Tuple
import logging

from models import Game, GameVersion, SubmissionStatus
from core.state_machine import GameStateMachine
from core.game_manager import GameManager
from core.exceptions import GameLocked, ValidationError, VersionNotFound
from services.snapshot_service import take_snapshot, snapshot_to_values, diff_snapshots
from services.version_number_service import next_version_number
from database import transactional

logger = logging.getLogger(__name__)


class VersionManager:
    """GameVersion lifecycle manager"""

    @staticmethod
    def create_version(
        db: Session,
        game: Game,
        status: SubmissionStatus,
        created_by: str,
        change_log: Optional[str] = None,
        changes: Optional[List[Dict[str, Any]]] = None,
        is_revert: bool = False,
        reverted_to: Optional[str] = None
    ) -> GameVersion:
        """
        Snapshot `game` into a new current GameVersion

        Flow:
        1. Demote the previous current version
        2. Work out sequence and version number
        3. Insert the snapshot and point Game.version at it

        Notes:
            - does not commit, call it inside a @transactional operation so the
              version and the status change land together
        """
        # 1. Demote the previous current version
        db.query(GameVersion).filter(
            GameVersion.game_id == game.id,
            GameVersion.is_current_version == True
        ).update({"is_current_version": False}, synchronize_session="fetch")

        # 2. Sequence and version number follow the newest version
        latest = db.query(GameVersion).filter(
            GameVersion.game_id == game.id
        ).order_by(GameVersion.sequence.desc()).first()

        sequence = latest.sequence + 1 if latest else 1
        version_number = next_version_number(
            game.version, latest.version_number if latest else None
        )

        # 3. Insert the snapshot
        version = GameVersion(
            game_id=game.id,
            sequence=sequence,
            version_number=version_number,
            status=status,
            is_current_version=True,
            is_approved=False,
            snapshot=take_snapshot(game),
            change_log=change_log,
            changes=changes or [],
            is_revert=is_revert,
            reverted_to=reverted_to,
            created_by=created_by
        )
        db.add(version)
        game.version = version_number
        db.flush()

        logger.info(
            f"Created version {version_number} (#{sequence}) for game {game.id}"
            f"{' as revert to ' + reverted_to if is_revert else ''}"
        )
        return version

    @staticmethod
    def get_current_version(db: Session, game_id: str) -> Optional[GameVersion]:
        return db.query(GameVersion).filter(
            GameVersion.game_id == game_id,
            GameVersion.is_current_version == True
        ).first()

    @staticmethod
    def get_version(db: Session, game_id: str, developer_id: str, version_id: str) -> GameVersion:
        """
        Fetch one version of an owned game

        Raises:
            GameNotFound: not the developer's game
            VersionNotFound: version missing or belongs to another game
        """
        game = GameManager.get_owned_game(db, game_id, developer_id)
        version = db.query(GameVersion).filter(
            GameVersion.id == version_id,
            GameVersion.game_id == game.id
        ).first()
        if not version:
            raise VersionNotFound(version_id)
        return version

    @staticmethod
    def list_versions(db: Session, game_id: str, developer_id: str) -> Tuple[Game, List[GameVersion]]:
        """All versions of an owned game, newest first"""
        game = GameManager.get_owned_game(db, game_id, developer_id)
        versions = db.query(GameVersion).filter(
            GameVersion.game_id == game.id
        ).order_by(GameVersion.sequence.desc()).all()
        return game, versions

    @staticmethod
    def can_revert_to(version: GameVersion) -> bool:
        return version.status != SubmissionStatus.REJECTED and not version.is_current_version

    @staticmethod
    def approval_history(db: Session, game_id: str, developer_id: str) -> List[GameVersion]:
        """Approved versions of an owned game, most recent approval first"""
        game = GameManager.get_owned_game(db, game_id, developer_id)
        return db.query(GameVersion).filter(
            GameVersion.game_id == game.id,
            GameVersion.is_approved == True
        ).order_by(GameVersion.approved_at.desc(), GameVersion.sequence.desc()).all()

    @staticmethod
    def compare(
        db: Session,
        game_id: str,
        developer_id: str,
        version_id1: Optional[str],
        version_id2: Optional[str]
    ) -> Dict[str, Any]:
        """
        Compare two versions of the same game (read only)

        Returns:
            {"version1", "version2", "differences", "has_changes"}

        Raises:
            GameNotFound: not the developer's game
            ValidationError: an id is missing or is not a version of this game
        """
        if not version_id1 or not version_id2:
            raise ValidationError("Both versionId1 and versionId2 are required")

        game = GameManager.get_owned_game(db, game_id, developer_id)
        versions = {
            v.id: v for v in db.query(GameVersion).filter(
                GameVersion.game_id == game.id,
                GameVersion.id.in_([version_id1, version_id2])
            )
        }
        unknown = [vid for vid in (version_id1, version_id2) if vid not in versions]
        if unknown:
            raise ValidationError(
                "Both versions must belong to this game",
                [f"Version not found for this game: {vid}" for vid in dict.fromkeys(unknown)]
            )

        version1 = versions[version_id1]
        version2 = versions[version_id2]

        differences = diff_snapshots(version1.snapshot, version2.snapshot)
        return {
            "version1": version1,
            "version2": version2,
            "differences": differences,
            "has_changes": bool(differences),
        }

    @staticmethod
    @transactional
    def revert(
        db: Session,
        game_id: str,
        developer_id: str,
        version_id: str,
        confirmation: Optional[str]
    ) -> Tuple[Game, GameVersion, GameVersion]:
        """
        Restore a game from an earlier version

        Preconditions:
        1. Game is not locked (not In Review)
        2. `confirmation` is byte-for-byte the current title
        3. Target version belongs to the game and was not Rejected

        Flow:
        1. Check preconditions
        2. Copy the snapshot back onto the game and move it to Draft
        3. Record a new revert version pointing at the target

        Returns:
            (Game, target version, new revert version)

        Raises:
            GameLocked: game is In Review
            ValidationError: missing/wrong confirmation, or Rejected target
            VersionNotFound: target does not exist for this game
        """
        # 1. Preconditions
        game = GameManager.get_owned_game(db, game_id, developer_id, lock=True)

        if game.is_locked:
            raise GameLocked(game_id, action="reverted")

        if not confirmation:
            raise ValidationError("Please confirm the revert by typing the game title")

        if confirmation != game.title:
            raise ValidationError("Confirmation must match the exact game title")

        target = db.query(GameVersion).filter(
            GameVersion.id == version_id,
            GameVersion.game_id == game.id
        ).first()
        if not target:
            raise VersionNotFound(version_id)

        if target.status == SubmissionStatus.REJECTED:
            raise ValidationError(
                f"Version {target.version_number} was rejected and cannot be reverted to"
            )

        # 2. Restore fields and go back to Draft in one guarded update
        game = GameStateMachine.transition(
            game.id,
            SubmissionStatus.DRAFT,
            db,
            event_type="REVERTED",
            actor_id=developer_id,
            values=snapshot_to_values(target.snapshot),
            data={"reverted_to": target.id, "version_number": target.version_number}
        )

        # 3. Record the revert as its own version
        revert_version = VersionManager.create_version(
            db,
            game,
            SubmissionStatus.DRAFT,
            created_by=developer_id,
            change_log=f"Reverted to version {target.version_number}",
            is_revert=True,
            reverted_to=target.id
        )

        logger.info(f"Game {game_id} reverted to version {target.version_number}")
        return game, target, revert_version
