"""
Game Manager: developer-owned game records and their media

Responsibilities:
1. Owner-scoped lookup (other developers' games look like missing games)
2. Create / update game metadata
3. Register cover and screenshot metadata
4. Record the License declaration

Every mutation here is refused while the game is locked for review.
"""
from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional
import logging

from models import Game, License, SubmissionStatus
from core.locks import with_game_lock
from core.exceptions import GameNotFound, GameLocked, ScreenshotNotFound, ValidationError
from services.media_service import MAX_SCREENSHOTS, MIN_SCREENSHOTS, build_screenshot
from database import transactional

logger = logging.getLogger(__name__)


EDITABLE_FIELDS = ("title", "description", "category", "difficulty", "game_url")


class GameManager:
    """Developer-side game record management"""

    @staticmethod
    def get_owned_game(db: Session, game_id: str, developer_id: str, lock: bool = False) -> Game:
        """
        Fetch a game owned by `developer_id`

        Args:
            db: SQLAlchemy Session
            game_id: Game id
            developer_id: authenticated developer
            lock: take a row lock (use inside a transaction)

        Returns:
            Game object

        Raises:
            GameNotFound: missing, or owned by somebody else (same error on purpose)
        """
        query = with_game_lock(game_id, db) if lock else db.query(Game).filter(Game.id == game_id)
        game = query.first()
        if not game or game.developer_id != developer_id:
            raise GameNotFound(game_id)
        return game

    @staticmethod
    def list_games(db: Session, developer_id: str) -> List[Game]:
        return db.query(Game).filter(
            Game.developer_id == developer_id
        ).order_by(Game.created_at.desc()).all()

    @staticmethod
    @transactional
    def create_game(
        db: Session,
        developer_id: str,
        developer_name: Optional[str],
        data: Dict[str, Any]
    ) -> Game:
        """
        Create a new Draft game

        Returns:
            the new Game (unlocked, status Draft)
        """
        game = Game(
            developer_id=developer_id,
            developer_name=developer_name,
            title=data["title"],
            description=data.get("description"),
            category=data.get("category"),
            difficulty=data.get("difficulty"),
            game_url=data.get("game_url"),
            version=data.get("version") or "1.0.0",
            screenshots=[],
            submission_status=SubmissionStatus.DRAFT,
            is_locked=False
        )
        db.add(game)
        db.flush()

        logger.info(f"Developer {developer_id} created game {game.id} ({game.title})")
        return game

    @staticmethod
    @transactional
    def update_game(db: Session, game_id: str, developer_id: str, data: Dict[str, Any]) -> Game:
        """
        Update editable metadata

        Raises:
            GameNotFound: not the developer's game
            GameLocked: game is In Review
        """
        game = GameManager.get_owned_game(db, game_id, developer_id, lock=True)
        if game.is_locked:
            raise GameLocked(game_id)

        for field in EDITABLE_FIELDS:
            if data.get(field) is not None:
                setattr(game, field, data[field])

        logger.info(f"Game {game_id} metadata updated")
        return game

    @staticmethod
    @transactional
    def set_cover_image(db: Session, game_id: str, developer_id: str, data: Dict[str, Any]) -> Game:
        """Register cover image metadata (the file itself is already in the media store)"""
        game = GameManager.get_owned_game(db, game_id, developer_id, lock=True)
        if game.is_locked:
            raise GameLocked(game_id)

        game.cover_image_url = data["url"]
        game.cover_image = {
            "url": data["url"],
            "file_name": data.get("file_name"),
            "file_size": data.get("file_size"),
            "width": data.get("width"),
            "height": data.get("height"),
            "aspect_ratio": data.get("aspect_ratio"),
        }
        logger.info(f"Cover image set for game {game_id}")
        return game

    @staticmethod
    @transactional
    def add_screenshots(
        db: Session,
        game_id: str,
        developer_id: str,
        screenshots: List[Dict[str, Any]]
    ) -> Game:
        """
        Append screenshot metadata

        Raises:
            ValidationError: nothing to add, or the total would exceed MAX_SCREENSHOTS
        """
        game = GameManager.get_owned_game(db, game_id, developer_id, lock=True)
        if game.is_locked:
            raise GameLocked(game_id)

        if not screenshots:
            raise ValidationError("No screenshots uploaded")

        existing = list(game.screenshots or [])
        if len(existing) + len(screenshots) > MAX_SCREENSHOTS:
            raise ValidationError(
                f"Too many screenshots: game has {len(existing)}, "
                f"adding {len(screenshots)}. Maximum is {MAX_SCREENSHOTS} total"
            )

        # JSON columns only persist on reassignment
        game.screenshots = existing + [build_screenshot(s) for s in screenshots]
        logger.info(f"Added {len(screenshots)} screenshots to game {game_id}")
        return game

    @staticmethod
    @transactional
    def delete_screenshot(db: Session, game_id: str, developer_id: str, screenshot_id: str) -> Game:
        """
        Remove one screenshot

        Raises:
            ScreenshotNotFound: unknown screenshot id
            ValidationError: game would drop below MIN_SCREENSHOTS
        """
        game = GameManager.get_owned_game(db, game_id, developer_id, lock=True)
        if game.is_locked:
            raise GameLocked(game_id)

        existing = list(game.screenshots or [])
        remaining = [s for s in existing if s.get("id") != screenshot_id]
        if len(remaining) == len(existing):
            raise ScreenshotNotFound(screenshot_id)

        if len(existing) <= MIN_SCREENSHOTS:
            raise ValidationError(
                f"Game must have at least {MIN_SCREENSHOTS} screenshots, upload a replacement first"
            )

        game.screenshots = remaining
        logger.info(f"Deleted screenshot {screenshot_id} from game {game_id}")
        return game

    @staticmethod
    @transactional
    def upsert_license(db: Session, game_id: str, developer_id: str, data: Dict[str, Any]) -> License:
        """Create or replace the game's License declaration"""
        game = GameManager.get_owned_game(db, game_id, developer_id, lock=True)
        if game.is_locked:
            raise GameLocked(game_id)

        license_record = db.query(License).filter(License.game_id == game.id).first()
        if not license_record:
            license_record = License(game_id=game.id, developer_id=developer_id)
            db.add(license_record)

        for field, value in data.items():
            setattr(license_record, field, value)

        db.flush()
        logger.info(f"License recorded for game {game_id}")
        return license_record
