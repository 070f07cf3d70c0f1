"""
Developer Game API Endpoints

Responsibilities:
1. Create / list / edit the developer's own games
2. Register media metadata (cover, screenshots)
3. Record the License declaration

Edits are refused with 403 while a game is locked for review.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
import logging

from database import get_db
from models import Game
from schemas import (
    GameCreate,
    GameUpdate,
    GameResponse,
    GameListResponse,
    MediaResponse,
    CoverImageIn,
    ScreenshotsIn,
    LicenseIn,
    LicenseResponse,
)
from core.game_manager import GameManager
from core.exceptions import WorkflowException
from services.media_service import MEDIA_REQUIREMENTS
from api.deps import Principal, require_developer
from api.errors import http_error

router = APIRouter(prefix="/api/dev", tags=["games"])
logger = logging.getLogger(__name__)


def _media_response(game: Game) -> MediaResponse:
    screenshots = game.screenshots or []
    return MediaResponse(
        game_id=game.id,
        cover_image_url=game.cover_image_url,
        cover_image=game.cover_image,
        screenshots=screenshots,
        screenshot_count=len(screenshots)
    )


@router.post("/games", response_model=GameResponse)
def create_game(
    game_data: GameCreate,
    developer: Principal = Depends(require_developer),
    db: Session = Depends(get_db)
):
    """Create a Draft game owned by the caller"""
    try:
        game = GameManager.create_game(
            db, developer.id, developer.name, game_data.model_dump()
        )
        return GameResponse.model_validate(game)

    except WorkflowException as e:
        raise http_error(e)
    except Exception as e:
        logger.error(f"Failed to create game: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("/games", response_model=GameListResponse)
def list_games(
    developer: Principal = Depends(require_developer),
    db: Session = Depends(get_db)
):
    games = GameManager.list_games(db, developer.id)
    return GameListResponse(
        games=[GameResponse.model_validate(g) for g in games],
        count=len(games)
    )


@router.get("/games/{game_id}", response_model=GameResponse)
def get_game(
    game_id: str,
    developer: Principal = Depends(require_developer),
    db: Session = Depends(get_db)
):
    try:
        game = GameManager.get_owned_game(db, game_id, developer.id)
        return GameResponse.model_validate(game)

    except WorkflowException as e:
        raise http_error(e)


@router.patch("/games/{game_id}", response_model=GameResponse)
def update_game(
    game_id: str,
    game_data: GameUpdate,
    developer: Principal = Depends(require_developer),
    db: Session = Depends(get_db)
):
    """
    Edit game metadata

    Returns 403 while the game is In Review.
    """
    try:
        game = GameManager.update_game(
            db, game_id, developer.id, game_data.model_dump(exclude_unset=True)
        )
        return GameResponse.model_validate(game)

    except WorkflowException as e:
        raise http_error(e)
    except Exception as e:
        logger.error(f"Failed to update game: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Internal error")


# ==================== MEDIA ====================

@router.get("/media/requirements")
def get_media_requirements(developer: Principal = Depends(require_developer)):
    """Cover / screenshot rules a game must meet before submission"""
    return {"requirements": MEDIA_REQUIREMENTS}


@router.get("/games/{game_id}/media", response_model=MediaResponse)
def get_game_media(
    game_id: str,
    developer: Principal = Depends(require_developer),
    db: Session = Depends(get_db)
):
    try:
        game = GameManager.get_owned_game(db, game_id, developer.id)
        return _media_response(game)

    except WorkflowException as e:
        raise http_error(e)


@router.put("/games/{game_id}/media/cover", response_model=MediaResponse)
def set_cover_image(
    game_id: str,
    cover: CoverImageIn,
    developer: Principal = Depends(require_developer),
    db: Session = Depends(get_db)
):
    """Register the cover image already stored by the media store"""
    try:
        game = GameManager.set_cover_image(db, game_id, developer.id, cover.model_dump())
        return _media_response(game)

    except WorkflowException as e:
        raise http_error(e)
    except Exception as e:
        logger.error(f"Failed to set cover image: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/games/{game_id}/media/screenshots", response_model=MediaResponse)
def add_screenshots(
    game_id: str,
    payload: ScreenshotsIn,
    developer: Principal = Depends(require_developer),
    db: Session = Depends(get_db)
):
    """
    Register screenshots

    Returns 400 when nothing is sent or the total would exceed 5.
    """
    try:
        game = GameManager.add_screenshots(
            db, game_id, developer.id, [s.model_dump() for s in payload.screenshots]
        )
        return _media_response(game)

    except WorkflowException as e:
        raise http_error(e)
    except Exception as e:
        logger.error(f"Failed to add screenshots: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Internal error")


@router.delete("/games/{game_id}/media/screenshots/{screenshot_id}", response_model=MediaResponse)
def delete_screenshot(
    game_id: str,
    screenshot_id: str,
    developer: Principal = Depends(require_developer),
    db: Session = Depends(get_db)
):
    try:
        game = GameManager.delete_screenshot(db, game_id, developer.id, screenshot_id)
        return _media_response(game)

    except WorkflowException as e:
        raise http_error(e)
    except Exception as e:
        logger.error(f"Failed to delete screenshot: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Internal error")


# ==================== LICENSE ====================

@router.put("/games/{game_id}/license", response_model=LicenseResponse)
def upsert_license(
    game_id: str,
    license_data: LicenseIn,
    developer: Principal = Depends(require_developer),
    db: Session = Depends(get_db)
):
    try:
        license_record = GameManager.upsert_license(
            db, game_id, developer.id, license_data.model_dump()
        )
        return LicenseResponse.model_validate(license_record)

    except WorkflowException as e:
        raise http_error(e)
    except Exception as e:
        logger.error(f"Failed to record license: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Internal error")
