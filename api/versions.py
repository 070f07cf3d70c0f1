"""
Version API Endpoints (developer)

Responsibilities:
1. Version history, detail and approval history
2. Compare two versions
3. Revert to an earlier version

Note: the fixed paths (/compare, /approval-history) are declared before
/{version_id} so they are not captured as version ids.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
import logging

from database import get_db
from schemas import (
    VersionResponse,
    VersionSummary,
    VersionListResponse,
    ApprovalHistoryResponse,
    CompareResponse,
    VersionDifference,
    RevertRequest,
    RevertResponse,
)
from core.version_manager import VersionManager
from core.exceptions import WorkflowException
from api.deps import Principal, require_developer
from api.errors import http_error

router = APIRouter(prefix="/api/dev/games/{game_id}/versions", tags=["versions"])
logger = logging.getLogger(__name__)


@router.get("", response_model=VersionListResponse)
def list_versions(
    game_id: str,
    developer: Principal = Depends(require_developer),
    db: Session = Depends(get_db)
):
    """
    All versions, newest first

    Each entry carries can_revert_to (not Rejected, not the current version).
    """
    try:
        game, versions = VersionManager.list_versions(db, game_id, developer.id)
        summaries = [
            VersionSummary(
                **VersionResponse.model_validate(v).model_dump(),
                can_revert_to=VersionManager.can_revert_to(v)
            )
            for v in versions
        ]
        return VersionListResponse(
            versions=summaries,
            count=len(summaries),
            current_version=game.version
        )

    except WorkflowException as e:
        raise http_error(e)


@router.get("/compare", response_model=CompareResponse)
def compare_versions(
    game_id: str,
    version_id1: Optional[str] = Query(None, alias="versionId1"),
    version_id2: Optional[str] = Query(None, alias="versionId2"),
    developer: Principal = Depends(require_developer),
    db: Session = Depends(get_db)
):
    """
    Field-level diff of two versions of the same game

    Query:
        versionId1, versionId2 (both required)
    """
    try:
        result = VersionManager.compare(db, game_id, developer.id, version_id1, version_id2)
        return CompareResponse(
            version1=VersionResponse.model_validate(result["version1"]),
            version2=VersionResponse.model_validate(result["version2"]),
            differences=[VersionDifference(**d) for d in result["differences"]],
            has_changes=result["has_changes"]
        )

    except WorkflowException as e:
        raise http_error(e)


@router.get("/approval-history", response_model=ApprovalHistoryResponse)
def approval_history(
    game_id: str,
    developer: Principal = Depends(require_developer),
    db: Session = Depends(get_db)
):
    try:
        versions = VersionManager.approval_history(db, game_id, developer.id)
        return ApprovalHistoryResponse(
            approval_history=[VersionResponse.model_validate(v) for v in versions],
            count=len(versions)
        )

    except WorkflowException as e:
        raise http_error(e)


@router.get("/{version_id}", response_model=VersionResponse)
def get_version(
    game_id: str,
    version_id: str,
    developer: Principal = Depends(require_developer),
    db: Session = Depends(get_db)
):
    try:
        version = VersionManager.get_version(db, game_id, developer.id, version_id)
        return VersionResponse.model_validate(version)

    except WorkflowException as e:
        raise http_error(e)


@router.post("/{version_id}/revert", response_model=RevertResponse)
def revert_to_version(
    game_id: str,
    version_id: str,
    payload: RevertRequest,
    developer: Principal = Depends(require_developer),
    db: Session = Depends(get_db)
):
    """
    Revert the game to an earlier version

    Preconditions:
    - game not locked (403 otherwise)
    - payload.confirmation equals the current game title exactly
    - target version was not Rejected

    Effects:
    - game fields restored from the snapshot, status Draft
    - a new version with is_revert=True is recorded
    """
    try:
        game, target, new_version = VersionManager.revert(
            db, game_id, developer.id, version_id, payload.confirmation
        )
        return RevertResponse(
            game_id=game.id,
            reverted_to_version=target.version_number,
            new_version_id=new_version.id,
            new_version_number=new_version.version_number,
            new_status=game.submission_status,
            is_locked=game.is_locked,
            title=game.title
        )

    except WorkflowException as e:
        raise http_error(e)
    except Exception as e:
        logger.error(f"Failed to revert game: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Internal error")
