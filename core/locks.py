"""
Concurrency control helpers

Two layers protect a Game against racing requests:

1. Row lock: SELECT ... FOR UPDATE on databases that support it (PostgreSQL).
   SQLite ignores FOR UPDATE, which is fine for single-process use.
2. Conditional update: the status guard sits in the UPDATE's WHERE clause,
   so a transition is applied at most once even without the row lock.
"""
from typing import Any, Dict

from sqlalchemy.orm import Session, Query

from models import Game, GameVersion, RequestedChange, SubmissionStatus


def with_game_lock(game_id: str, db: Session) -> Query:
    """
    Lock one Game (row-level lock)

    Use when:
    - changing submission status
    - snapshotting the game into a new version

    Example:
        game = with_game_lock(game_id, db).first()
        if not game:
            raise GameNotFound(game_id)

    Returns:
        Query object (call .first() to fetch)

    Notes:
        - nowait=False waits for the lock holder instead of failing
        - must be used inside a transaction (commit or rollback releases it)
    """
    return db.query(Game).filter(
        Game.id == game_id
    ).with_for_update(nowait=False)


def with_current_version_lock(game_id: str, db: Session) -> Query:
    """
    Lock the current GameVersion of a game

    Use when demoting the current version or stamping review results onto it.
    """
    return db.query(GameVersion).filter(
        GameVersion.game_id == game_id,
        GameVersion.is_current_version == True
    ).with_for_update(nowait=False)


def update_if_status(
    db: Session,
    game_id: str,
    expected_status: SubmissionStatus,
    values: Dict[str, Any]
) -> int:
    """
    Compare-and-swap update on a Game

    Applies `values` only while the game still has `expected_status`.

    Returns:
        number of rows updated (0 means somebody else moved the game first)
    """
    return db.query(Game).filter(
        Game.id == game_id,
        Game.submission_status == expected_status
    ).update(values, synchronize_session="fetch")


def resolve_change_row(db: Session, game_id: str, change_id: str, values: Dict[str, Any]) -> int:
    """
    Conditional update on a single RequestedChange

    Only touches the row that belongs to `game_id` and is still unresolved,
    so concurrent resolves keep the first `resolved_at`.
    """
    return db.query(RequestedChange).filter(
        RequestedChange.id == change_id,
        RequestedChange.game_id == game_id,
        RequestedChange.resolved == False
    ).update(values, synchronize_session="fetch")
