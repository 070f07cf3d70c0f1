"""
Snapshot service: copy a Game's reviewable fields into a GameVersion and back,
and diff two snapshots

Pure calculation, no status transitions.
"""
import copy
from typing import Any, Dict, List

from models import Game


# Game columns captured in every GameVersion.snapshot
SNAPSHOT_FIELDS = (
    "title",
    "description",
    "category",
    "difficulty",
    "game_url",
    "cover_image_url",
    "cover_image",
    "screenshots",
)


def take_snapshot(game: Game) -> Dict[str, Any]:
    """
    Copy the reviewable state of a game

    Lists and dicts are deep-copied so later edits to the Game never leak
    into a stored version.
    """
    return {field: copy.deepcopy(getattr(game, field)) for field in SNAPSHOT_FIELDS}


def snapshot_to_values(snapshot: Dict[str, Any]) -> Dict[str, Any]:
    """
    Turn a stored snapshot into Game column values for a revert

    Fields missing from older snapshots are left untouched, except
    `screenshots` which falls back to an empty list.
    """
    values = {
        field: copy.deepcopy(snapshot[field])
        for field in SNAPSHOT_FIELDS
        if field in snapshot
    }
    if values.get("screenshots") is None and "screenshots" in snapshot:
        values["screenshots"] = []
    return values


def diff_snapshots(snapshot1: Dict[str, Any], snapshot2: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Field-by-field comparison of two snapshots

    Returns:
        one entry per differing field, in SNAPSHOT_FIELDS order:
        {"field": ..., "version1": ..., "version2": ...}

    Example:
        diff_snapshots({"title": "A"}, {"title": "B"})
        -> [{"field": "title", "version1": "A", "version2": "B"}]
    """
    snapshot1 = snapshot1 or {}
    snapshot2 = snapshot2 or {}

    differences = []
    for field in SNAPSHOT_FIELDS:
        value1 = snapshot1.get(field)
        value2 = snapshot2.get(field)
        if value1 != value2:
            differences.append({"field": field, "version1": value1, "version2": value2})
    return differences
