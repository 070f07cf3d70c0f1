"""
Version numbering: semver strings for GameVersion rows

Numbering rules:
- first version of a game uses the game's own `version` (default 1.0.0)
- every later version bumps the patch number of the latest version
"""
from typing import Optional


def bump_patch(version_number: str) -> str:
    """
    Increment the patch component of a semver string

    Examples:
        bump_patch("1.0.0") -> "1.0.1"
        bump_patch("2.3")   -> "2.3.1"
        bump_patch("beta")  -> "beta.1"
    """
    parts = version_number.split(".")
    if len(parts) >= 3 and parts[2].isdigit():
        parts[2] = str(int(parts[2]) + 1)
        return ".".join(parts)
    if all(part.isdigit() for part in parts):
        return ".".join(parts + ["0"] * (2 - len(parts)) + ["1"])
    return f"{version_number}.1"


def next_version_number(game_version: str, latest_version_number: Optional[str]) -> str:
    """
    Pick the version number for a new GameVersion

    Args:
        game_version: Game.version
        latest_version_number: version_number of the newest existing version, or None

    Returns:
        version number string
    """
    if latest_version_number is None:
        return game_version or "1.0.0"
    return bump_patch(latest_version_number)
