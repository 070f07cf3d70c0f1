"""
Media rules: what a game needs before it can enter review

Only presence and cardinality are checked here. Image content, dimensions
and aspect ratios are the media store's business.
"""
from typing import Any, Dict, List

from models import Game, new_id


MIN_SCREENSHOTS = 2
MAX_SCREENSHOTS = 5

MEDIA_REQUIREMENTS = {
    "coverImage": {
        "required": True,
        "acceptableAspectRatios": ["16:9", "4:3"],
        "recommendedDimensions": {"width": 1920, "height": 1080},
        "acceptedFormats": ["image/jpeg", "image/png", "image/webp"],
        "maxFileSizeMB": 5,
    },
    "screenshots": {
        "min": MIN_SCREENSHOTS,
        "max": MAX_SCREENSHOTS,
        "acceptableAspectRatios": ["16:9", "4:3"],
        "acceptedFormats": ["image/jpeg", "image/png", "image/webp"],
        "maxFileSizeMB": 5,
    },
}


def media_errors(game: Game) -> List[str]:
    """
    Collect every media precondition the game fails

    Returns:
        list of error messages, empty when the game can enter review
    """
    errors = []
    if not game.cover_image_url:
        errors.append("Cover image is required")

    count = len(game.screenshots or [])
    if count < MIN_SCREENSHOTS:
        errors.append(f"At least {MIN_SCREENSHOTS} screenshots are required")
    elif count > MAX_SCREENSHOTS:
        errors.append(f"Maximum {MAX_SCREENSHOTS} screenshots are allowed")

    return errors


def build_screenshot(data: Dict[str, Any]) -> Dict[str, Any]:
    """Normalise screenshot metadata and give it a stable id"""
    return {
        "id": new_id(),
        "url": data["url"],
        "file_name": data.get("file_name"),
        "file_size": data.get("file_size"),
        "width": data.get("width"),
        "height": data.get("height"),
        "aspect_ratio": data.get("aspect_ratio"),
    }
