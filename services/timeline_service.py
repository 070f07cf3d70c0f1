"""
Submission timeline service.

Builds the status history a developer sees on the submission tracker from
the game's EventLog rows.
"""
from typing import Any, Dict, List

from models import Game, EventLog, SubmissionStatus


def build_timeline(game: Game, events: List[EventLog]) -> List[Dict[str, Any]]:
    """
    Return an ordered list of status entries, oldest first.

    The first entry is always Draft at the game's creation time; every
    status event adds one entry after that.
    """
    timeline: List[Dict[str, Any]] = [{
        "status": SubmissionStatus.DRAFT.value,
        "event_type": "CREATED",
        "timestamp": game.created_at,
        "actor_id": game.developer_id,
    }]

    for event in events:
        if not event.to_status:
            continue
        timeline.append({
            "status": event.to_status,
            "event_type": event.event_type,
            "timestamp": event.created_at,
            "actor_id": event.actor_id,
        })

    return timeline
