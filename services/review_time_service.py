"""
Review turnaround estimate returned to developers after a submission
"""
from sqlalchemy.orm import Session

from models import Game, SubmissionStatus


def estimate_review_time(queue_length: int) -> str:
    """
    Estimate how long a new submission waits for a decision

    Based on the number of games already In Review (including the new one):
    - up to 5: 1-2 business days
    - up to 15: 2-3 business days
    - more: 3-5 business days
    """
    if queue_length <= 5:
        return "1-2 business days"
    elif queue_length <= 15:
        return "2-3 business days"
    return "3-5 business days"


def review_queue_length(db: Session) -> int:
    return db.query(Game).filter(
        Game.submission_status == SubmissionStatus.IN_REVIEW
    ).count()
