"""
SQLAlchemy models

Game is the mutable current state of a submission. GameVersion rows are
append-only snapshots, RequestedChange is the reviewer's change ledger and
EventLog records every status transition.
"""
import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class SubmissionStatus(str, enum.Enum):
    DRAFT = "Draft"
    IN_REVIEW = "In Review"
    CHANGES_REQUESTED = "Changes Requested"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class ChangePriority(str, enum.Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class ReviewDecision(str, enum.Enum):
    APPROVED = "Approved"
    CHANGES_REQUESTED = "Changes Requested"
    REJECTED = "Rejected"


def _enum_column(enum_cls, name):
    # Store the human readable value ("In Review") instead of the member name
    return SAEnum(
        enum_cls,
        name=name,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )


class Game(Base):
    __tablename__ = "games"

    id = Column(String(36), primary_key=True, default=new_id)
    developer_id = Column(String(64), nullable=False, index=True)
    developer_name = Column(String(100))

    title = Column(String(200), nullable=False)
    description = Column(Text)
    category = Column(String(50))
    difficulty = Column(String(20))
    game_url = Column(String(500))
    version = Column(String(20), nullable=False, default="1.0.0")

    # Media (metadata only, files live in the media store)
    cover_image_url = Column(String(500))
    cover_image = Column(JSON)
    screenshots = Column(JSON, nullable=False, default=list)

    # Workflow state
    submission_status = Column(
        _enum_column(SubmissionStatus, "submission_status"),
        nullable=False,
        default=SubmissionStatus.DRAFT,
        index=True,
    )
    is_locked = Column(Boolean, nullable=False, default=False)
    submitted_for_review_at = Column(DateTime(timezone=True))
    last_reviewed_at = Column(DateTime(timezone=True))
    approved_at = Column(DateTime(timezone=True))
    approved_by = Column(String(64))
    rejected_at = Column(DateTime(timezone=True))
    rejection_reason = Column(Text)
    reviewer_comments = Column(Text)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    versions = relationship(
        "GameVersion",
        back_populates="game",
        order_by="GameVersion.sequence",
        foreign_keys="GameVersion.game_id",
    )
    requested_changes = relationship(
        "RequestedChange", back_populates="game", order_by="RequestedChange.created_at"
    )
    reviews = relationship("GameReview", back_populates="game")
    license = relationship("License", back_populates="game", uselist=False)
    events = relationship("EventLog", back_populates="game", order_by="EventLog.id")


class GameVersion(Base):
    __tablename__ = "game_versions"
    __table_args__ = (UniqueConstraint("game_id", "sequence", name="uq_game_version_sequence"),)

    id = Column(String(36), primary_key=True, default=new_id)
    game_id = Column(String(36), ForeignKey("games.id"), nullable=False, index=True)
    sequence = Column(Integer, nullable=False)
    version_number = Column(String(20), nullable=False)

    status = Column(_enum_column(SubmissionStatus, "version_status"), nullable=False)
    is_current_version = Column(Boolean, nullable=False, default=False)
    is_approved = Column(Boolean, nullable=False, default=False)
    approved_at = Column(DateTime(timezone=True))
    approved_by = Column(String(64))

    snapshot = Column(JSON, nullable=False)
    change_log = Column(Text)
    changes = Column(JSON, nullable=False, default=list)

    is_revert = Column(Boolean, nullable=False, default=False)
    reverted_to = Column(String(36), ForeignKey("game_versions.id"))

    created_by = Column(String(64))
    created_at = Column(DateTime(timezone=True), default=utcnow)

    game = relationship("Game", back_populates="versions", foreign_keys=[game_id])


class RequestedChange(Base):
    __tablename__ = "requested_changes"

    id = Column(String(36), primary_key=True, default=new_id)
    game_id = Column(String(36), ForeignKey("games.id"), nullable=False, index=True)
    review_id = Column(String(36), ForeignKey("game_reviews.id"))

    change = Column(Text, nullable=False)
    priority = Column(_enum_column(ChangePriority, "change_priority"), nullable=False,
                      default=ChangePriority.MEDIUM)
    category = Column(String(50))
    must_fix = Column(Boolean, nullable=False, default=False)

    resolved = Column(Boolean, nullable=False, default=False)
    resolved_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), default=utcnow)

    game = relationship("Game", back_populates="requested_changes")


class GameReview(Base):
    __tablename__ = "game_reviews"

    id = Column(String(36), primary_key=True, default=new_id)
    game_id = Column(String(36), ForeignKey("games.id"), nullable=False, index=True)
    version_id = Column(String(36), ForeignKey("game_versions.id"))
    reviewer_id = Column(String(64), nullable=False)

    started_at = Column(DateTime(timezone=True), default=utcnow)
    completed_at = Column(DateTime(timezone=True))
    decision = Column(_enum_column(ReviewDecision, "review_decision"))
    overall_comments = Column(Text)
    test_results = Column(JSON, nullable=False, default=dict)
    rejection_reason = Column(Text)

    game = relationship("Game", back_populates="reviews")


class License(Base):
    __tablename__ = "licenses"

    id = Column(String(36), primary_key=True, default=new_id)
    game_id = Column(String(36), ForeignKey("games.id"), nullable=False, unique=True)
    developer_id = Column(String(64), nullable=False)

    engine_name = Column(String(100))
    engine_license_type = Column(String(100))
    ownership_status = Column(String(50))
    copyright_holder = Column(String(200))
    copyright_year = Column(Integer)

    ownership_confirmed = Column(Boolean, nullable=False, default=False)
    no_infringement = Column(Boolean, nullable=False, default=False)
    accurate_information = Column(Boolean, nullable=False, default=False)
    agreement_accepted = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    game = relationship("Game", back_populates="license")


class EventLog(Base):
    __tablename__ = "event_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    game_id = Column(String(36), ForeignKey("games.id"), nullable=False, index=True)
    event_type = Column(String(50), nullable=False)
    from_status = Column(String(30))
    to_status = Column(String(30))
    actor_id = Column(String(64))
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    game = relationship("Game", back_populates="events")
