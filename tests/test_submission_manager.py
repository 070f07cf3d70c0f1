import pytest

from core.exceptions import ChangeNotFound, ConflictError, GameNotFound, ValidationError
from core.submission_manager import SubmissionManager
from models import (
    ChangePriority,
    GameVersion,
    RequestedChange,
    SubmissionStatus,
)
from tests.conftest import DEVELOPER_ID, OTHER_DEVELOPER_ID


def add_change(db, game, priority, resolved=False, text="Fix bug"):
    change = RequestedChange(
        game_id=game.id,
        change=text,
        priority=priority,
        category="Functionality",
        resolved=resolved,
    )
    db.add(change)
    db.commit()
    return change


def request_changes(db, game):
    game.submission_status = SubmissionStatus.CHANGES_REQUESTED
    game.is_locked = False
    db.commit()


class TestSubmit:
    def test_submit_locks_game_and_creates_current_version(self, db, make_game):
        game = make_game()

        result = SubmissionManager.submit(
            db, game.id, DEVELOPER_ID,
            change_log="Initial submission for review",
            changes=[{"type": "Feature", "description": "Core gameplay mechanics"}]
        )

        game = result["game"]
        version = result["version"]
        assert game.submission_status == SubmissionStatus.IN_REVIEW
        assert game.is_locked is True
        assert game.submitted_for_review_at is not None
        assert version.status == SubmissionStatus.IN_REVIEW
        assert version.is_current_version is True
        assert version.version_number == "1.0.0"
        assert version.snapshot["title"] == "Test Memory Game"
        assert result["estimated_review_time"]

    def test_submit_without_cover_image(self, db, make_game):
        game = make_game(cover=False)

        with pytest.raises(ValidationError) as exc:
            SubmissionManager.submit(db, game.id, DEVELOPER_ID, change_log="Test")

        assert "Cover image is required" in exc.value.errors
        db.refresh(game)
        assert game.submission_status == SubmissionStatus.DRAFT
        assert game.is_locked is False

    def test_submit_lists_every_missing_precondition(self, db, make_game):
        game = make_game(cover=False, screenshot_count=0, with_license=False)

        with pytest.raises(ValidationError) as exc:
            SubmissionManager.submit(db, game.id, DEVELOPER_ID)

        errors = exc.value.errors
        assert "Cover image is required" in errors
        assert "At least 2 screenshots are required" in errors
        assert "License information is required" in errors

    def test_license_check_can_be_disabled(self, db, make_game):
        game = make_game(with_license=False)
        result = SubmissionManager.submit(db, game.id, DEVELOPER_ID, require_license=False)
        assert result["game"].submission_status == SubmissionStatus.IN_REVIEW

    def test_submit_already_in_review(self, db, make_game):
        game = make_game()
        SubmissionManager.submit(db, game.id, DEVELOPER_ID)

        with pytest.raises(ConflictError, match="already in review"):
            SubmissionManager.submit(db, game.id, DEVELOPER_ID)

        assert db.query(GameVersion).filter(GameVersion.game_id == game.id).count() == 1

    def test_submit_other_developers_game(self, db, make_game):
        game = make_game()
        with pytest.raises(GameNotFound):
            SubmissionManager.submit(db, game.id, OTHER_DEVELOPER_ID)


class TestResubmit:
    def test_unresolved_critical_change_blocks(self, db, make_game):
        game = make_game()
        request_changes(db, game)
        add_change(db, game, ChangePriority.CRITICAL, text="Critical bug")

        with pytest.raises(ValidationError, match="critical changes must be resolved"):
            SubmissionManager.resubmit(db, game.id, DEVELOPER_ID, change_log="Test")

        db.refresh(game)
        assert game.submission_status == SubmissionStatus.CHANGES_REQUESTED

    def test_non_critical_unresolved_changes_do_not_block(self, db, make_game):
        game = make_game()
        request_changes(db, game)
        add_change(db, game, ChangePriority.CRITICAL, resolved=True)
        add_change(db, game, ChangePriority.MEDIUM)
        add_change(db, game, ChangePriority.LOW)

        result = SubmissionManager.resubmit(db, game.id, DEVELOPER_ID, change_log="Fixed")

        assert result["game"].submission_status == SubmissionStatus.IN_REVIEW
        assert result["game"].is_locked is True

    def test_resubmit_requires_changes_requested(self, db, make_game):
        game = make_game()
        with pytest.raises(ConflictError, match="can only be resubmitted if changes were requested"):
            SubmissionManager.resubmit(db, game.id, DEVELOPER_ID)

    def test_only_newest_version_is_current(self, db, make_game):
        game = make_game()
        SubmissionManager.submit(db, game.id, DEVELOPER_ID)
        request_changes(db, game)
        result = SubmissionManager.resubmit(db, game.id, DEVELOPER_ID)

        versions = db.query(GameVersion).filter(
            GameVersion.game_id == game.id
        ).order_by(GameVersion.sequence).all()
        assert [v.is_current_version for v in versions] == [False, True]
        assert versions[-1].id == result["version"].id
        assert [v.version_number for v in versions] == ["1.0.0", "1.0.1"]


class TestResolveChange:
    def test_resolve_reports_remaining(self, db, make_game):
        game = make_game()
        first = add_change(db, game, ChangePriority.HIGH)
        add_change(db, game, ChangePriority.MEDIUM, resolved=True)

        result = SubmissionManager.resolve_change(db, game.id, DEVELOPER_ID, first.id)

        assert result["all_changes_resolved"] is True
        assert result["remaining_changes"] == 0
        assert result["change"].resolved is True
        assert result["change"].resolved_at is not None

    def test_resolve_is_idempotent(self, db, make_game):
        game = make_game()
        change = add_change(db, game, ChangePriority.HIGH)
        add_change(db, game, ChangePriority.LOW)

        first = SubmissionManager.resolve_change(db, game.id, DEVELOPER_ID, change.id)
        resolved_at = first["change"].resolved_at
        second = SubmissionManager.resolve_change(db, game.id, DEVELOPER_ID, change.id)

        assert second["change"].resolved_at == resolved_at
        assert second["remaining_changes"] == 1
        assert second["all_changes_resolved"] is False

    def test_resolve_does_not_change_status(self, db, make_game):
        game = make_game()
        request_changes(db, game)
        change = add_change(db, game, ChangePriority.CRITICAL)

        SubmissionManager.resolve_change(db, game.id, DEVELOPER_ID, change.id)

        db.refresh(game)
        assert game.submission_status == SubmissionStatus.CHANGES_REQUESTED

    def test_unknown_change(self, db, make_game):
        game = make_game()
        with pytest.raises(ChangeNotFound, match="Requested change not found"):
            SubmissionManager.resolve_change(db, game.id, DEVELOPER_ID, "missing")


def test_list_submissions_filters_by_status(db, make_game):
    submitted = make_game(title="Submitted")
    make_game(title="Never submitted")
    SubmissionManager.submit(db, submitted.id, DEVELOPER_ID)

    assert [g.title for g in SubmissionManager.list_submissions(db, DEVELOPER_ID)] == ["Submitted"]
    assert SubmissionManager.list_submissions(db, DEVELOPER_ID, SubmissionStatus.APPROVED) == []
    assert SubmissionManager.list_submissions(db, OTHER_DEVELOPER_ID) == []


class TestReopen:
    def test_rejected_game_returns_to_draft(self, db, make_game):
        game = make_game(status=SubmissionStatus.REJECTED)

        game = SubmissionManager.reopen(db, game.id, DEVELOPER_ID)

        assert game.submission_status == SubmissionStatus.DRAFT
        assert game.is_locked is False
        assert db.query(GameVersion).filter(GameVersion.game_id == game.id).count() == 0

        result = SubmissionManager.submit(db, game.id, DEVELOPER_ID)
        assert result["game"].submission_status == SubmissionStatus.IN_REVIEW

    def test_approved_game_can_be_reopened(self, db, make_game):
        game = make_game(status=SubmissionStatus.APPROVED)
        assert SubmissionManager.reopen(db, game.id, DEVELOPER_ID).submission_status == SubmissionStatus.DRAFT

    def test_reopen_refused_while_in_review(self, db, make_game):
        game = make_game(status=SubmissionStatus.IN_REVIEW)

        with pytest.raises(ConflictError, match="Only approved or rejected games can be reopened"):
            SubmissionManager.reopen(db, game.id, DEVELOPER_ID)

        db.refresh(game)
        assert game.is_locked is True
