from models import EventLog, Game, License, SubmissionStatus
from services.license_service import license_errors
from services.media_service import media_errors, build_screenshot
from services.review_time_service import estimate_review_time
from services.snapshot_service import diff_snapshots, snapshot_to_values, take_snapshot
from services.timeline_service import build_timeline
from services.version_number_service import bump_patch, next_version_number

from tests.conftest import screenshot


class TestMediaErrors:
    def test_complete_media_has_no_errors(self):
        game = Game(title="g", cover_image_url="/c.jpg", screenshots=[screenshot(1), screenshot(2)])
        assert media_errors(game) == []

    def test_collects_every_problem(self):
        game = Game(title="g", cover_image_url=None, screenshots=[])
        errors = media_errors(game)
        assert "Cover image is required" in errors
        assert "At least 2 screenshots are required" in errors
        assert len(errors) == 2

    def test_too_many_screenshots(self):
        game = Game(title="g", cover_image_url="/c.jpg",
                    screenshots=[screenshot(i) for i in range(6)])
        assert media_errors(game) == ["Maximum 5 screenshots are allowed"]

    def test_build_screenshot_assigns_id(self):
        shot = build_screenshot({"url": "/a.jpg", "width": 1920})
        assert shot["id"]
        assert shot["url"] == "/a.jpg"
        assert shot["height"] is None


class TestVersionNumbers:
    def test_bump_patch(self):
        assert bump_patch("1.0.0") == "1.0.1"
        assert bump_patch("1.2.9") == "1.2.10"
        assert bump_patch("2.3") == "2.3.1"
        assert bump_patch("1") == "1.0.1"
        assert bump_patch("beta") == "beta.1"

    def test_first_version_uses_game_version(self):
        assert next_version_number("1.4.0", None) == "1.4.0"
        assert next_version_number(None, None) == "1.0.0"

    def test_later_versions_follow_latest(self):
        assert next_version_number("1.0.0", "1.0.3") == "1.0.4"


class TestSnapshots:
    def test_snapshot_is_a_deep_copy(self):
        game = Game(title="Original", screenshots=[screenshot(1)])
        snapshot = take_snapshot(game)

        game.screenshots[0]["url"] = "/changed.jpg"
        assert snapshot["screenshots"][0]["url"] == "/screenshot1.jpg"
        assert snapshot["title"] == "Original"

    def test_diff_lists_changed_fields_only(self):
        a = {"title": "A", "description": "same", "screenshots": []}
        b = {"title": "B", "description": "same", "screenshots": []}
        assert diff_snapshots(a, b) == [{"field": "title", "version1": "A", "version2": "B"}]
        assert diff_snapshots(a, dict(a)) == []

    def test_snapshot_to_values_skips_missing_fields(self):
        values = snapshot_to_values({"title": "Old", "screenshots": None})
        assert values == {"title": "Old", "screenshots": []}


def test_estimate_review_time_grows_with_queue():
    assert estimate_review_time(1) == "1-2 business days"
    assert estimate_review_time(10) == "2-3 business days"
    assert estimate_review_time(40) == "3-5 business days"


def test_timeline_starts_with_draft():
    game = Game(title="g", developer_id="dev-1")
    events = [
        EventLog(event_type="SUBMITTED", from_status="Draft", to_status="In Review"),
        EventLog(event_type="REVIEW_DECISION", from_status="In Review", to_status="Changes Requested"),
    ]
    timeline = build_timeline(game, events)
    assert [t["status"] for t in timeline] == ["Draft", "In Review", "Changes Requested"]


class TestLicenseErrors:
    def test_missing_license(self, db, make_game):
        game = make_game(with_license=False)
        assert license_errors(db, game.id) == ["License information is required"]

    def test_incomplete_declarations(self, db, make_game):
        game = make_game(with_license=False)
        db.add(License(game_id=game.id, developer_id=game.developer_id,
                       engine_name="Unity", copyright_holder="Dev",
                       ownership_confirmed=True))
        db.commit()

        errors = license_errors(db, game.id)
        assert len(errors) == 3
        assert "The developer agreement must be accepted" in errors

    def test_complete_license(self, db, make_game):
        game = make_game()
        assert license_errors(db, game.id) == []
        assert game.submission_status == SubmissionStatus.DRAFT
