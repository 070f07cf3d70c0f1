import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db, get_settings
from main import app
from models import Game, GameVersion, License, SubmissionStatus, new_id

DEVELOPER_ID = "dev-1"
OTHER_DEVELOPER_ID = "dev-2"
ADMIN_ID = "admin-1"

# One shared in-memory connection so the TestClient threads see the same data
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def make_token(user_id, role, name=None):
    settings = get_settings()
    return jwt.encode(
        {"sub": user_id, "role": role, "name": name},
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )


@pytest.fixture
def dev_headers():
    return {"Authorization": f"Bearer {make_token(DEVELOPER_ID, 'developer', 'Test Developer')}"}


@pytest.fixture
def other_dev_headers():
    return {"Authorization": f"Bearer {make_token(OTHER_DEVELOPER_ID, 'developer', 'Other Developer')}"}


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {make_token(ADMIN_ID, 'admin', 'Test Admin')}"}


def screenshot(index):
    return {
        "id": new_id(),
        "url": f"/screenshot{index}.jpg",
        "file_name": f"screenshot{index}.jpg",
        "file_size": 1000,
        "width": 1920,
        "height": 1080,
        "aspect_ratio": "16:9",
    }


@pytest.fixture
def make_game(db):
    """
    Factory for games owned by DEVELOPER_ID

    By default the game is a Draft with a cover image, two screenshots and a
    complete license, i.e. ready to submit.
    """
    def _make_game(
        title="Test Memory Game",
        developer_id=DEVELOPER_ID,
        cover=True,
        screenshot_count=2,
        with_license=True,
        status=SubmissionStatus.DRAFT,
    ):
        game = Game(
            title=title,
            description="A test game for memory training",
            category="memory",
            difficulty="medium",
            game_url="/uploads/games/test-game/index.html",
            developer_id=developer_id,
            developer_name="Test Developer",
            version="1.0.0",
            cover_image_url="/uploads/cover.jpg" if cover else None,
            screenshots=[screenshot(i) for i in range(1, screenshot_count + 1)],
            submission_status=status,
            is_locked=status == SubmissionStatus.IN_REVIEW,
        )
        db.add(game)
        db.flush()

        if with_license:
            db.add(License(
                game_id=game.id,
                developer_id=developer_id,
                engine_name="Phaser",
                engine_license_type="Free/Open Source",
                ownership_status="Sole Owner",
                copyright_holder="Test Developer",
                copyright_year=2025,
                ownership_confirmed=True,
                no_infringement=True,
                accurate_information=True,
                agreement_accepted=True,
            ))
        db.commit()
        return game

    return _make_game


@pytest.fixture
def make_version(db):
    """Factory for GameVersion rows inserted directly (history fixtures)"""
    def _make_version(game, sequence, version_number, status, title, is_current=False, is_approved=False):
        version = GameVersion(
            game_id=game.id,
            sequence=sequence,
            version_number=version_number,
            status=status,
            is_current_version=is_current,
            is_approved=is_approved,
            approved_by=ADMIN_ID if is_approved else None,
            snapshot={
                "title": title,
                "description": f"{title} description",
                "game_url": "/game.html",
                "screenshots": [],
            },
            change_log=f"Release {version_number}",
            created_by=game.developer_id,
        )
        db.add(version)
        db.commit()
        return version

    return _make_version
