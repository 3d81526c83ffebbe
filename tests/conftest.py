"""
Shared fixtures.

The database is an in-memory SQLite shared through a StaticPool, so the
environment has to be set before anything under ytfetch is imported.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("YOUTUBE_API_KEYS", "")

from datetime import datetime, timezone

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from ytfetch.core.database import Base, SessionLocal, engine
from ytfetch.api import videos
from ytfetch.models import YoutubeVideo


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    """TestClient over the videos router, sharing the test session."""
    app = FastAPI()
    app.include_router(videos.router)
    app.dependency_overrides[videos.get_db] = lambda: db
    return TestClient(app)


@pytest.fixture
def make_video():
    def _make(video_id, published_at, **kwargs):
        now = datetime.now(timezone.utc)
        return YoutubeVideo(
            video_id=video_id,
            title=kwargs.pop("title", f"Video {video_id}"),
            description=kwargs.pop("description", ""),
            published_at=published_at,
            thumbnail_url=kwargs.pop("thumbnail_url", f"https://i.ytimg.com/vi/{video_id}/default.jpg"),
            channel_title=kwargs.pop("channel_title", "Cricket Daily"),
            channel_id=kwargs.pop("channel_id", "UC123"),
            created_at=now,
            updated_at=now,
            **kwargs,
        )
    return _make


@pytest.fixture
def store(db, make_video):
    """Adds videos straight through the session and commits."""
    def _store(*pairs):
        for video_id, published_at in pairs:
            db.add(make_video(video_id, published_at))
        db.commit()
    return _store
