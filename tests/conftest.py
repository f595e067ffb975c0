"""Pytest configuration and fixtures."""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["PUBLIC_BASE_URL"] = ""

import pytest
from fastapi.testclient import TestClient

from src.app.db.base import Base
from src.app.db.session import SessionLocal, engine
from src.app.main import app
from src.app.models.url import URL


@pytest.fixture
def tables():
    """Create a fresh schema for every test."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(tables):
    """Database session bound to the in-memory test database."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(tables):
    """Test client running the application lifespan."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_url(db):
    """Insert a URL record directly, bypassing the service layer."""

    def _make_url(short_code: str, long_url: str, clicks: int = 0) -> URL:
        url = URL(short_code=short_code, long_url=long_url, clicks=clicks)
        db.add(url)
        db.commit()
        db.refresh(url)
        return url

    return _make_url
