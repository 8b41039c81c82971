"""
Shared pytest fixtures.

The app is built through create_app() with a mongomock-backed Database, so
no MongoDB server is needed. Entering the TestClient runs the lifespan, which
seeds the ten sample lessons.
"""

import mongomock
import pytest
from fastapi.testclient import TestClient

from config import Settings
from database import Database
from main import create_app


@pytest.fixture
def images_dir(tmp_path):
    path = tmp_path / "images"
    path.mkdir()
    (path / "math.jpg").write_bytes(b"\xff\xd8\xff\xe0fake-jpeg\xff\xd9")
    return path


@pytest.fixture
def test_settings(images_dir):
    return Settings(
        mongodb_uri="mongodb://unused",
        database_name="after_school_test",
        images_dir=str(images_dir),
        log_level="WARNING",
    )


@pytest.fixture
def database():
    return Database(mongomock.MongoClient(), "after_school_test").connect()


@pytest.fixture
def client(database, test_settings):
    app = create_app(database=database, settings=test_settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def lessons(client):
    """Seeded lessons keyed by subject."""
    return {lesson["subject"]: lesson for lesson in client.get("/lessons").json()}
