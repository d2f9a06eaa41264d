import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Settings are read at import time, so configure the test database first
os.environ["TESTING"] = "1"
os.environ["TEST_DATABASE_URL"] = "sqlite:///./test.db"

from clinic_api.main import app  # noqa: E402
from clinic_api.core.database import Base, SessionLocal, engine, get_redis  # noqa: E402
from clinic_api import models  # noqa: E402,F401


class FakeRedis:
    """In-memory stand-in for the two Redis commands the rate limiter uses."""

    def __init__(self):
        self.data = {}

    def incr(self, key):
        self.data[key] = self.data.get(key, 0) + 1
        return self.data[key]

    def expire(self, key, seconds):
        return key in self.data


@pytest.fixture(scope="function")
def test_db():
    # Create tables
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def client(test_db, fake_redis):
    app.dependency_overrides[get_redis] = lambda: fake_redis
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def db_session(test_db):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()

