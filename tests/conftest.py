import json
import os

# Must be set before app modules build settings and the engine
os.environ["ENV"] = "test"
os.environ.setdefault("TEST_DATABASE_URL", "sqlite://")
os.environ["FACEBOOK"] = json.dumps(
    {"appId": "1234567890", "appSecret": "test-app-secret", "verifyToken": "verify-me"}
)
os.environ["PUBSUB_ENABLED"] = "false"
os.environ["FACEBOOK_WEBHOOK_ASYNC"] = "false"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import get_settings
from app.db import Base
import app.models  # noqa: F401

pytest_plugins = [
    "tests.fixtures.facebook_fixtures",
    "tests.fixtures.inbox_fixtures",
]


def _build_test_engine():
    url = get_settings().database_url
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(url)


engine = _build_test_engine()
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db():
    """Fresh schema and session per test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db, fake_graph, publisher):
    """API client bound to the test session, the fake Graph API and a mocked publisher."""
    from fastapi.testclient import TestClient

    from app.db import get_db
    from app.main import create_app
    from app.routers.utils.dependencies import get_graph_client, get_message_publisher

    app = create_app(testing=True)

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_graph_client] = lambda: fake_graph
    app.dependency_overrides[get_message_publisher] = lambda: publisher
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
