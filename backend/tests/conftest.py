"""Pytest fixtures: SQLite database per test, fresh channel hub per client."""
import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from vinstack.database import Base, get_db
from vinstack.main import app
from vinstack.realtime.hub import ChannelHub
from vinstack.services.sandbox_service import CodeSandbox

# Import all models so they register with Base.metadata
from vinstack.models.user import Profile                        # noqa: F401
from vinstack.models.folder import Folder                       # noqa: F401
from vinstack.models.team import Team, TeamMember               # noqa: F401
from vinstack.models.snippet import Snippet                     # noqa: F401
from vinstack.models.collaborator import SnippetCollaborator    # noqa: F401
from vinstack.models.comment import SnippetComment              # noqa: F401
from vinstack.models.notification import Notification           # noqa: F401
from vinstack.models.activity import Activity                   # noqa: F401
from vinstack.models.subscription import Subscription           # noqa: F401
from vinstack.models.player import Player, QuestCompletion      # noqa: F401
from vinstack.models.integration import Integration             # noqa: F401

SQLITE_URL = "sqlite:///./test.db"


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})

    # WAL lets websocket handlers read while request threads write
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    """A session on the test database."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def hub():
    """The channel hub the app under test publishes to."""
    fresh = ChannelHub()
    previous = app.state.hub
    app.state.hub = fresh
    yield fresh
    app.state.hub = previous


def local_sandbox(**overrides) -> CodeSandbox:
    """A sandbox on the local fallback; test machines rarely run Docker."""
    options = {"timeout": 5, "use_docker": False, "allow_fallback": True, "run_as": ""}
    options.update(overrides)
    return CodeSandbox(**options)


@pytest.fixture(scope="function")
def sandbox():
    """The sandbox the app under test executes code with."""
    fresh = local_sandbox()
    previous = app.state.sandbox
    app.state.sandbox = fresh
    yield fresh
    app.state.sandbox = previous


@pytest.fixture(scope="function")
def client(db_engine, hub, sandbox):
    """FastAPI TestClient with the database dependency overridden to use SQLite."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def _override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers: create rows via the API, return the JSON response dict
# ---------------------------------------------------------------------------
def create_test_user(client: TestClient, username: str = "tester", email: str = None) -> dict:
    """Helper: POST /api/profiles and return response JSON."""
    resp = client.post("/api/profiles/", json={
        "username": username,
        "email": email or f"{username}@example.com",
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_test_snippet(
    client: TestClient,
    owner_id: str,
    title: str = "Hello snippet",
    content: str = "console.log('hi');",
    language: str = "javascript",
    visibility: str = "private",
    **extra,
) -> dict:
    """Helper: POST /api/snippets and return response JSON."""
    resp = client.post("/api/snippets/", json={
        "title": title,
        "content": content,
        "language": language,
        "visibility": visibility,
        "owner_id": owner_id,
        **extra,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def add_collaborator(client: TestClient, snippet: dict, user: dict, role: str = "editor", accept: bool = True) -> dict:
    """Helper: invite ``user`` to ``snippet`` and optionally accept."""
    resp = client.post(f"/api/snippets/{snippet['snippet_id']}/collaborators", json={
        "email": user["email"],
        "role": role,
        "invited_by": snippet["owner_id"],
    })
    assert resp.status_code == 201, resp.text
    if accept:
        resp = client.post(f"/api/snippets/{snippet['snippet_id']}/collaborators/{user['user_id']}/accept")
        assert resp.status_code == 200, resp.text
    return resp.json()
