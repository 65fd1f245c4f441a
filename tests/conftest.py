"""Test configuration."""
import os
from collections.abc import AsyncIterator, Callable, Iterator
from pathlib import Path
from uuid import uuid4

from alembic import command
from alembic.config import Config
import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

# --- Default env, before the app reads its settings
os.environ.setdefault("DATABASE_URL", "sqlite:///./buildathon_test.db")
os.environ.setdefault("BUILDATHON_ENV", "test")
os.environ.setdefault("ADMIN_USERNAME", "admin")
os.environ.setdefault("ADMIN_PASSWORD", "test-admin-password")
os.environ.setdefault("ADMIN_SESSION_SECRET", "test-session-secret")
os.environ.setdefault("GITHUB_TOKEN", "")

from buildathon.config import get_settings  # noqa: E402
from buildathon.db import get_db  # noqa: E402
from buildathon.main import app  # noqa: E402
from buildathon.models import Project, Team, TeamMember  # noqa: E402
from buildathon.routers.teams import get_github_client  # noqa: E402
from buildathon.security import create_session_value  # noqa: E402
from buildathon.services.github import GithubClient  # noqa: E402

ROOT = Path(__file__).resolve().parents[1]
DB_PATH = Path("./buildathon_test.db")


def _run_migrations() -> None:
    cfg = Config(str(ROOT / "alembic.ini"))
    cfg.attributes["sqlalchemy.url"] = os.environ["DATABASE_URL"]
    command.upgrade(cfg, "head")


# --- (1) Fresh database file for the session
if DB_PATH.exists():
    DB_PATH.unlink()

engine = create_engine(
    os.environ["DATABASE_URL"],
    connect_args={"check_same_thread": False},
    future=True,
)


# pysqlite defers BEGIN; take over transaction control so SAVEPOINTs nest properly.
@event.listens_for(engine, "connect")
def _disable_pysqlite_begin(dbapi_connection, connection_record):
    dbapi_connection.isolation_level = None


@event.listens_for(engine, "begin")
def _emit_begin(conn):
    conn.exec_driver_sql("BEGIN")


TestingSessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    future=True,
    expire_on_commit=False,
)

# --- (2) Schema comes from Alembic only
_run_migrations()


@pytest.fixture
def db_session() -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection, join_transaction_mode="create_savepoint")
    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


@pytest.fixture(autouse=True)
def override_db_dependency(db_session: Session) -> Iterator[None]:
    def _get_db() -> Iterator[Session]:
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    yield
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def github_responses() -> dict[str, httpx.Response]:
    """Canned GitHub API responses keyed by request path; unknown paths 404."""

    return {}


@pytest.fixture(autouse=True)
def override_github_client(github_responses: dict[str, httpx.Response]) -> Iterator[list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return github_responses.get(request.url.path, httpx.Response(404, json={"message": "Not Found"}))

    def _client() -> Iterator[GithubClient]:
        client = GithubClient(get_settings(), transport=httpx.MockTransport(_handler))
        try:
            yield client
        finally:
            client.close()

    app.dependency_overrides[get_github_client] = _client
    yield seen
    app.dependency_overrides.pop(get_github_client, None)


@pytest.fixture
async def client() -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as async_client:
        yield async_client


@pytest.fixture
def admin_cookies() -> dict[str, str]:
    value = create_session_value()
    assert value is not None
    return {"admin_session": value}


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def make_team(db_session: Session) -> Callable[..., Team]:
    """Factory creating a team with one member per given country."""

    def _factory(*, name: str = "Team", countries: tuple[str, ...] = ("Brazil",)) -> Team:
        team = Team(team_name=f"{name}-{uuid4().hex[:6]}", wallet_address="0x" + "ab" * 20)
        team.members = [
            TeamMember(
                member_name=f"member-{idx}",
                member_email=f"member-{uuid4().hex[:8]}@example.com",
                country=country,
            )
            for idx, country in enumerate(countries)
        ]
        db_session.add(team)
        db_session.commit()
        db_session.refresh(team)
        return team

    return _factory


@pytest.fixture
def make_project(db_session: Session, make_team: Callable[..., Team]) -> Callable[..., Project]:
    """Factory creating a bare project (no milestone records)."""

    def _factory(team: Team | None = None, *, name: str = "Project") -> Project:
        owner = team or make_team()
        project = Project(team_id=owner.id, project_name=name)
        db_session.add(project)
        db_session.commit()
        db_session.refresh(project)
        return project

    return _factory
