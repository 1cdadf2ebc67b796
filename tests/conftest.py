"""Common test fixtures for LinkHub."""

import pytest
import pytest_asyncio
import yaml
from aiohttp.test_utils import TestServer

from linkhub.config import Session
from linkhub.sync.engine import AppState, SyncEngine
from tests.fakes import FakeGitHub, FakeRemoteStore

T0 = "2024-01-01T00:00:00.000Z"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's own credentials and settings out of the tests."""
    for name in (
        "GITHUB_USERNAME",
        "GITHUB_TOKEN",
        "LINKHUB_REPO",
        "LINKHUB_SESSION_PATH",
        "LINKHUB_FILE_PATH",
        "GITHUB_API_URL",
        "LINKHUB_SECRET_KEY",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def session():
    return Session(username="octocat", token="ghp_test", repo_name="bookmarks")


@pytest.fixture
def go_docs():
    """The single record from the 'Go Docs' scenario."""
    return {
        "id": "1",
        "title": "Go Docs",
        "url": "https://go.dev",
        "tags": ["go", "docs"],
        "notes": "",
        "createdAt": T0,
        "updatedAt": T0,
    }


@pytest.fixture
def store():
    """Remote store without a link file yet."""
    return FakeRemoteStore()


@pytest.fixture
def engine(session, store):
    return SyncEngine(AppState(session=session), store)


@pytest.fixture
def config_file(tmp_path):
    """Config YAML that keeps the saved session inside tmp_path."""
    path = tmp_path / "config.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "session_path": str(tmp_path / "session.yaml"),
                "secret_key": "test-secret",
            }
        )
    )
    return path


@pytest_asyncio.fixture
async def github():
    """Fake GitHub contents API on a local port; ``base_url`` points at it."""
    fake = FakeGitHub()
    server = TestServer(fake.app())
    await server.start_server()
    fake.base_url = str(server.make_url("")).rstrip("/")
    yield fake
    await server.close()
