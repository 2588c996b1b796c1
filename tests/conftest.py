"""
Pytest configuration and fixtures.

Every test that touches storage gets its own SQLite file under tmp_path.
"""
from typing import Any, AsyncGenerator, Generator

import httpx
import pytest
import pytest_asyncio

from daytodos.api.main import app
from daytodos.client import TodoClient
from daytodos.config import get_settings
from daytodos.core.todos import TodoService
from daytodos.storage.buckets import BucketStore
from daytodos.storage.connection import close_db, init_db


@pytest.fixture
def database_url(tmp_path: Any, monkeypatch: pytest.MonkeyPatch) -> Generator[str, Any, None]:
    """Point the settings at a fresh SQLite file."""
    url = f"sqlite+aiosqlite:///{tmp_path / 'todos.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    get_settings.cache_clear()
    yield url
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def db(database_url: str) -> AsyncGenerator[None, Any]:
    """Create the tables, dispose of the engine afterwards."""
    await close_db()
    await init_db()
    yield
    await close_db()


@pytest_asyncio.fixture
async def store(db: None) -> BucketStore:
    return BucketStore()


@pytest_asyncio.fixture
async def service(store: BucketStore) -> TodoService:
    return TodoService(store=store)


@pytest_asyncio.fixture
async def client(db: None) -> AsyncGenerator[httpx.AsyncClient, Any]:
    """Create test HTTP client."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def todo_client(db: None) -> AsyncGenerator[TodoClient, Any]:
    """Create the API client wired to the in-process app."""
    async with TodoClient("http://test", transport=httpx.ASGITransport(app=app)) as tc:
        yield tc


@pytest.fixture
def expected_demo_lines() -> list[str]:
    """Output of the demo walkthrough."""
    return [
        "daily tasks ...",
        "  mon: milk cows, feed cows, wash cows",
        "  tue: wash laundry, fold laundry, iron laundry",
        "  wed: flip burgers",
        "  thu: join army",
        "  fri: kill time",
        "  sat: have beer, make merry",
        "  sun: take aspirin, pray quietly",
        "",
        "weekday tasks: milk cows, feed cows, wash cows, wash laundry, "
        "fold laundry, iron laundry, flip burgers, join army, kill time",
        "",
        "weekend tasks: have beer, make merry, take aspirin, pray quietly",
    ]
