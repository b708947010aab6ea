import itertools
import os
import pathlib
import sys
import tempfile
from datetime import datetime, timezone

import pytest
import pytest_asyncio

# Point the engine at a throwaway SQLite file before worktasks.db is imported;
# the engine is created at import time from DATABASE_URL.
_DB_DIR = tempfile.mkdtemp(prefix='worktasks-tests-')
os.environ.setdefault('DATABASE_URL', 'sqlite+aiosqlite:///' + os.path.join(_DB_DIR, 'test.db'))
# Tests that want the default projects call init_db() with seeding enabled.
os.environ.setdefault('SEED_DEFAULT_PROJECTS', '0')

# ensure project root is on PYTHONPATH for test runs
ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from httpx import AsyncClient, ASGITransport

from worktasks.main import app
from worktasks.db import async_session, reset_db

FIXED_NOW = datetime(2024, 3, 15, 9, 30, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def db():
    """Fresh, empty tables for every test that touches the store."""
    await reset_db()


@pytest_asyncio.fixture
async def sess(db):
    async with async_session() as s:
        yield s


@pytest_asyncio.fixture
async def client(db):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def id_factory():
    """Deterministic identity factory: id-1, id-2, ..."""
    counter = itertools.count(1)
    return lambda: f'id-{next(counter)}'


@pytest.fixture
def fixed_now():
    return lambda: FIXED_NOW
