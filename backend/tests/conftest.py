import asyncio
import os
import tempfile

# Point the app at a throwaway SQLite file and upload dir before viemind is imported
_tmp = tempfile.mkdtemp(prefix="viemind-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_tmp}/test.db")
os.environ.setdefault("UPLOAD_DIR", os.path.join(_tmp, "uploads"))
os.environ.setdefault("UPLOAD_BACKEND", "local")
os.environ.setdefault("REDIS_URL", "redis://127.0.0.1:6399/0")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from viemind.config import settings
from viemind.db import Base, build_engine, engine
import viemind.models.user  # noqa: F401
import viemind.models.organization  # noqa: F401
import viemind.models.competition  # noqa: F401
import viemind.models.submission  # noqa: F401


async def _reset_schema():
    eng = build_engine(settings.database_url)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    await eng.dispose()


@pytest.fixture(scope="session", autouse=True)
def schema():
    asyncio.run(_reset_schema())
    yield


@pytest.fixture(autouse=True)
async def dispose_engine():
    # pooled aiosqlite connections are bound to the loop that opened them
    yield
    await engine.dispose()
