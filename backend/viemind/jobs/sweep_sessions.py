from __future__ import annotations
import asyncio
from viemind.config import settings
from viemind.db import SessionLocal
from viemind.services.auth import AuthService
from viemind.services.storage import Storage

async def _run() -> int:
    async with SessionLocal() as session:
        return await AuthService(Storage(session), settings).sweep_expired_sessions()

def sweep_expired_sessions() -> int:
    # RQ entry point (sync); run the async coroutine
    return asyncio.run(_run())
