from __future__ import annotations
from datetime import datetime, timezone
import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from viemind import db
from viemind.config import settings

router = APIRouter(tags=["system"])
log = structlog.get_logger()


@router.get("/health")
async def health(request: Request):
    try:
        database = "ok" if await db.ping() else "down"
    except (SQLAlchemyError, OSError):
        log.warning("health_db_unreachable")
        database = "down"
    body = {
        "status": "ok" if database == "ok" else "degraded",
        "service": settings.app_name,
        "env": settings.environment,
        "database": database,
        "time": datetime.now(timezone.utc).isoformat(),
        "request_id": getattr(request.state, "request_id", None),
    }
    return JSONResponse(status_code=200 if database == "ok" else 503, content=body)


@router.get("/version")
async def version():
    return {
        "name": settings.app_name,
        "display_name": settings.app_display_name,
        "version": settings.app_version,
        "git_sha": settings.git_sha,
    }
