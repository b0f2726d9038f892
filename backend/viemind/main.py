from __future__ import annotations
import uuid
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from viemind.config import settings
from viemind.db import engine
from viemind.logging_setup import configure_logging
from viemind.routes.system import router as system_router
from viemind.routes.auth import router as auth_router
from viemind.routes.competitions import router as competitions_router
from viemind.routes.submissions import router as submissions_router
from viemind.routes.uploads import router as uploads_router
from viemind.routes.users import router as users_router
from viemind.routes.organizations import router as organizations_router
from viemind.services.errors import ViemindError
import structlog

configure_logging()
log = structlog.get_logger()

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    log.info("startup", env=settings.environment, version=settings.app_version, git_sha=settings.git_sha)
    yield
    # Shutdown
    await engine.dispose()
    log.info("shutdown")

app = FastAPI(
    title=f"{settings.app_display_name} API",
    version=settings.app_version,
    lifespan=lifespan,
    description=f"{settings.app_display_name} API for AI and data science competitions",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.environment == "dev" else settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(system_router)
app.include_router(auth_router)
app.include_router(competitions_router)
app.include_router(submissions_router)
app.include_router(uploads_router)
app.include_router(users_router)
app.include_router(organizations_router)

# Every error body is {"message": ...}

@app.exception_handler(ViemindError)
async def viemind_error_handler(request: Request, exc: ViemindError):
    if exc.status_code >= 500:
        log.error("request_failed", path=request.url.path, message=exc.message)
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(status_code=exc.status_code, content={"message": message}, headers=getattr(exc, "headers", None))

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path"))
    reason = first.get("msg", "Invalid request")
    return JSONResponse(status_code=400, content={"message": f"{field}: {reason}" if field else reason})

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    log.exception("unhandled_error", path=request.url.path)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})

@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = rid
    structlog.contextvars.bind_contextvars(request_id=rid)
    response: Response = await call_next(request)
    response.headers["X-Request-ID"] = rid
    structlog.contextvars.clear_contextvars()
    return response
