from __future__ import annotations
from fastapi import APIRouter, Depends
from redis import Redis
from rq import Queue
import structlog
from viemind.auth_deps import get_bearer_token, get_current_user
from viemind.config import settings
from viemind.jobs.sweep_sessions import sweep_expired_sessions
from viemind.models.user import User
from viemind.schemas.auth import RegisterRequest, LoginRequest, AuthResponse, MessageResponse
from viemind.schemas.user import UserMe
from viemind.services.auth import AuthService, get_auth_service

router = APIRouter(prefix="/api/auth", tags=["auth"])
log = structlog.get_logger()

# RQ queue (lazy single instance)
_redis = Redis.from_url(settings.redis_url, socket_connect_timeout=1)
q = Queue("default", connection=_redis)

@router.post("/register", status_code=201, response_model=AuthResponse)
async def register(payload: RegisterRequest, auth: AuthService = Depends(get_auth_service)):
    user, token = await auth.register(
        email=payload.email, username=payload.username, password=payload.password, full_name=payload.full_name
    )
    return AuthResponse(user=UserMe.model_validate(user), token=token)

@router.post("/login", response_model=AuthResponse)
async def login(payload: LoginRequest, auth: AuthService = Depends(get_auth_service)):
    user, token = await auth.login(email=payload.email, password=payload.password)
    return AuthResponse(user=UserMe.model_validate(user), token=token)

@router.get("/me", response_model=UserMe)
async def me(user: User = Depends(get_current_user)):
    return UserMe.model_validate(user)

@router.post("/logout", response_model=MessageResponse)
async def logout(
    token: str = Depends(get_bearer_token),
    user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    await auth.logout(token)
    log.info("user_logged_out", user_id=str(user.id))
    try:
        q.enqueue(sweep_expired_sessions, job_timeout=60)
    except Exception:
        # non-fatal; expired rows wait for the next sweep
        log.warning("session_sweep_enqueue_failed")
    return MessageResponse(message="Logged out successfully")
