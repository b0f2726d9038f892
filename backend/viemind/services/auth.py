from __future__ import annotations
from datetime import datetime, timezone as dt_tz
import jwt
import structlog
from fastapi import Depends
from viemind.config import Settings, get_settings
from viemind.models.user import User, as_utc
from viemind.security import hash_password, verify_password, make_access_token, decode_token
from viemind.services.errors import Conflict, Unauthorized
from viemind.services.storage import Storage, get_storage

log = structlog.get_logger()


class AuthService:
    """Credentials in, bearer tokens out. Every issued token is backed by a session row."""

    def __init__(self, storage: Storage, settings: Settings):
        self.storage = storage
        self.settings = settings

    async def _issue(self, user: User) -> str:
        token, expires_at = make_access_token(str(user.id), self.settings)
        await self.storage.create_session(user.id, token, expires_at)
        return token

    async def register(self, *, email: str, username: str, password: str, full_name: str) -> tuple[User, str]:
        if await self.storage.get_user_by_email(email):
            raise Conflict("Email already registered")
        if await self.storage.get_user_by_username(username):
            raise Conflict("Username already taken")
        user = await self.storage.create_user(
            email=email,
            username=username,
            password_hash=hash_password(password),
            full_name=full_name,
        )
        log.info("user_registered", user_id=str(user.id))
        return user, await self._issue(user)

    async def login(self, *, email: str, password: str) -> tuple[User, str]:
        user = await self.storage.get_user_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            log.info("login_failed")
            raise Unauthorized("Invalid credentials")
        log.info("user_logged_in", user_id=str(user.id))
        return user, await self._issue(user)

    async def verify(self, token: str) -> User:
        try:
            data = decode_token(token, self.settings)
        except jwt.PyJWTError:
            raise Unauthorized("Invalid token")
        if data.get("type") != "access":
            raise Unauthorized("Wrong token type")
        found = await self.storage.get_session(token)
        if not found:
            raise Unauthorized("Session expired or revoked")
        session_row, user = found
        if as_utc(session_row.expires_at) <= datetime.now(dt_tz.utc):
            raise Unauthorized("Session expired or revoked")
        if str(user.id) != data.get("sub"):
            raise Unauthorized("Invalid token")
        return user

    async def logout(self, token: str) -> None:
        try:
            await self.storage.delete_session(token)
        except Exception:
            # the client discards its token regardless
            log.exception("logout_invalidation_failed")

    async def sweep_expired_sessions(self) -> int:
        removed = await self.storage.delete_expired_sessions()
        log.info("sessions_swept", removed=removed)
        return removed


def get_auth_service(
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
) -> AuthService:
    return AuthService(storage, settings)
