from __future__ import annotations
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any
import jwt
from passlib.context import CryptContext
from viemind.config import Settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)

def make_access_token(sub: str, settings: Settings) -> tuple[str, datetime]:
    """Return (token, expires_at). `jti` keeps tokens unique within the same second."""
    now = datetime.now(timezone.utc)
    expires_at = now + timedelta(minutes=settings.access_ttl_min)
    payload = {
        "sub": sub,
        "type": "access",
        "jti": uuid.uuid4().hex,
        "iat": int(now.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_alg), expires_at

def decode_token(token: str, settings: Settings) -> dict[str, Any]:
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_alg])
