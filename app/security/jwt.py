# app/security/jwt.py
from __future__ import annotations
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import jwt
from app.core.settings import settings

ALGO = settings.JWT_ALGORITHM or "HS256"
ACCESS_MIN = settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

def _secret() -> str:
    # read on every call so tests/env changes are picked up
    return settings.JWT_SECRET_KEY or "dev-secret"

def create_access_token(subject: str, extra: Dict[str, Any] | None = None, minutes: int | None = None) -> str:
    now = _utcnow()
    payload: Dict[str, Any] = {
        "sub": str(subject),
        "type": "access",
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=minutes or ACCESS_MIN)).timestamp()),
    }
    if extra:
        payload.update(extra)
    return jwt.encode(payload, _secret(), algorithm=ALGO)

def decode_token(token: str) -> Dict[str, Any]:
    # JWTError / ExpiredSignatureError propagate; the caller answers 401
    return jwt.decode(
        token,
        _secret(),
        algorithms=[ALGO],
        options={"verify_aud": False, "verify_iss": False},
    )
