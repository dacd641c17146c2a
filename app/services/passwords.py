# app/services/passwords.py
from __future__ import annotations

from passlib.context import CryptContext

_pwd = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__truncate_error=False,
)

def hash_password(plain: str) -> str:
    return _pwd.hash(plain)

def verify_password(plain: str, hashed: str) -> bool:
    """Verify a plaintext password against a stored bcrypt hash. Empty hash never matches."""
    if not hashed:
        return False
    return _pwd.verify(plain, hashed)
