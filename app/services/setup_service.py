# app/services/setup_service.py
# First-admin provisioning. The login identity and the profile live in two
# stores without a shared transaction, so a failed profile insert is undone by
# deleting the identity that was just created.
from __future__ import annotations

import logging
from typing import Any, Dict

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import ProvisioningError
from app.models.auth import AuthIdentity, User, UserRole
from app.services.passwords import hash_password

logger = logging.getLogger(__name__)


def find_identity(db: Session, email: str) -> AuthIdentity | None:
    return db.scalar(select(AuthIdentity).where(AuthIdentity.email == email.lower()).limit(1))


def _create_identity(db: Session, email: str, password: str) -> AuthIdentity:
    identity = AuthIdentity(
        email=email.lower(),
        hashed_password=hash_password(password),
        email_confirmed=True,
    )
    db.add(identity)
    db.commit()
    db.refresh(identity)
    return identity


def _insert_profile(db: Session, identity: AuthIdentity, first_name: str, last_name: str) -> User:
    profile = User(
        id=identity.id,
        email=identity.email,
        first_name=first_name,
        last_name=last_name,
        phone_number="",
        role=UserRole.admin,
    )
    db.add(profile)
    db.commit()
    return profile


def _delete_identity(db: Session, identity_id: str) -> None:
    identity = db.get(AuthIdentity, identity_id)
    if identity is not None:
        db.delete(identity)
        db.commit()


def provision_admin(
    db: Session,
    *,
    email: str,
    password: str,
    first_name: str = "Admin",
    last_name: str = "User",
) -> Dict[str, Any]:
    """
    Idempotent: an existing identity for `email` is reported, not recreated.
    Returns {created, message, user_id}.
    """
    existing = find_identity(db, email)
    if existing is not None:
        logger.info("admin setup skipped, %s already exists", existing.email)
        return {"created": False, "message": "Admin user already exists", "user_id": existing.id}

    identity = _create_identity(db, email, password)
    try:
        _insert_profile(db, identity, first_name or "Admin", last_name or "User")
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("admin profile insert failed for %s, removing identity %s", identity.email, identity.id)
        _delete_identity(db, identity.id)
        raise ProvisioningError(f"Failed to create user profile: {exc.__class__.__name__}") from exc

    logger.info("admin user created: %s (%s)", identity.email, identity.id)
    return {"created": True, "message": "Admin user created successfully", "user_id": identity.id}
