# app/models/auth.py
from __future__ import annotations
from datetime import datetime
from enum import Enum
from sqlalchemy import (
    String, Boolean, DateTime, Enum as SQLEnum
)
from sqlalchemy.orm import Mapped, mapped_column
from app.db.base import Base
from app.models.content import new_uuid, utcnow


class AuthIdentity(Base):
    """Login identity (the auth backend's user). Profiles reference it by id."""
    __tablename__ = "auth_identities"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    email: Mapped[str] = mapped_column(String(160), unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255))
    email_confirmed: Mapped[bool] = mapped_column(Boolean, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class UserRole(str, Enum):
    admin = "admin"
    editor = "editor"
    viewer = "viewer"


class User(Base):
    """Profile record; id equals the AuthIdentity id."""
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    email: Mapped[str] = mapped_column(String(160), unique=True, index=True)
    first_name: Mapped[str] = mapped_column(String(80), default="")
    last_name: Mapped[str] = mapped_column(String(80), default="")
    phone_number: Mapped[str] = mapped_column(String(40), default="")
    role: Mapped[UserRole] = mapped_column(SQLEnum(UserRole, native_enum=False), default=UserRole.viewer)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    @property
    def can_write(self) -> bool:
        return self.role in (UserRole.admin, UserRole.editor)
