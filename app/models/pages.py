# app/models/pages.py
# Pages y Posts: contenido tipado simple, fuera del motor de modelos dinámicos
from __future__ import annotations
from datetime import datetime
from typing import Optional

from sqlalchemy import String, Text, DateTime, Enum
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.models.content import new_uuid, utcnow

PageStatus = Enum(
    "draft", "published",
    name="page_status",
    create_constraint=True,
    validate_strings=True,
    native_enum=False,
)


class Page(Base):
    __tablename__ = "pages"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    title: Mapped[str] = mapped_column(String(255))
    slug: Mapped[str] = mapped_column(String(255), unique=True)
    content: Mapped[str] = mapped_column(Text, default="")
    meta_description: Mapped[str] = mapped_column(String(512), default="")
    meta_keywords: Mapped[str] = mapped_column(String(512), default="")
    status: Mapped[str] = mapped_column(PageStatus, default="draft")
    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class Post(Base):
    __tablename__ = "posts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    title: Mapped[str] = mapped_column(String(255))
    slug: Mapped[str] = mapped_column(String(255), unique=True)
    content: Mapped[str] = mapped_column(Text, default="")
    excerpt: Mapped[str] = mapped_column(String(1024), default="")
    featured_image: Mapped[str] = mapped_column(String(1024), default="")
    meta_description: Mapped[str] = mapped_column(String(512), default="")
    meta_keywords: Mapped[str] = mapped_column(String(512), default="")
    status: Mapped[str] = mapped_column(PageStatus, default="draft")
    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
