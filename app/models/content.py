# app/models/content.py
# Content models: ContentModel (field schema as JSON) and ContentEntry (JSON fields)
from __future__ import annotations
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    String, DateTime, Enum, Index
)
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, JSONType

EntryStatus = Enum(
    "draft", "published", "archived",
    name="entry_status",
    create_constraint=True,
    validate_strings=True,
    native_enum=False,
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_uuid() -> str:
    return str(uuid.uuid4())


class ContentModel(Base):
    __tablename__ = "content_models"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    name: Mapped[str] = mapped_column(String(128))
    # addressable name for downstream consumers: unique across all models
    api_identifier: Mapped[str] = mapped_column(String(64), unique=True)
    description: Mapped[str] = mapped_column(String(1024), default="")
    icon: Mapped[str] = mapped_column(String(64), default="")
    # ordered list of FieldDefinition dicts; order = display/edit order
    fields: Mapped[list] = mapped_column(JSONType, default=list)

    created_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class ContentEntry(Base):
    __tablename__ = "content_entries"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    # Plain column, no FK: deleting a model leaves its entries orphaned.
    content_model_id: Mapped[str] = mapped_column(String(36), index=True)
    title: Mapped[str] = mapped_column(String(255))
    fields: Mapped[dict] = mapped_column(JSONType, default=dict)

    status: Mapped[str] = mapped_column(EntryStatus, default="draft")
    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_content_entries_model_status", "content_model_id", "status"),
    )
