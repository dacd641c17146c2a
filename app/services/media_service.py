# app/services/media_service.py
from __future__ import annotations
import logging
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.models.media import Media
from app.schemas.media import MediaCreate
from app.services.field_values import is_valid_media_url

logger = logging.getLogger(__name__)


def list_media(db: Session, *, kind: Optional[str] = None, limit: int = 50, offset: int = 0) -> Sequence[Media]:
    """`kind` filters by MIME prefix, e.g. 'image'."""
    stmt = select(Media)
    if kind:
        stmt = stmt.where(Media.mime_type.like(f"{kind}/%"))
    stmt = stmt.order_by(Media.created_at.desc()).limit(limit).offset(offset)
    return db.scalars(stmt).all()


def record_media(db: Session, payload: MediaCreate, *, uploaded_by: Optional[str] = None) -> Media:
    if not is_valid_media_url(payload.url):
        raise ValueError("url must be a valid URL or path")
    media = Media(
        filename=payload.filename,
        url=payload.url,
        mime_type=payload.mime_type,
        size=payload.size,
        uploaded_by=uploaded_by,
    )
    db.add(media)
    db.flush()
    return media


def get_media(db: Session, media_id: str) -> Media:
    media = db.get(Media, media_id)
    if not media:
        raise NotFoundError("Media not found")
    return media


def delete_media(db: Session, media_id: str) -> None:
    # the stored object stays in the bucket; entries may still point at its URL
    media = get_media(db, media_id)
    db.delete(media)
    db.flush()
    logger.info("media record %s deleted (%s)", media_id, media.url)
