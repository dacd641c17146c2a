# app/services/page_service.py
# Pages and posts: fixed-shape documents with a unique slug.
from __future__ import annotations
from typing import Optional, Sequence, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.errors import DuplicateIdentifierError, NotFoundError
from app.models.pages import Page, Post
from app.schemas.pages import PageCreate, PageUpdate, PostCreate, PostUpdate
from app.services.publish_service import UNSET, PublishedAtPolicy, resolve_published_at

Doc = TypeVar("Doc", Page, Post)

# pages always follow the status; posts use settings.POST_PUBLISHED_AT_POLICY
PAGE_POLICY = PublishedAtPolicy.stamp_and_clear


def _ensure_slug_free(db: Session, cls: Type[Doc], slug: str, *, exclude_id: Optional[str] = None) -> None:
    stmt = select(cls.id).where(cls.slug == slug)
    if exclude_id:
        stmt = stmt.where(cls.id != exclude_id)
    if db.scalar(stmt.limit(1)):
        raise DuplicateIdentifierError("slug", "Slug already exists")


def list_documents(db: Session, cls: Type[Doc], *, status: Optional[str] = None,
                   limit: int = 50, offset: int = 0) -> Sequence[Doc]:
    stmt = select(cls)
    if status:
        stmt = stmt.where(cls.status == status)
    return db.scalars(stmt.order_by(cls.created_at.desc()).limit(limit).offset(offset)).all()


def get_document(db: Session, cls: Type[Doc], doc_id: str) -> Doc:
    doc = db.get(cls, doc_id)
    if not doc:
        raise NotFoundError(f"{cls.__name__} not found")
    return doc


def get_document_by_slug(db: Session, cls: Type[Doc], slug: str) -> Doc:
    doc = db.scalar(select(cls).where(cls.slug == slug).limit(1))
    if not doc:
        raise NotFoundError(f"{cls.__name__} not found")
    return doc


def create_document(
    db: Session,
    cls: Type[Doc],
    payload: PageCreate | PostCreate,
    *,
    policy: PublishedAtPolicy | str,
    created_by: Optional[str] = None,
) -> Doc:
    _ensure_slug_free(db, cls, payload.slug)
    values = payload.model_dump(exclude={"published_at"})
    requested = payload.published_at if "published_at" in payload.model_fields_set else UNSET
    doc = cls(
        **values,
        published_at=resolve_published_at(policy, new_status=payload.status, requested=requested),
        created_by=created_by,
    )
    db.add(doc)
    db.flush()
    return doc


def update_document(
    db: Session,
    cls: Type[Doc],
    doc_id: str,
    patch: PageUpdate | PostUpdate,
    *,
    policy: PublishedAtPolicy | str,
) -> Doc:
    doc = get_document(db, cls, doc_id)
    changes = patch.model_dump(exclude_unset=True, exclude={"published_at"})
    if changes.get("slug") and changes["slug"] != doc.slug:
        _ensure_slug_free(db, cls, changes["slug"], exclude_id=doc.id)

    new_status = changes.get("status") or doc.status
    requested = patch.published_at if "published_at" in patch.model_fields_set else UNSET
    doc.published_at = resolve_published_at(
        policy,
        new_status=new_status,
        previous_status=doc.status,
        previous_published_at=doc.published_at,
        requested=requested,
    )
    for key, value in changes.items():
        if value is not None:
            setattr(doc, key, value)
    db.flush()
    return doc


def delete_document(db: Session, cls: Type[Doc], doc_id: str) -> None:
    doc = get_document(db, cls, doc_id)
    db.delete(doc)
    db.flush()
