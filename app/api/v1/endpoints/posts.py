# app/api/v1/endpoints/posts.py
from __future__ import annotations
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.settings import settings
from app.db.session import get_db
from app.deps.auth import get_current_user, require_writer
from app.models.auth import User
from app.models.pages import Post
from app.schemas.pages import PageStatusLiteral, PostCreate, PostOut, PostUpdate
from app.services import page_service

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("", response_model=List[PostOut])
def list_posts(
    status: Optional[PageStatusLiteral] = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    return page_service.list_documents(db, Post, status=status, limit=limit, offset=offset)


@router.post("", response_model=PostOut, status_code=201)
def create_post(payload: PostCreate, db: Session = Depends(get_db), user: User = Depends(require_writer)):
    post = page_service.create_document(
        db, Post, payload, policy=settings.POST_PUBLISHED_AT_POLICY, created_by=user.id
    )
    db.commit()
    db.refresh(post)
    return post


@router.get("/by-slug/{slug}", response_model=PostOut)
def get_post_by_slug(slug: str, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    return page_service.get_document_by_slug(db, Post, slug)


@router.get("/{post_id}", response_model=PostOut)
def get_post(post_id: str, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    return page_service.get_document(db, Post, post_id)


@router.patch("/{post_id}", response_model=PostOut)
def update_post(post_id: str, patch: PostUpdate, db: Session = Depends(get_db), _: User = Depends(require_writer)):
    post = page_service.update_document(db, Post, post_id, patch, policy=settings.POST_PUBLISHED_AT_POLICY)
    db.commit()
    db.refresh(post)
    return post


@router.delete("/{post_id}")
def delete_post(post_id: str, db: Session = Depends(get_db), _: User = Depends(require_writer)):
    page_service.delete_document(db, Post, post_id)
    db.commit()
    return {"deleted": True}
