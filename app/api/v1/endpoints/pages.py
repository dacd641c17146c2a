# app/api/v1/endpoints/pages.py
from __future__ import annotations
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.deps.auth import get_current_user, require_writer
from app.models.auth import User
from app.models.pages import Page
from app.schemas.pages import PageCreate, PageOut, PageStatusLiteral, PageUpdate
from app.services import page_service

router = APIRouter(prefix="/pages", tags=["pages"])


@router.get("", response_model=List[PageOut])
def list_pages(
    status: Optional[PageStatusLiteral] = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    return page_service.list_documents(db, Page, status=status, limit=limit, offset=offset)


@router.post("", response_model=PageOut, status_code=201)
def create_page(payload: PageCreate, db: Session = Depends(get_db), user: User = Depends(require_writer)):
    page = page_service.create_document(db, Page, payload, policy=page_service.PAGE_POLICY, created_by=user.id)
    db.commit()
    db.refresh(page)
    return page


@router.get("/by-slug/{slug}", response_model=PageOut)
def get_page_by_slug(slug: str, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    return page_service.get_document_by_slug(db, Page, slug)


@router.get("/{page_id}", response_model=PageOut)
def get_page(page_id: str, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    return page_service.get_document(db, Page, page_id)


@router.patch("/{page_id}", response_model=PageOut)
def update_page(page_id: str, patch: PageUpdate, db: Session = Depends(get_db), _: User = Depends(require_writer)):
    page = page_service.update_document(db, Page, page_id, patch, policy=page_service.PAGE_POLICY)
    db.commit()
    db.refresh(page)
    return page


@router.delete("/{page_id}")
def delete_page(page_id: str, db: Session = Depends(get_db), _: User = Depends(require_writer)):
    page_service.delete_document(db, Page, page_id)
    db.commit()
    return {"deleted": True}
