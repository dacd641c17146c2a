# =============================================================================
# Content Entry Endpoints (CRUD, status transitions, JSON export, references)
# app/api/v1/endpoints/content_entries.py
# =============================================================================
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.settings import settings
from app.db.session import get_db
from app.deps.auth import get_current_user, require_writer
from app.models.auth import User
from app.models.content import ContentModel
from app.schemas.content import EntryCreate, EntryJsonOut, EntryOut, EntryStatus, EntryUpdate, ReferenceOptionsOut
from app.services import content_service
from app.services.resolution_service import export_entry_json, reference_options
from app.utils.payload_guard import enforce_entry_fields_size

router = APIRouter(prefix="/content", tags=["content-entries"])


def _policy() -> str:
    return settings.PUBLISHED_AT_POLICY


@router.get("/entries", response_model=List[EntryOut])
def list_entries(
    model_id: Optional[str] = Query(None),
    status: Optional[EntryStatus] = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    return content_service.list_entries(db, model_id=model_id, status=status, limit=limit, offset=offset)


@router.post("/entries", response_model=EntryOut, status_code=201)
def create_entry(
    payload: EntryCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_writer),
):
    enforce_entry_fields_size(payload.fields)
    entry = content_service.create_entry(db, payload, created_by=user.id, policy=_policy())
    db.commit()
    db.refresh(entry)
    return entry


@router.get("/entries/{entry_id}", response_model=EntryOut)
def get_entry(entry_id: str, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    return content_service.get_entry(db, entry_id)


@router.patch("/entries/{entry_id}", response_model=EntryOut)
def update_entry(
    entry_id: str,
    patch: EntryUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(require_writer),
):
    enforce_entry_fields_size(patch.fields)
    entry = content_service.update_entry(db, entry_id, patch, policy=_policy())
    db.commit()
    db.refresh(entry)
    return entry


@router.delete("/entries/{entry_id}")
def delete_entry(entry_id: str, db: Session = Depends(get_db), _: User = Depends(require_writer)):
    content_service.delete_entry(db, entry_id)
    db.commit()
    return {"deleted": True}


def _transition(db: Session, entry_id: str, status: str):
    entry = content_service.set_entry_status(db, entry_id, status, policy=_policy())
    db.commit()
    db.refresh(entry)
    return entry


@router.post("/entries/{entry_id}/publish", response_model=EntryOut)
def publish_entry(entry_id: str, db: Session = Depends(get_db), _: User = Depends(require_writer)):
    return _transition(db, entry_id, "published")


@router.post("/entries/{entry_id}/unpublish", response_model=EntryOut)
def unpublish_entry(entry_id: str, db: Session = Depends(get_db), _: User = Depends(require_writer)):
    return _transition(db, entry_id, "draft")


@router.post("/entries/{entry_id}/archive", response_model=EntryOut)
def archive_entry(entry_id: str, db: Session = Depends(get_db), _: User = Depends(require_writer)):
    return _transition(db, entry_id, "archived")


@router.get("/entries/{entry_id}/json", response_model=EntryJsonOut)
def view_entry_json(entry_id: str, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    entry = content_service.get_entry(db, entry_id)
    # orphaned entries export their stored values unresolved
    model = db.get(ContentModel, entry.content_model_id)
    return export_entry_json(db, entry, model)


@router.get("/references/{api_identifier}/options", response_model=ReferenceOptionsOut)
def get_reference_options(api_identifier: str, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    return reference_options(db, api_identifier)
