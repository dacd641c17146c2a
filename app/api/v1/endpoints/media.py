# app/api/v1/endpoints/media.py
from __future__ import annotations
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.deps.auth import get_current_user, require_writer
from app.models.auth import User
from app.schemas.media import MediaCreate, MediaOut
from app.services import media_service
from app.services.firebase_storage import upload_file_to_firebase
from app.services.upload_service import SNIFF_BYTES, generate_unique_filename, object_key_for, validate_upload_file

router = APIRouter(prefix="/media", tags=["media"])


@router.get("", response_model=List[MediaOut])
def list_media(
    kind: Optional[str] = Query(None, description="MIME prefix, e.g. 'image'"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    return media_service.list_media(db, kind=kind, limit=limit, offset=offset)


@router.post("", response_model=MediaOut, status_code=201)
def record_media(
    payload: MediaCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_writer),
):
    try:
        media = media_service.record_media(db, payload, uploaded_by=user.id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    db.commit()
    db.refresh(media)
    return media


@router.post("/upload", response_model=MediaOut, status_code=201)
def upload_media(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    user: User = Depends(require_writer),
):
    """Server-side upload: same checks as the browser flow, then the record."""
    original = file.filename or ""
    content_type = file.content_type or ""
    head = file.file.read(SNIFF_BYTES)
    file.file.seek(0, 2)
    size = file.file.tell()
    file.file.seek(0)
    validate_upload_file(filename=original, content_type=content_type, size=size, head=head)

    stored_name = generate_unique_filename(original)
    url = upload_file_to_firebase(file.file, content_type, object_key_for(stored_name))
    media = media_service.record_media(
        db,
        MediaCreate(filename=stored_name, url=url, mime_type=content_type, size=size),
        uploaded_by=user.id,
    )
    db.commit()
    db.refresh(media)
    return media


@router.get("/{media_id}", response_model=MediaOut)
def get_media(media_id: str, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    return media_service.get_media(db, media_id)


@router.delete("/{media_id}")
def delete_media(media_id: str, db: Session = Depends(get_db), _: User = Depends(require_writer)):
    media_service.delete_media(db, media_id)
    db.commit()
    return {"deleted": True}
