# app/api/v1/endpoints/uploads.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from app.deps.auth import get_current_user_id
from app.schemas.media import UploadGrantOut, UploadGrantRequest
from app.services.firebase_storage import get_upload_signer
from app.services.upload_service import UploadSigner, issue_upload_grant

router = APIRouter(prefix="/uploads", tags=["uploads"])


@router.post("/presign", response_model=UploadGrantOut)
def presign_upload(
    payload: UploadGrantRequest,
    _: str = Depends(get_current_user_id),
    signer: UploadSigner = Depends(get_upload_signer),
):
    """
    Short-lived PUT grant for exactly `media/<filename>`. The browser uploads
    directly to the bucket, then records the object via POST /media.
    """
    return issue_upload_grant(signer, filename=payload.filename, content_type=payload.content_type)
