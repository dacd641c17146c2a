# app/schemas/media.py
from __future__ import annotations
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UploadGrantRequest(BaseModel):
    # wire names follow the browser uploader
    model_config = ConfigDict(populate_by_name=True)

    filename: Optional[str] = None
    content_type: Optional[str] = Field(None, alias="contentType")


class UploadGrantOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    presigned_url: str = Field(..., alias="presignedUrl")
    public_url: str = Field(..., alias="publicUrl")
    filename: str


class MediaCreate(BaseModel):
    """Recorded by the client after the signed PUT succeeded."""
    filename: str = Field(..., min_length=1, max_length=255)
    url: str = Field(..., min_length=1, max_length=1024)
    mime_type: str = Field(..., max_length=128)
    size: int = Field(0, ge=0)


class MediaOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    filename: str
    url: str
    mime_type: str
    size: int
    uploaded_by: Optional[str] = None
    created_at: datetime
