# app/schemas/pages.py
from __future__ import annotations
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

PageStatusLiteral = Literal["draft", "published"]


# ===== Pages =====
class PageBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., min_length=1, max_length=255)
    content: str = ""
    meta_description: str = Field("", max_length=512)
    meta_keywords: str = Field("", max_length=512)
    status: PageStatusLiteral = "draft"

class PageCreate(PageBase):
    pass

class PageUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = None
    meta_description: Optional[str] = Field(None, max_length=512)
    meta_keywords: Optional[str] = Field(None, max_length=512)
    status: Optional[PageStatusLiteral] = None

class PageOut(PageBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    published_at: Optional[datetime] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime


# ===== Posts =====
class PostCreate(PageBase):
    excerpt: str = Field("", max_length=1024)
    featured_image: str = Field("", max_length=1024)
    # honored only under the "manual" published_at policy
    published_at: Optional[datetime] = None

class PostUpdate(PageUpdate):
    excerpt: Optional[str] = Field(None, max_length=1024)
    featured_image: Optional[str] = Field(None, max_length=1024)
    published_at: Optional[datetime] = None

class PostOut(PageOut):
    excerpt: str = ""
    featured_image: str = ""
