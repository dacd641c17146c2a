# app/schemas/admin.py
from __future__ import annotations
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.models.auth import UserRole

# ===== Admin bootstrap =====
class AdminSetupRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr
    password: str = Field(..., min_length=1)
    first_name: str = Field("Admin", alias="firstName")
    last_name: str = Field("User", alias="lastName")

class AdminSetupOut(BaseModel):
    success: bool = True
    created: bool
    message: str
    user_id: Optional[str] = Field(None, serialization_alias="userId")

# ===== Users =====
class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: EmailStr
    first_name: str = ""
    last_name: str = ""
    phone_number: str = ""
    role: UserRole
    created_at: datetime
