# app/api/v1/endpoints/users.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from app.deps.auth import get_current_user
from app.models.auth import User
from app.schemas.admin import UserOut

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)):
    return current_user
