# app/api/v1/auth.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, EmailStr
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.security.jwt import create_access_token
from app.services.passwords import verify_password
from app.services.setup_service import find_identity

router = APIRouter(tags=["auth"])  # el prefix lo pone api/v1/router.py


class LoginIn(BaseModel):
    email: EmailStr
    password: str

class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"


@router.post("/login", response_model=TokenOut)
def login(payload: LoginIn, db: Session = Depends(get_db)):
    identity = find_identity(db, payload.email)
    if not identity or not verify_password(payload.password, identity.hashed_password or ""):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    if not identity.is_active:
        raise HTTPException(status_code=403, detail="User inactive")
    return TokenOut(access_token=create_access_token(identity.id, {"email": identity.email}))
