# app/api/v1/endpoints/bootstrap.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.deps.auth import require_service_key
from app.schemas.admin import AdminSetupOut, AdminSetupRequest
from app.services.setup_service import provision_admin

router = APIRouter(prefix="/setup", tags=["setup"])


@router.post("/admin", response_model=AdminSetupOut, dependencies=[Depends(require_service_key)])
def setup_admin(payload: AdminSetupRequest, response: Response, db: Session = Depends(get_db)):
    result = provision_admin(
        db,
        email=payload.email,
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
    )
    response.status_code = 201 if result["created"] else 200
    return AdminSetupOut(**result)
