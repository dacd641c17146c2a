# =============================================================================
# Content Model Endpoints (schema authoring, field builder, form contract)
# app/api/v1/endpoints/content_models.py
# =============================================================================
from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.deps.auth import get_current_user, require_writer
from app.models.auth import User
from app.schemas.content import (
    ContentModelCreate, ContentModelUpdate, ContentModelOut, ContentModelSchemaOut,
    FieldDefinition, FieldReorder, ValidateFieldsIn, ValidationResult,
)
from app.services import content_service
from app.services.field_types import list_field_types
from app.services.field_validation import coerce_fields, derive_api_identifier, validate_api_identifier
from app.services.form_service import build_form
from app.services.schema_export_service import build_entry_json_schema

router = APIRouter(prefix="/content", tags=["content-models"])


# -------- Registry & helpers --------
@router.get("/field-types")
def get_field_types(_: User = Depends(get_current_user)) -> List[Dict[str, Any]]:
    return list_field_types()


@router.get("/api-identifier/check")
def check_api_identifier(
    value: str = Query("", description="Candidate identifier"),
    name: Optional[str] = Query(None, description="Display name to derive from when value is empty"),
    _: User = Depends(get_current_user),
):
    candidate = value or derive_api_identifier(name or "")
    error = validate_api_identifier(candidate)
    return {"value": candidate, "valid": error is None, "error": error}


# -------- Models --------
@router.get("/models", response_model=List[ContentModelOut])
def list_models(db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    return content_service.list_models(db)


@router.post("/models", response_model=ContentModelOut, status_code=201)
def create_model(
    payload: ContentModelCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_writer),
):
    model = content_service.create_model(db, payload, created_by=user.id)
    db.commit()
    db.refresh(model)
    return model


@router.get("/models/{model_id}", response_model=ContentModelOut)
def get_model(model_id: str, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    return content_service.get_model(db, model_id)


@router.patch("/models/{model_id}", response_model=ContentModelOut)
def update_model(
    model_id: str,
    patch: ContentModelUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(require_writer),
):
    model = content_service.update_model(db, model_id, patch)
    db.commit()
    db.refresh(model)
    return model


@router.delete("/models/{model_id}")
def delete_model(model_id: str, db: Session = Depends(get_db), _: User = Depends(require_writer)):
    orphaned = content_service.delete_model(db, model_id)
    db.commit()
    return {"deleted": True, "orphaned_entries": orphaned}


@router.get("/models/{model_id}/schema", response_model=ContentModelSchemaOut)
def export_model_schema(model_id: str, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    model = content_service.get_model(db, model_id)
    return ContentModelSchemaOut(
        id=model.id,
        name=model.name,
        api_identifier=model.api_identifier,
        description=model.description or "",
        fields=coerce_fields(model.fields),
    )


@router.get("/models/{model_id}/json-schema")
def export_entry_json_schema(model_id: str, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    return build_entry_json_schema(content_service.get_model(db, model_id))


@router.get("/models/{model_id}/form")
def get_form(
    model_id: str,
    entry_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    model = content_service.get_model(db, model_id)
    values = None
    if entry_id:
        entry = content_service.get_entry(db, entry_id)
        if entry.content_model_id != model.id:
            raise HTTPException(status_code=400, detail="Entry does not belong to this model")
        values = entry.fields or {}
    return build_form(model, values)


@router.post("/models/{model_id}/validate", response_model=ValidationResult)
def validate_fields(
    model_id: str,
    payload: ValidateFieldsIn,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    model = content_service.get_model(db, model_id)
    errors = content_service.validate_entry_fields(model, payload.fields)
    return ValidationResult(valid=not errors, errors=errors)


# -------- Field builder --------
@router.post("/models/{model_id}/fields", response_model=ContentModelOut, status_code=201)
def add_field(
    model_id: str,
    field: FieldDefinition,
    db: Session = Depends(get_db),
    _: User = Depends(require_writer),
):
    model = content_service.add_field(db, model_id, field)
    db.commit()
    db.refresh(model)
    return model


@router.put("/models/{model_id}/fields/order", response_model=ContentModelOut)
def reorder_fields(
    model_id: str,
    payload: FieldReorder,
    db: Session = Depends(get_db),
    _: User = Depends(require_writer),
):
    try:
        model = content_service.reorder_fields(db, model_id, payload.order)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    db.commit()
    db.refresh(model)
    return model


@router.put("/models/{model_id}/fields/{field_id}", response_model=ContentModelOut)
def replace_field(
    model_id: str,
    field_id: str,
    field: FieldDefinition,
    db: Session = Depends(get_db),
    _: User = Depends(require_writer),
):
    model = content_service.replace_field(db, model_id, field_id, field)
    db.commit()
    db.refresh(model)
    return model


@router.delete("/models/{model_id}/fields/{field_id}", response_model=ContentModelOut)
def remove_field(
    model_id: str,
    field_id: str,
    db: Session = Depends(get_db),
    _: User = Depends(require_writer),
):
    model = content_service.remove_field(db, model_id, field_id)
    db.commit()
    db.refresh(model)
    return model
