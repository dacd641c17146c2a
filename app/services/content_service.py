# app/services/content_service.py
# Business logic for content models and entries: schema authoring checks,
# uniqueness pre-write checks and validation before every entry persist.
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from app.core.errors import (
    DuplicateIdentifierError,
    FieldError,
    FieldValidationFailed,
    NotFoundError,
)
from app.models.content import ContentEntry, ContentModel
from app.schemas.content import (
    ContentModelCreate,
    ContentModelUpdate,
    EntryCreate,
    EntryUpdate,
    FieldDefinition,
)
from app.services.field_validation import (
    coerce_fields,
    derive_api_identifier,
    normalize_field_definition,
    validate_all_fields,
    validate_api_identifier,
    validate_field_set,
)
from app.services.form_service import seed_entry_fields
from app.services.publish_service import UNSET, PublishedAtPolicy, resolve_published_at

logger = logging.getLogger(__name__)


# -------- Content models --------
def list_models(db: Session) -> Sequence[ContentModel]:
    return db.scalars(select(ContentModel).order_by(ContentModel.created_at.desc())).all()


def get_model(db: Session, model_id: str) -> ContentModel:
    model = db.get(ContentModel, model_id)
    if not model:
        raise NotFoundError("Content model not found")
    return model


def get_model_by_api_identifier(db: Session, api_identifier: str) -> Optional[ContentModel]:
    """Exact, case-sensitive match."""
    return db.scalar(select(ContentModel).where(ContentModel.api_identifier == api_identifier).limit(1))


def _ensure_model_identifier(db: Session, api_identifier: str, *, exclude_id: Optional[str] = None) -> None:
    error = validate_api_identifier(api_identifier)
    if error:
        raise FieldValidationFailed([{"field": "api_identifier", "message": error}], message=error)
    stmt = select(ContentModel.id).where(ContentModel.api_identifier == api_identifier)
    if exclude_id:
        stmt = stmt.where(ContentModel.id != exclude_id)
    if db.scalar(stmt.limit(1)):
        raise DuplicateIdentifierError("api_identifier", "A content model with this API identifier already exists")


def _prepare_fields(fields: Sequence[FieldDefinition]) -> List[Dict[str, Any]]:
    normalized = [normalize_field_definition(f) for f in fields]
    errors = validate_field_set(normalized)
    if errors:
        raise FieldValidationFailed(errors, message="Invalid field definitions")
    return [f.to_storage() for f in normalized]


def _match_stored_ids(existing: Sequence[FieldDefinition], incoming: Sequence[FieldDefinition]) -> List[FieldDefinition]:
    """
    Pair incoming fields with stored ones by id, falling back to api_identifier,
    and carry the stored id over. Only unmatched fields keep a fresh id.
    """
    by_id = {f.id: f for f in existing}
    by_key = {f.api_identifier: f for f in existing}
    claimed = {f.id for f in incoming if f.id in by_id}
    matched: List[FieldDefinition] = []
    for field in incoming:
        if field.id not in by_id:
            stored = by_key.get(field.api_identifier or derive_api_identifier(field.name))
            if stored is not None and stored.id not in claimed:
                field = field.model_copy(update={"id": stored.id})
                claimed.add(stored.id)
        matched.append(field)
    return matched


def _ensure_types_unchanged(existing: Sequence[FieldDefinition], incoming: Sequence[FieldDefinition]) -> None:
    by_id = {f.id: f for f in existing}
    errors: List[FieldError] = []
    for index, field in enumerate(incoming):
        before = by_id.get(field.id)
        if before is not None and before.field_type != field.field_type:
            errors.append({
                "field": f"fields.{index}.field_type",
                "message": f"Field type of '{before.name}' cannot be changed",
            })
    if errors:
        raise FieldValidationFailed(errors, message="Field types are immutable")


def create_model(db: Session, payload: ContentModelCreate, *, created_by: Optional[str] = None) -> ContentModel:
    api_identifier = payload.api_identifier or derive_api_identifier(payload.name)
    _ensure_model_identifier(db, api_identifier)
    model = ContentModel(
        name=payload.name.strip(),
        api_identifier=api_identifier,
        description=payload.description or "",
        icon=payload.icon or "",
        fields=_prepare_fields(payload.fields),
        created_by=created_by,
    )
    db.add(model)
    db.flush()
    logger.info("content model created: %s (%s)", model.api_identifier, model.id)
    return model


def update_model(db: Session, model_id: str, patch: ContentModelUpdate) -> ContentModel:
    model = get_model(db, model_id)

    if patch.api_identifier is not None and patch.api_identifier != model.api_identifier:
        # Renaming is a breaking change for consumers; allowed, but never implicit.
        _ensure_model_identifier(db, patch.api_identifier, exclude_id=model.id)
        model.api_identifier = patch.api_identifier
    if patch.name is not None:
        model.name = patch.name.strip()
    if patch.description is not None:
        model.description = patch.description
    if patch.icon is not None:
        model.icon = patch.icon
    if patch.fields is not None:
        stored = coerce_fields(model.fields)
        incoming = _match_stored_ids(stored, patch.fields)
        _ensure_types_unchanged(stored, incoming)
        model.fields = _prepare_fields(incoming)

    db.flush()
    return model


def delete_model(db: Session, model_id: str) -> int:
    """
    Delete the model only. Its entries stay behind (orphaned); removing them is
    the caller's job. Returns how many entries were orphaned.
    """
    model = get_model(db, model_id)
    orphaned = db.scalar(
        select(func.count()).select_from(ContentEntry).where(ContentEntry.content_model_id == model.id)
    ) or 0
    db.delete(model)
    db.flush()
    if orphaned:
        logger.warning("content model %s deleted, %d entries orphaned", model_id, orphaned)
    return int(orphaned)


# -------- Field builder --------
def add_field(db: Session, model_id: str, field: FieldDefinition) -> ContentModel:
    model = get_model(db, model_id)
    fields = coerce_fields(model.fields) + [field]
    model.fields = _prepare_fields(fields)
    db.flush()
    return model


def replace_field(db: Session, model_id: str, field_id: str, field: FieldDefinition) -> ContentModel:
    model = get_model(db, model_id)
    fields = coerce_fields(model.fields)
    index = next((i for i, f in enumerate(fields) if f.id == field_id), None)
    if index is None:
        raise NotFoundError("Field not found")
    incoming = field.model_copy(update={"id": field_id})
    if not incoming.api_identifier:
        # once set, the identifier is user-owned: never re-derive it from a new name
        incoming.api_identifier = fields[index].api_identifier
    _ensure_types_unchanged(fields, [incoming])
    fields[index] = incoming
    model.fields = _prepare_fields(fields)
    db.flush()
    return model


def remove_field(db: Session, model_id: str, field_id: str) -> ContentModel:
    model = get_model(db, model_id)
    fields = coerce_fields(model.fields)
    kept = [f for f in fields if f.id != field_id]
    if len(kept) == len(fields):
        raise NotFoundError("Field not found")
    # stored entry values for the removed key are left untouched
    model.fields = [f.to_storage() for f in kept]
    db.flush()
    return model


def reorder_fields(db: Session, model_id: str, order: Sequence[str]) -> ContentModel:
    model = get_model(db, model_id)
    fields = coerce_fields(model.fields)
    by_id = {f.id: f for f in fields}
    if len(order) != len(fields) or set(order) != set(by_id):
        raise ValueError("order must list every field id exactly once")
    model.fields = [by_id[fid].to_storage() for fid in order]
    db.flush()
    return model


# -------- Entries --------
def _validate_entry(model: ContentModel, title: str, fields: Dict[str, Any]) -> None:
    errors: List[FieldError] = []
    if not (title or "").strip():
        errors.append({"field": "title", "message": "Title is required"})
    errors.extend(validate_all_fields(model, fields))
    if errors:
        raise FieldValidationFailed(errors)


def new_entry_fields(model: ContentModel) -> Dict[str, Any]:
    return seed_entry_fields(model.fields)


def create_entry(
    db: Session,
    payload: EntryCreate,
    *,
    created_by: Optional[str] = None,
    policy: PublishedAtPolicy | str = PublishedAtPolicy.stamp_and_clear,
) -> ContentEntry:
    model = get_model(db, payload.content_model_id)
    fields = dict(payload.fields) if payload.fields is not None else new_entry_fields(model)
    _validate_entry(model, payload.title, fields)

    requested = payload.published_at if "published_at" in payload.model_fields_set else UNSET
    entry = ContentEntry(
        content_model_id=model.id,
        title=payload.title.strip(),
        fields=fields,
        status=payload.status,
        published_at=resolve_published_at(policy, new_status=payload.status, requested=requested),
        created_by=created_by,
    )
    db.add(entry)
    db.flush()
    return entry


def get_entry(db: Session, entry_id: str) -> ContentEntry:
    entry = db.get(ContentEntry, entry_id)
    if not entry:
        raise NotFoundError("Entry not found")
    return entry


def update_entry(
    db: Session,
    entry_id: str,
    patch: EntryUpdate,
    *,
    policy: PublishedAtPolicy | str = PublishedAtPolicy.stamp_and_clear,
) -> ContentEntry:
    entry = get_entry(db, entry_id)
    model = get_model(db, entry.content_model_id)

    title = patch.title if patch.title is not None else entry.title
    fields = dict(patch.fields) if patch.fields is not None else dict(entry.fields or {})
    status = patch.status or entry.status
    _validate_entry(model, title, fields)

    requested = patch.published_at if "published_at" in patch.model_fields_set else UNSET
    entry.published_at = resolve_published_at(
        policy,
        new_status=status,
        previous_status=entry.status,
        previous_published_at=entry.published_at,
        requested=requested,
    )
    entry.title = title.strip()
    entry.fields = fields
    entry.status = status
    db.flush()
    return entry


def set_entry_status(
    db: Session,
    entry_id: str,
    status: str,
    *,
    policy: PublishedAtPolicy | str = PublishedAtPolicy.stamp_and_clear,
) -> ContentEntry:
    return update_entry(db, entry_id, EntryUpdate(status=status), policy=policy)


def delete_entry(db: Session, entry_id: str) -> None:
    entry = get_entry(db, entry_id)
    db.delete(entry)
    db.flush()


def list_entries(
    db: Session,
    *,
    model_id: Optional[str] = None,
    status: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
) -> Sequence[ContentEntry]:
    stmt = select(ContentEntry)
    if model_id:
        stmt = stmt.where(ContentEntry.content_model_id == model_id)
    if status:
        stmt = stmt.where(ContentEntry.status == status)
    stmt = stmt.order_by(ContentEntry.created_at.desc()).limit(limit).offset(offset)
    return db.scalars(stmt).all()


def validate_entry_fields(model: ContentModel, fields: Dict[str, Any]) -> List[FieldError]:
    """Dry run used while typing: no title check, no persistence."""
    return validate_all_fields(model, fields)
