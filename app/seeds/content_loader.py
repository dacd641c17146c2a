# app/seeds/content_loader.py
# Content model definitions kept as JSON files (app/seeds/models/*.json).
from __future__ import annotations
import json
import logging
import pathlib
from typing import Iterable, List, Tuple

from jsonschema import Draft202012Validator
from sqlalchemy.orm import Session

from app.models.content import ContentModel
from app.schemas.content import ContentModelCreate, ContentModelUpdate
from app.services.content_service import create_model, get_model_by_api_identifier, update_model
from app.services.field_types import FieldType
from app.services.field_validation import derive_api_identifier, validate_content_model

logger = logging.getLogger(__name__)

DEFAULT_MODELS_DIR = pathlib.Path(__file__).resolve().parent / "models"

# Shape of a model file. Field-level semantics are checked by the content service.
MODEL_FILE_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["name", "fields"],
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "api_identifier": {"type": "string"},
        "description": {"type": "string"},
        "icon": {"type": "string"},
        "fields": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "field_type"],
                "properties": {
                    "name": {"type": "string", "minLength": 1},
                    "api_identifier": {"type": "string"},
                    "field_type": {"enum": [t.value for t in FieldType]},
                    "required": {"type": "boolean"},
                },
            },
        },
    },
}


def _read_json(path: pathlib.Path) -> dict:
    if not path.exists():
        raise FileNotFoundError(f"Model file not found: {path.as_posix()}")
    txt = path.read_bytes().decode("utf-8-sig")  # tolera BOM/UTF-8
    data = json.loads(txt)
    if not isinstance(data, dict):
        raise ValueError(f"Model file {path.name} must contain a JSON object.")
    return data


def read_model_file(path: pathlib.Path) -> ContentModelCreate:
    data = _read_json(path)
    validator = Draft202012Validator(MODEL_FILE_SCHEMA)
    errors = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path])
    if errors:
        e = errors[0]
        where = ".".join(str(p) for p in e.path) or "$"
        raise ValueError(f"{path.name}: invalid model file at '{where}': {e.message}")
    return ContentModelCreate.model_validate(data)


def load_model_file(db: Session, path: pathlib.Path, *, update_existing: bool = False) -> Tuple[ContentModel, bool]:
    """
    Create the model described by `path`. An existing model with the same
    api_identifier is kept as is unless `update_existing`.
    No commit: the caller owns the transaction. Returns (model, created).
    """
    return _load_payload(db, read_model_file(path), update_existing=update_existing)


def _load_payload(db: Session, payload: ContentModelCreate, *, update_existing: bool) -> Tuple[ContentModel, bool]:
    api_identifier = payload.api_identifier or derive_api_identifier(payload.name)
    existing = get_model_by_api_identifier(db, api_identifier) if api_identifier else None
    if existing is None:
        return create_model(db, payload), True
    if update_existing:
        patch = ContentModelUpdate(
            name=payload.name,
            description=payload.description,
            icon=payload.icon,
            fields=payload.fields,
        )
        return update_model(db, existing.id, patch), False
    logger.info("model %s already exists, skipped", api_identifier)
    return existing, False


def discover_model_files(base_dir: pathlib.Path = DEFAULT_MODELS_DIR) -> List[pathlib.Path]:
    return sorted(p for p in base_dir.glob("*.json") if p.is_file())


def _check_batch(payloads: List[Tuple[pathlib.Path, ContentModelCreate]]) -> None:
    """Every file must be a valid model on its own and distinct from the rest of the batch."""
    for index, (path, payload) in enumerate(payloads):
        others = [p for i, (_, p) in enumerate(payloads) if i != index]
        errors = validate_content_model(payload, others)
        if errors:
            e = errors[0]
            raise ValueError(f"{path.name}: invalid model at '{e['field']}': {e['message']}")


def bulk_load_models(db: Session, files: Iterable[pathlib.Path], *, update_existing: bool = False) -> List[Tuple[str, bool]]:
    payloads = [(path, read_model_file(path)) for path in files]
    _check_batch(payloads)
    results: List[Tuple[str, bool]] = []
    for _, payload in payloads:
        model, created = _load_payload(db, payload, update_existing=update_existing)
        results.append((model.api_identifier, created))
    return results
