# app/services/resolution_service.py
# Reference & media resolution for export/display. Best-effort: whatever
# cannot be resolved is returned exactly as stored.
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.content import ContentEntry, ContentModel
from app.models.media import Media
from app.schemas.content import FieldDefinition
from app.services.field_types import FieldType, ItemFieldType
from app.services.field_validation import coerce_fields
from app.services.field_values import is_uuid

logger = logging.getLogger(__name__)


# -------- Media ids --------
def _media_id_of(value: Any) -> Optional[str]:
    """A stored media value that is (or wraps) a media record id rather than a URL."""
    if is_uuid(value):
        return value
    if isinstance(value, dict) and is_uuid(value.get("url")):
        return value["url"]
    return None


def _media_slots(fields: Sequence[FieldDefinition], data: Dict[str, Any]) -> List[Tuple[str, Optional[int], Optional[str]]]:
    """
    (field_key, item_index, item_key) for every media-typed value of an entry:
    top-level media fields and media columns of array items.
    """
    slots: List[Tuple[str, Optional[int], Optional[str]]] = []
    for field in fields:
        if field.field_type == FieldType.media:
            slots.append((field.api_identifier, None, None))
        elif field.field_type == FieldType.array:
            items = data.get(field.api_identifier)
            if not isinstance(items, list):
                continue
            media_cols = [f.api_identifier for f in field.item_fields if f.field_type == ItemFieldType.media]
            for index, item in enumerate(items):
                if isinstance(item, dict):
                    slots.extend((field.api_identifier, index, col) for col in media_cols)
    return slots


def _read_slot(data: Dict[str, Any], slot) -> Any:
    key, index, col = slot
    if index is None:
        return data.get(key)
    return data[key][index].get(col)


def _write_slot(data: Dict[str, Any], slot, value: Any) -> None:
    key, index, col = slot
    if index is None:
        data[key] = value
    else:
        data[key][index][col] = value


def collect_media_ids(fields: Iterable[Any], data: Dict[str, Any]) -> Set[str]:
    defs = coerce_fields(fields)
    ids: Set[str] = set()
    for slot in _media_slots(defs, data or {}):
        media_id = _media_id_of(_read_slot(data, slot))
        if media_id:
            ids.add(media_id)
    return ids


def lookup_media_urls(db: Session, ids: Iterable[str]) -> Dict[str, str]:
    """One query for all ids. Missing records are simply absent from the result."""
    wanted = sorted(set(ids))
    if not wanted:
        return {}
    rows = db.execute(select(Media.id, Media.url).where(Media.id.in_(wanted))).all()
    return {row.id: row.url for row in rows}


def _substitute(fields: Sequence[FieldDefinition], data: Dict[str, Any], urls: Dict[str, str]) -> Dict[str, Any]:
    out = _copy_fields(data)
    for slot in _media_slots(fields, out):
        value = _read_slot(out, slot)
        media_id = _media_id_of(value)
        if not media_id or media_id not in urls:
            continue
        if isinstance(value, dict):
            _write_slot(out, slot, {**value, "url": urls[media_id]})
        else:
            _write_slot(out, slot, urls[media_id])
    return out


def _copy_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for k, v in (data or {}).items():
        if isinstance(v, list):
            out[k] = [dict(i) if isinstance(i, dict) else i for i in v]
        elif isinstance(v, dict):
            out[k] = dict(v)
        else:
            out[k] = v
    return out


def _safe_lookup(db: Session, ids: Set[str]) -> Dict[str, str]:
    if not ids:
        return {}
    try:
        return lookup_media_urls(db, ids)
    except SQLAlchemyError:
        logger.exception("Media lookup failed for %d ids; leaving values unresolved", len(ids))
        return {}


def resolve_media_fields(db: Session, model: Any, data: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of `data` with media record ids replaced by their public URLs."""
    defs = coerce_fields(model.fields)
    urls = _safe_lookup(db, collect_media_ids(defs, data or {}))
    return _substitute(defs, data or {}, urls)


def resolve_media_fields_for_entries(db: Session, model: Any, datas: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    defs = coerce_fields(model.fields)
    ids: Set[str] = set()
    for data in datas:
        ids |= collect_media_ids(defs, data or {})
    urls = _safe_lookup(db, ids)
    missing = ids - set(urls)
    if missing:
        logger.warning("Unresolved media ids kept as-is: %s", ", ".join(sorted(missing)))
    return [_substitute(defs, data or {}, urls) for data in datas]


# -------- JSON export ("view as JSON") --------
def export_entry_json(db: Session, entry: ContentEntry, model: Optional[ContentModel]) -> Dict[str, Any]:
    fields = resolve_media_fields(db, model, entry.fields or {}) if model is not None else dict(entry.fields or {})
    return {
        "id": entry.id,
        "model": model.api_identifier if model is not None else None,
        "title": entry.title,
        "status": entry.status,
        "published_at": entry.published_at,
        "fields": fields,
        "created_at": entry.created_at,
        "updated_at": entry.updated_at,
    }


# -------- Reference picker --------
def reference_options(db: Session, reference_to: str) -> Dict[str, Any]:
    """
    Entries selectable for a reference field. An unknown target model is not an
    error: the picker gets an empty, labeled state.
    """
    target = db.scalar(select(ContentModel).where(ContentModel.api_identifier == reference_to).limit(1))
    empty_label = f"No {reference_to} entries found"
    if target is None:
        return {"model_api_identifier": reference_to, "found": False, "options": [], "empty_label": empty_label}
    rows = db.scalars(
        select(ContentEntry)
        .where(ContentEntry.content_model_id == target.id)
        .order_by(ContentEntry.created_at.desc())
    ).all()
    return {
        "model_api_identifier": reference_to,
        "found": True,
        "options": [{"id": e.id, "title": e.title} for e in rows],
        "empty_label": None if rows else empty_label,
    }
