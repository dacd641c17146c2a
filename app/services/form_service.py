# app/services/form_service.py
# Dynamic form contract: FieldDefinition + value -> control descriptor, control
# value -> normalized stored value, and the repeatable-group (array) editor.
from __future__ import annotations

import math
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Set, TypeVar

from pydantic import ValidationError

from app.schemas.content import ArrayItemField, FieldDefinition
from app.services.field_types import (
    SUMMARY_ITEM_TYPES,
    FieldType,
    default_value_for,
    ensure_exhaustive,
    get_spec,
)
from app.services.field_values import (
    BUTTON_TARGETS,
    is_valid_media_url,
    normalize_button_value,
    normalize_media_value,
)
from app.services.field_validation import coerce_fields

T = TypeVar("T")

SUMMARY_MAX_CHARS = 60
SUMMARY_FALLBACK = "Item"
MEDIA_SOURCES = ["library", "upload", "url"]


# -------------------- Seeding --------------------
def seed_entry_fields(fields: Iterable[Any]) -> Dict[str, Any]:
    """Initial `fields` map for a brand-new entry: the field's default_value, else the type default."""
    seeded: Dict[str, Any] = {}
    for field in coerce_fields(fields):
        if field.default_value is not None:
            seeded[field.api_identifier] = field.default_value
        else:
            seeded[field.api_identifier] = default_value_for(field.field_type)
    return seeded


def empty_array_item(item_fields: Sequence[ArrayItemField]) -> Dict[str, Any]:
    return {f.api_identifier: default_value_for(f.field_type) for f in item_fields}


# -------------------- Controls --------------------
def _base_control(field: FieldDefinition) -> Dict[str, Any]:
    node: Dict[str, Any] = {
        "key": field.api_identifier,
        "label": field.name,
        "type": field.field_type.value,
        "widget": get_spec(field.field_type).widget,
        "required": field.required,
    }
    if field.help_text:
        node["help"] = field.help_text
    if field.options and field.options.placeholder:
        node["placeholder"] = field.options.placeholder
    return node


def _text_control(field: FieldDefinition, value: Any) -> Dict[str, Any]:
    node = _base_control(field)
    node["value"] = value if isinstance(value, str) else ""
    if field.field_type in (FieldType.long_text, FieldType.rich_text):
        node["rows"] = (field.options.rows if field.options and field.options.rows else 6)
    if field.validation:
        for k in ("min_length", "max_length", "pattern"):
            v = getattr(field.validation, k)
            if v is not None:
                node[k] = v
    return node


def _number_control(field: FieldDefinition, value: Any) -> Dict[str, Any]:
    node = _base_control(field)
    node["value"] = value if _is_number(value) else None
    if field.validation:
        if field.validation.min_value is not None:
            node["min"] = field.validation.min_value
        if field.validation.max_value is not None:
            node["max"] = field.validation.max_value
    return node


def _boolean_control(field: FieldDefinition, value: Any) -> Dict[str, Any]:
    node = _base_control(field)
    node["value"] = bool(value)
    node["caption"] = field.help_text or "Enable this option"
    return node


def _date_control(field: FieldDefinition, value: Any) -> Dict[str, Any]:
    node = _base_control(field)
    node["value"] = value if isinstance(value, str) else ""
    return node


def _media_control(field: FieldDefinition, value: Any) -> Dict[str, Any]:
    node = _base_control(field)
    node["value"] = normalize_media_value(value)
    node["sources"] = list(MEDIA_SOURCES)
    return node


def _reference_control(field: FieldDefinition, value: Any) -> Dict[str, Any]:
    node = _base_control(field)
    node["value"] = value or None
    node["reference_to"] = field.reference_to
    node["options_url"] = f"/content/references/{field.reference_to}/options"
    return node


def _button_control(field: FieldDefinition, value: Any) -> Dict[str, Any]:
    node = _base_control(field)
    node["value"] = normalize_button_value(value)
    node["targets"] = list(BUTTON_TARGETS)
    return node


def _array_control(field: FieldDefinition, value: Any) -> Dict[str, Any]:
    node = _base_control(field)
    item_fields = field.item_fields
    items = value if isinstance(value, list) else []
    node["item_fields"] = [f.model_dump(mode="json") for f in item_fields]
    if not item_fields:
        node["empty_label"] = "No item fields configured for this array."
    elif not items:
        node["empty_label"] = "No items yet"
    node["items"] = [_array_row(item_fields, index, item) for index, item in enumerate(items)]
    return node


def _array_row(item_fields: Sequence[ArrayItemField], index: int, item: Any) -> Dict[str, Any]:
    if item is not None and not isinstance(item, dict):
        return {"index": index, "widget": "error", "error": "Unsupported item value", "value": item}
    return {
        "index": index,
        "summary": item_summary(item_fields, item),
        "controls": [build_item_control(f, (item or {}).get(f.api_identifier)) for f in item_fields],
    }


_CONTROL_BUILDERS: Dict[FieldType, Callable[[FieldDefinition, Any], Dict[str, Any]]] = {
    FieldType.short_text: _text_control,
    FieldType.long_text: _text_control,
    FieldType.rich_text: _text_control,
    FieldType.number: _number_control,
    FieldType.boolean: _boolean_control,
    FieldType.date: _date_control,
    FieldType.media: _media_control,
    FieldType.reference: _reference_control,
    FieldType.button: _button_control,
    FieldType.array: _array_control,
}
ensure_exhaustive(_CONTROL_BUILDERS, "_CONTROL_BUILDERS")


def _error_control(raw: Any, message: str) -> Dict[str, Any]:
    key = raw.get("api_identifier") if isinstance(raw, dict) else None
    label = raw.get("name") if isinstance(raw, dict) else None
    return {"key": key, "label": label, "widget": "error", "error": message}


def build_control(field: FieldDefinition | Dict[str, Any], value: Any) -> Dict[str, Any]:
    """
    Control descriptor for one field. Stored definitions with an unknown
    field_type come back as an error marker instead of raising.
    """
    if not isinstance(field, FieldDefinition):
        try:
            field = FieldDefinition.model_validate(field)
        except ValidationError:
            field_type = field.get("field_type") if isinstance(field, dict) else None
            return _error_control(field, f"Unsupported field type: {field_type}")
    return _CONTROL_BUILDERS[field.field_type](field, value)


def build_item_control(item_field: ArrayItemField, value: Any) -> Dict[str, Any]:
    as_field = FieldDefinition(
        id=f"item_{item_field.api_identifier}",
        name=item_field.name,
        api_identifier=item_field.api_identifier,
        field_type=item_field.field_type.as_field_type(),
        required=item_field.required,
        options={"placeholder": item_field.name},
    )
    return build_control(as_field, value)


def build_form(model: Any, values: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Whole-form contract for a model; `values` None means "new entry" (seeded defaults)."""
    raw_fields = list(model.fields or [])
    if values is None:
        parsed: List[FieldDefinition] = []
        for raw in raw_fields:
            try:
                parsed.append(raw if isinstance(raw, FieldDefinition) else FieldDefinition.model_validate(raw))
            except ValidationError:
                continue
        values = seed_entry_fields(parsed)
    controls = []
    for raw in raw_fields:
        key = raw.api_identifier if isinstance(raw, FieldDefinition) else (raw or {}).get("api_identifier")
        controls.append(build_control(raw, values.get(key) if key else None))
    return {
        "model_id": model.id,
        "api_identifier": model.api_identifier,
        "name": model.name,
        "fields": controls,
    }


# -------------------- Control -> value --------------------
def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _coerce_text(raw: Any) -> Any:
    return "" if raw is None else str(raw)


def _coerce_number(raw: Any) -> Any:
    if raw is None or raw == "":
        return None
    if _is_number(raw):
        return None if isinstance(raw, float) and not math.isfinite(raw) else raw
    try:
        as_float = float(str(raw).strip())
    except ValueError:
        return None
    if not math.isfinite(as_float):
        return None
    return int(as_float) if as_float.is_integer() and "." not in str(raw) else as_float


def _coerce_boolean(raw: Any) -> bool:
    if isinstance(raw, str):
        return raw.strip().lower() in ("1", "true", "on", "yes")
    return bool(raw)


def _coerce_media(raw: Any) -> Any:
    if isinstance(raw, dict):
        normalized = normalize_media_value(raw)
        return normalized if normalized and normalized["url"] else ""
    return raw if isinstance(raw, str) else ""


def _coerce_reference(raw: Any) -> Any:
    return raw or None


def _coerce_array(raw: Any) -> Any:
    return list(raw) if isinstance(raw, list) else []


_COERCERS: Dict[FieldType, Callable[[Any], Any]] = {
    FieldType.short_text: _coerce_text,
    FieldType.long_text: _coerce_text,
    FieldType.rich_text: _coerce_text,
    FieldType.number: _coerce_number,
    FieldType.boolean: _coerce_boolean,
    FieldType.date: _coerce_text,
    FieldType.media: _coerce_media,
    FieldType.reference: _coerce_reference,
    FieldType.button: normalize_button_value,
    FieldType.array: _coerce_array,
}
ensure_exhaustive(_COERCERS, "_COERCERS")


def coerce_control_value(field_type: FieldType | str, raw: Any) -> Any:
    """Normalize what a control emits into the stored value for that field type."""
    return _COERCERS[FieldType(field_type)](raw)


def accept_media_url(url: str) -> str:
    """Pasted media URL: absolute, or rooted at '/'."""
    candidate = (url or "").strip()
    if not candidate or not is_valid_media_url(candidate):
        raise ValueError("Enter an absolute URL or a path starting with '/'")
    return candidate


# -------------------- Arrays --------------------
def move_item(seq: Sequence[T], src: int, dst: int) -> List[T]:
    """Stable reorder: remove at src, re-insert at dst; others keep their relative order."""
    n = len(seq)
    if not (0 <= src < n) or not (0 <= dst < n):
        raise IndexError("move_item index out of range")
    out = list(seq)
    out.insert(dst, out.pop(src))
    return out


def item_summary(item_fields: Sequence[ArrayItemField], item: Any) -> str:
    first_text = next((f for f in item_fields if f.field_type in SUMMARY_ITEM_TYPES), None)
    if first_text is not None and isinstance(item, dict):
        val = item.get(first_text.api_identifier)
        if val and isinstance(val, str):
            return val[:SUMMARY_MAX_CHARS] + ("..." if len(val) > SUMMARY_MAX_CHARS else "")
    return SUMMARY_FALLBACK


class ArrayEditor:
    """
    Editing state of one array field: the items plus which rows are collapsed.
    Collapse state is a set of row indices; deletes shift it down and moves
    re-key it so each collapsed row stays collapsed at its new index.
    """

    def __init__(
        self,
        item_fields: Sequence[ArrayItemField],
        items: Optional[Sequence[Dict[str, Any]]] = None,
        collapsed: Optional[Iterable[int]] = None,
    ):
        self.item_fields = list(item_fields)
        self.items: List[Dict[str, Any]] = [dict(i) for i in (items or [])]
        self.collapsed: Set[int] = set(collapsed or ())

    @classmethod
    def for_field(cls, field: FieldDefinition, value: Any, collapsed: Optional[Iterable[int]] = None) -> "ArrayEditor":
        if field.field_type != FieldType.array:
            raise ValueError(f"{field.api_identifier} is not an array field")
        return cls(field.item_fields, value if isinstance(value, list) else [], collapsed)

    @property
    def value(self) -> List[Dict[str, Any]]:
        return [dict(i) for i in self.items]

    def add_item(self) -> int:
        self.items.append(empty_array_item(self.item_fields))
        return len(self.items) - 1

    def remove_item(self, index: int) -> None:
        self._check(index)
        del self.items[index]
        self.collapsed = {i if i < index else i - 1 for i in self.collapsed if i != index}

    def move_item(self, src: int, dst: int) -> None:
        if src == dst:
            self._check(src)
            return
        order = move_item(list(range(len(self.items))), src, dst)
        self.items = [self.items[old] for old in order]
        self.collapsed = {new for new, old in enumerate(order) if old in self.collapsed}

    def update_item(self, index: int, key: str, value: Any) -> None:
        self._check(index)
        item_field = next((f for f in self.item_fields if f.api_identifier == key), None)
        if item_field is not None:
            value = coerce_control_value(item_field.field_type.as_field_type(), value)
        self.items[index] = {**self.items[index], key: value}

    def toggle_collapse(self, index: int) -> bool:
        self._check(index)
        if index in self.collapsed:
            self.collapsed.discard(index)
            return False
        self.collapsed.add(index)
        return True

    def summaries(self) -> List[str]:
        return [item_summary(self.item_fields, item) for item in self.items]

    def _check(self, index: int) -> None:
        if not 0 <= index < len(self.items):
            raise IndexError(f"No item at index {index}")
