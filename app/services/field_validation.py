# app/services/field_validation.py
# Schema validator: field values against FieldDefinitions, plus authoring
# checks for identifiers and field definitions. Pure functions, no I/O.
from __future__ import annotations

import math
import re
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from app.core.errors import FieldError
from app.schemas.content import FieldDefinition, FieldValidationRules
from app.services.field_types import (
    FieldType,
    RuleKind,
    allowed_rules,
    ensure_exhaustive,
)
from app.services.field_values import (
    get_media_url,
    is_blank,
    is_uuid,
    is_valid_media_url,
)

API_IDENTIFIER_RE = re.compile(r"^[a-z][a-z0-9_]*$")
API_IDENTIFIER_MIN = 2
API_IDENTIFIER_MAX = 50


def coerce_fields(fields: Iterable[Any]) -> List[FieldDefinition]:
    """Accepts FieldDefinition objects or their stored dict form."""
    out: List[FieldDefinition] = []
    for f in fields or []:
        out.append(f if isinstance(f, FieldDefinition) else FieldDefinition.model_validate(f))
    return out


# -------- Required check (per type "present" semantics) --------
def _button_present(value: Any) -> bool:
    if not isinstance(value, dict):
        return False
    return bool(value.get("text")) or bool(value.get("url"))


def _array_present(value: Any) -> bool:
    return isinstance(value, list) and len(value) >= 1


def _media_present(value: Any) -> bool:
    return bool(get_media_url(value))


def _scalar_present(value: Any) -> bool:
    return not is_blank(value)


_PRESENCE: Dict[FieldType, Callable[[Any], bool]] = {
    FieldType.short_text: _scalar_present,
    FieldType.long_text: _scalar_present,
    FieldType.rich_text: _scalar_present,
    FieldType.number: _scalar_present,
    FieldType.boolean: _scalar_present,
    FieldType.date: _scalar_present,
    FieldType.media: _media_present,
    FieldType.reference: _scalar_present,
    FieldType.button: _button_present,
    FieldType.array: _array_present,
}
ensure_exhaustive(_PRESENCE, "_PRESENCE")


def is_present(field: FieldDefinition, value: Any) -> bool:
    return _PRESENCE[field.field_type](value)


# -------- Type-specific rules (only on present values) --------
def _rules(field: FieldDefinition) -> FieldValidationRules:
    return field.validation or FieldValidationRules()


def _check_text(field: FieldDefinition, value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    rules = _rules(field)
    n = len(value)
    if rules.min_length and n < rules.min_length:
        return f"{field.name} must be at least {rules.min_length} characters"
    if rules.max_length and n > rules.max_length:
        return f"{field.name} must be no more than {rules.max_length} characters"
    if rules.pattern:
        try:
            matched = re.fullmatch(rules.pattern, value)
        except re.error:
            return f"{field.name} has an invalid pattern"
        if not matched:
            return f"{field.name} format is invalid"
    return None


def _check_number(field: FieldDefinition, value: Any) -> Optional[str]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return f"{field.name} must be a valid number"
    rules = _rules(field)
    if rules.min_value is not None and value < rules.min_value:
        return f"{field.name} must be at least {rules.min_value}"
    if rules.max_value is not None and value > rules.max_value:
        return f"{field.name} must be no more than {rules.max_value}"
    return None


def _check_boolean(field: FieldDefinition, value: Any) -> Optional[str]:
    return None


def parse_date(value: Any) -> Optional[datetime | date]:
    """ISO-8601 tolerant parse; None when the value is not a date."""
    if not isinstance(value, str):
        return None
    s = value.strip()
    if s.endswith("Z") or s.endswith("z"):
        s = s[:-1] + "+00:00"
    try:
        if "T" in s or " " in s:
            return datetime.fromisoformat(s)
        return date.fromisoformat(s)
    except ValueError:
        return None


def _check_date(field: FieldDefinition, value: Any) -> Optional[str]:
    if parse_date(value) is None:
        return f"{field.name} must be a valid date"
    return None


def _check_media(field: FieldDefinition, value: Any) -> Optional[str]:
    url = get_media_url(value)
    if url and not is_valid_media_url(url):
        return f"{field.name} must be a valid URL or path"
    return None


def _check_reference(field: FieldDefinition, value: Any) -> Optional[str]:
    if not is_uuid(value):
        return f"{field.name} must be a valid reference"
    return None


def _check_button(field: FieldDefinition, value: Any) -> Optional[str]:
    if not field.required:
        return None
    if not isinstance(value, dict) or not value.get("text") or not value.get("url"):
        return f"{field.name} requires both text and URL"
    return None


def _check_array(field: FieldDefinition, value: Any) -> Optional[str]:
    # Item contents are not validated recursively at this layer.
    return None


_TYPE_RULES: Dict[FieldType, Callable[[FieldDefinition, Any], Optional[str]]] = {
    FieldType.short_text: _check_text,
    FieldType.long_text: _check_text,
    FieldType.rich_text: _check_text,
    FieldType.number: _check_number,
    FieldType.boolean: _check_boolean,
    FieldType.date: _check_date,
    FieldType.media: _check_media,
    FieldType.reference: _check_reference,
    FieldType.button: _check_button,
    FieldType.array: _check_array,
}
ensure_exhaustive(_TYPE_RULES, "_TYPE_RULES")


def validate_field(field: FieldDefinition, value: Any) -> Optional[str]:
    """
    Validate one value against its definition.
    Returns None when valid, otherwise a single human-readable message.
    """
    if not is_present(field, value):
        if not field.required:
            return None
        if field.field_type == FieldType.array:
            return f"{field.name} must have at least one item"
        return f"{field.name} is required"
    return _TYPE_RULES[field.field_type](field, value)


def validate_all_fields(model: Any, form_data: Mapping[str, Any] | None) -> List[FieldError]:
    """
    Run validate_field for every field of the model, in schema order.
    Never stops at the first failure.
    """
    data = form_data or {}
    fields = coerce_fields(model.fields if hasattr(model, "fields") else model)
    errors: List[FieldError] = []
    for field in fields:
        message = validate_field(field, data.get(field.api_identifier))
        if message:
            errors.append({"field": field.api_identifier, "message": message})
    return errors


# -------- Authoring: identifiers --------
def validate_api_identifier(identifier: Optional[str]) -> Optional[str]:
    if not identifier:
        return "API identifier is required"
    if not API_IDENTIFIER_RE.match(identifier):
        return (
            "API identifier must start with a lowercase letter and contain only "
            "lowercase letters, numbers, and underscores"
        )
    if len(identifier) < API_IDENTIFIER_MIN:
        return f"API identifier must be at least {API_IDENTIFIER_MIN} characters"
    if len(identifier) > API_IDENTIFIER_MAX:
        return f"API identifier must be no more than {API_IDENTIFIER_MAX} characters"
    return None


def derive_api_identifier(name: str) -> str:
    """'Blog Post!' -> 'blog_post'. Only used while the identifier is still empty."""
    return re.sub(r"[^a-z0-9]+", "_", (name or "").lower()).strip("_")


# -------- Authoring: field definitions --------
def normalize_field_definition(field: FieldDefinition) -> FieldDefinition:
    """
    Fill a missing api_identifier from the name and drop validation rules
    that do not apply to the field's type.
    """
    data = field.model_copy(deep=True)
    if not data.api_identifier:
        data.api_identifier = derive_api_identifier(data.name)
    if data.validation is not None:
        legal = {r.value for r in allowed_rules(data.field_type)}
        kept = {k: v for k, v in data.validation.model_dump().items() if k in legal and v is not None}
        data.validation = FieldValidationRules(**kept) if kept else None
    if data.field_type != FieldType.reference:
        data.reference_to = None
    if data.options is not None and data.field_type != FieldType.array:
        data.options = data.options.model_copy(update={"item_fields": None})
    return data


def validate_field_definition(
    field: FieldDefinition,
    existing_fields: Sequence[FieldDefinition] = (),
) -> List[FieldError]:
    """
    Structural checks for one authored field. `existing_fields` are the other
    fields of the same model; a field with the same id is the one being edited.
    """
    errors: List[FieldError] = []

    def err(key: str, message: str) -> None:
        errors.append({"field": key, "message": message})

    if not (field.name or "").strip():
        err("name", "Field name is required")

    id_error = validate_api_identifier(field.api_identifier)
    if id_error:
        err("api_identifier", id_error)
    elif any(f.api_identifier == field.api_identifier and f.id != field.id for f in existing_fields):
        err("api_identifier", "A field with this API identifier already exists")

    if field.field_type == FieldType.reference and not (field.reference_to or "").strip():
        err("reference_to", "Please specify which content model to reference")

    if field.field_type == FieldType.array:
        items = field.item_fields
        if not items:
            err("options.item_fields", "Array fields must have at least one item field defined")
        elif any(not i.name.strip() or not i.api_identifier.strip() for i in items):
            err("options.item_fields", "All item fields must have a name and API identifier")

    rules = field.validation
    if rules is not None:
        if RuleKind.pattern in allowed_rules(field.field_type) and rules.pattern:
            try:
                re.compile(rules.pattern)
            except re.error:
                err("validation.pattern", "Pattern is not a valid regular expression")
        if rules.min_length is not None and rules.max_length is not None and rules.min_length > rules.max_length:
            err("validation.max_length", "Maximum length must be greater than or equal to minimum length")
        if rules.min_value is not None and rules.max_value is not None and rules.min_value > rules.max_value:
            err("validation.max_value", "Maximum value must be greater than or equal to minimum value")

    return errors


def validate_field_set(fields: Sequence[FieldDefinition]) -> List[FieldError]:
    """Check every field of a model against its siblings. Keys are prefixed `fields.<index>.`."""
    errors: List[FieldError] = []
    for index, field in enumerate(fields):
        siblings = [f for i, f in enumerate(fields) if i != index]
        for e in validate_field_definition(field, siblings):
            errors.append({"field": f"fields.{index}.{e['field']}", "message": e["message"]})
    return errors


# -------- Authoring: content models --------
def validate_content_model(model: Any, existing_models: Sequence[Any] = ()) -> List[FieldError]:
    """
    Structural checks for a whole model (name, identifier, field set) against
    the other known models. `model` may be a ContentModel row or a create payload;
    an existing model with the same id is the one being edited.
    """
    errors: List[FieldError] = []
    if not (model.name or "").strip():
        errors.append({"field": "name", "message": "Model name is required"})

    api_identifier = model.api_identifier or derive_api_identifier(model.name or "")
    id_error = validate_api_identifier(api_identifier)
    model_id = getattr(model, "id", None)
    if id_error:
        errors.append({"field": "api_identifier", "message": id_error})
    elif any(
        (m.api_identifier or derive_api_identifier(m.name or "")) == api_identifier
        and (model_id is None or getattr(m, "id", None) != model_id)
        for m in existing_models
    ):
        errors.append({
            "field": "api_identifier",
            "message": "A content model with this API identifier already exists",
        })

    fields = [normalize_field_definition(f) for f in coerce_fields(model.fields or [])]
    errors.extend(validate_field_set(fields))
    return errors
