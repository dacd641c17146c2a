# app/services/schema_export_service.py
# Draft 2020-12 JSON Schema of an entry's `fields` object, for consumers that
# validate exported content outside the admin.
from __future__ import annotations

from typing import Any, Callable, Dict

from jsonschema import Draft202012Validator

from app.schemas.content import ArrayItemField, FieldDefinition
from app.services.field_types import FieldType, ItemFieldType, ensure_exhaustive
from app.services.field_validation import coerce_fields

DRAFT = "https://json-schema.org/draft/2020-12/schema"

MEDIA_DEF = {
    "type": "object",
    "properties": {
        "url": {"type": "string"},
        "photographer": {"type": "string"},
        "route": {"type": "string"},
    },
    "required": ["url"],
}

BUTTON_DEF = {
    "type": "object",
    "properties": {
        "text": {"type": "string"},
        "url": {"type": "string"},
        "target": {"enum": ["_self", "_blank"]},
    },
}


def _nullable(schema: Dict[str, Any], required: bool) -> Dict[str, Any]:
    if required:
        return schema
    return {"anyOf": [schema, {"type": "null"}]}


def _text(field: FieldDefinition | ArrayItemField) -> Dict[str, Any]:
    schema: Dict[str, Any] = {"type": "string"}
    rules = getattr(field, "validation", None)
    min_length = (rules.min_length if rules else None) or 0
    if field.required:
        min_length = max(min_length, 1)
    if min_length:
        schema["minLength"] = min_length
    if rules and rules.max_length:
        schema["maxLength"] = rules.max_length
    if rules and rules.pattern:
        # JSON Schema patterns are unanchored searches
        schema["pattern"] = f"^(?:{rules.pattern})$"
    return schema


def _number(field: FieldDefinition | ArrayItemField) -> Dict[str, Any]:
    schema: Dict[str, Any] = {"type": "number"}
    rules = getattr(field, "validation", None)
    if rules and rules.min_value is not None:
        schema["minimum"] = rules.min_value
    if rules and rules.max_value is not None:
        schema["maximum"] = rules.max_value
    return schema


def _media(field) -> Dict[str, Any]:
    return {"anyOf": [{"type": "string", "minLength": 1}, {"$ref": "#/$defs/MediaValue"}]}


def _array(field: FieldDefinition) -> Dict[str, Any]:
    item_props = {f.api_identifier: _item_schema(f) for f in field.item_fields}
    schema: Dict[str, Any] = {
        "type": "array",
        "items": {
            "type": "object",
            "properties": item_props,
            "required": [f.api_identifier for f in field.item_fields if f.required],
        },
    }
    if field.required:
        schema["minItems"] = 1
    return schema


_TYPE_SCHEMAS: Dict[FieldType, Callable[[Any], Dict[str, Any]]] = {
    FieldType.short_text: _text,
    FieldType.long_text: _text,
    FieldType.rich_text: _text,
    FieldType.number: _number,
    FieldType.boolean: lambda f: {"type": "boolean"},
    FieldType.date: lambda f: {"type": "string", "format": "date"},
    FieldType.media: _media,
    FieldType.reference: lambda f: {"type": "string", "format": "uuid"},
    FieldType.button: lambda f: {"$ref": "#/$defs/ButtonValue"},
    FieldType.array: _array,
}
ensure_exhaustive(_TYPE_SCHEMAS, "_TYPE_SCHEMAS")


def _item_schema(item: ArrayItemField) -> Dict[str, Any]:
    return _nullable(_TYPE_SCHEMAS[item.field_type.as_field_type()](item), item.required)


def build_entry_json_schema(model: Any) -> Dict[str, Any]:
    """Schema for the `fields` object of entries of `model`."""
    fields = coerce_fields(model.fields)
    properties = {
        f.api_identifier: _nullable(_TYPE_SCHEMAS[f.field_type](f), f.required)
        for f in fields
    }
    schema = {
        "$schema": DRAFT,
        "title": model.name,
        "type": "object",
        "properties": properties,
        "required": [f.api_identifier for f in fields if f.required],
        "$defs": {"MediaValue": MEDIA_DEF, "ButtonValue": BUTTON_DEF},
    }
    if getattr(model, "description", ""):
        schema["description"] = model.description
    Draft202012Validator.check_schema(schema)
    return schema
