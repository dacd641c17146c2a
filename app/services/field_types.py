# app/services/field_types.py
# Field Type Registry: closed set of field types, their defaults, legal
# validation rules and required auxiliary configuration.
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Iterable, Mapping, Optional


class FieldType(str, Enum):
    short_text = "short_text"
    long_text = "long_text"
    rich_text = "rich_text"
    number = "number"
    boolean = "boolean"
    date = "date"
    media = "media"
    reference = "reference"
    button = "button"
    array = "array"


class ItemFieldType(str, Enum):
    """Types allowed for the columns of an array field. No array, no reference."""
    short_text = "short_text"
    long_text = "long_text"
    number = "number"
    boolean = "boolean"
    media = "media"
    button = "button"

    def as_field_type(self) -> FieldType:
        return FieldType(self.value)


class RuleKind(str, Enum):
    min_length = "min_length"
    max_length = "max_length"
    pattern = "pattern"
    min_value = "min_value"
    max_value = "max_value"


TEXT_TYPES: FrozenSet[FieldType] = frozenset({FieldType.short_text, FieldType.long_text, FieldType.rich_text})
TEXT_RULES: FrozenSet[RuleKind] = frozenset({RuleKind.min_length, RuleKind.max_length, RuleKind.pattern})
NUMBER_RULES: FrozenSet[RuleKind] = frozenset({RuleKind.min_value, RuleKind.max_value})

# Item-field types that may label an array row in the editor.
SUMMARY_ITEM_TYPES: FrozenSet[ItemFieldType] = frozenset({ItemFieldType.short_text, ItemFieldType.long_text})


@dataclass(frozen=True)
class FieldTypeSpec:
    field_type: FieldType
    label: str
    description: str
    widget: str
    rule_kinds: FrozenSet[RuleKind] = frozenset()
    # name of the FieldDefinition attribute that must be configured, if any
    requires: Optional[str] = None


def ensure_exhaustive(table: Mapping[Any, Any], name: str, members: Iterable[Enum] = FieldType) -> None:
    """Raise at import time when a dispatch table forgets a field type."""
    missing = [m.value for m in members if m not in table]
    if missing:
        raise RuntimeError(f"{name} does not handle field types: {', '.join(missing)}")


FIELD_TYPE_REGISTRY: Dict[FieldType, FieldTypeSpec] = {
    FieldType.short_text: FieldTypeSpec(
        FieldType.short_text, "Short Text",
        "Single line text for titles, names, and short values",
        widget="text", rule_kinds=TEXT_RULES,
    ),
    FieldType.long_text: FieldTypeSpec(
        FieldType.long_text, "Long Text",
        "Multi-line text for descriptions and prose",
        widget="textarea", rule_kinds=TEXT_RULES,
    ),
    FieldType.rich_text: FieldTypeSpec(
        FieldType.rich_text, "Rich Text",
        "Formatted text with bold, italic, links, and headings",
        widget="richtext", rule_kinds=TEXT_RULES,
    ),
    FieldType.number: FieldTypeSpec(
        FieldType.number, "Number",
        "Numeric values for quantities, prices, and counts",
        widget="number", rule_kinds=NUMBER_RULES,
    ),
    FieldType.boolean: FieldTypeSpec(
        FieldType.boolean, "Boolean",
        "On/off toggle for flags and feature switches",
        widget="switch",
    ),
    FieldType.date: FieldTypeSpec(
        FieldType.date, "Date",
        "Calendar date picker for schedules and timestamps",
        widget="date",
    ),
    FieldType.media: FieldTypeSpec(
        FieldType.media, "Media",
        "Image or file, uploaded or pasted as a URL. Outputs a URL string.",
        widget="media",
    ),
    FieldType.reference: FieldTypeSpec(
        FieldType.reference, "Reference",
        "Link to an entry in another content model",
        widget="reference", requires="reference_to",
    ),
    FieldType.button: FieldTypeSpec(
        FieldType.button, "Button",
        "Call-to-action with label, URL, and open behavior",
        widget="button",
    ),
    FieldType.array: FieldTypeSpec(
        FieldType.array, "Array",
        "Repeatable list of structured items with configurable fields",
        widget="array", requires="item_fields",
    ),
}
ensure_exhaustive(FIELD_TYPE_REGISTRY, "FIELD_TYPE_REGISTRY")


def empty_button() -> Dict[str, str]:
    return {"text": "", "url": "", "target": "_self"}


# Number seeds 0 on every path (top-level entries and array items alike);
# 0 then counts as "present" for the required check.
_DEFAULT_FACTORIES: Dict[FieldType, Callable[[], Any]] = {
    FieldType.short_text: str,
    FieldType.long_text: str,
    FieldType.rich_text: str,
    FieldType.number: lambda: 0,
    FieldType.boolean: lambda: False,
    FieldType.date: str,
    FieldType.media: str,
    FieldType.reference: str,
    FieldType.button: empty_button,
    FieldType.array: list,
}
ensure_exhaustive(_DEFAULT_FACTORIES, "_DEFAULT_FACTORIES")


def _coerce_type(field_type: FieldType | ItemFieldType | str) -> FieldType:
    if isinstance(field_type, ItemFieldType):
        return field_type.as_field_type()
    return FieldType(field_type)


def get_spec(field_type: FieldType | ItemFieldType | str) -> FieldTypeSpec:
    return FIELD_TYPE_REGISTRY[_coerce_type(field_type)]


def default_value_for(field_type: FieldType | ItemFieldType | str) -> Any:
    """Fresh "empty" value used to seed a new entry or a new array item."""
    return _DEFAULT_FACTORIES[_coerce_type(field_type)]()


def allowed_rules(field_type: FieldType | ItemFieldType | str) -> FrozenSet[RuleKind]:
    return get_spec(field_type).rule_kinds


def list_field_types() -> list[dict]:
    """Selector payload for schema authoring tools."""
    return [
        {
            "type": spec.field_type.value,
            "label": spec.label,
            "description": spec.description,
            "widget": spec.widget,
            "rules": sorted(r.value for r in spec.rule_kinds),
            "requires": spec.requires,
            "item_field_type": spec.field_type.value in ItemFieldType.__members__,
        }
        for spec in FIELD_TYPE_REGISTRY.values()
    ]
