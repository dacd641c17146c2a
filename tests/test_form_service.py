# tests/test_form_service.py
from __future__ import annotations

from types import SimpleNamespace

import pytest

from app.schemas.content import ArrayItemField, FieldDefinition
from app.services.field_types import FieldType
from app.services.form_service import (
    ArrayEditor,
    accept_media_url,
    build_control,
    build_form,
    coerce_control_value,
    item_summary,
    move_item,
    seed_entry_fields,
)

ITEMS = [
    ArrayItemField(name="Caption", api_identifier="caption", field_type="short_text"),
    ArrayItemField(name="Image", api_identifier="image", field_type="media"),
    ArrayItemField(name="Order", api_identifier="order", field_type="number"),
]


def _array_field(required=False) -> FieldDefinition:
    return FieldDefinition(
        id="f_slides", name="Slides", api_identifier="slides", field_type="array",
        required=required, options={"item_fields": [i.model_dump() for i in ITEMS]},
    )


def _model(fields):
    return SimpleNamespace(id="m1", api_identifier="home", name="Home", fields=fields)


# ---------- seeding ----------
def test_seed_uses_default_value_then_type_default():
    fields = [
        {"name": "Title", "api_identifier": "title", "field_type": "short_text", "default_value": "Hello"},
        {"name": "Count", "api_identifier": "count", "field_type": "number"},
        {"name": "Live", "api_identifier": "live", "field_type": "boolean"},
        {"name": "Slides", "api_identifier": "slides", "field_type": "array",
         "options": {"item_fields": [{"name": "C", "api_identifier": "c", "field_type": "short_text"}]}},
    ]
    assert seed_entry_fields(fields) == {"title": "Hello", "count": 0, "live": False, "slides": []}


# ---------- controls ----------
def test_unsupported_type_renders_error_marker():
    node = build_control({"name": "Map", "api_identifier": "map", "field_type": "geo"}, None)
    assert node["widget"] == "error"
    assert node["error"] == "Unsupported field type: geo"
    assert node["key"] == "map"


def test_form_keeps_broken_fields_visible():
    form = build_form(_model([
        {"name": "Title", "api_identifier": "title", "field_type": "short_text"},
        {"name": "Map", "api_identifier": "map", "field_type": "geo"},
    ]))
    assert [c["widget"] for c in form["fields"]] == ["text", "error"]


def test_reference_control_points_at_options():
    f = FieldDefinition(name="Author", api_identifier="author", field_type="reference", reference_to="person")
    node = build_control(f, "")
    assert node["value"] is None
    assert node["options_url"] == "/content/references/person/options"


def test_media_control_normalizes_legacy_value():
    f = FieldDefinition(name="Cover", api_identifier="cover", field_type="media")
    node = build_control(f, "https://x/y.png")
    assert node["value"] == {"url": "https://x/y.png", "photographer": "", "route": ""}
    assert node["sources"] == ["library", "upload", "url"]


def test_array_control_has_rows_with_summaries():
    node = build_control(_array_field(), [{"caption": "First slide", "image": "", "order": 0}])
    assert node["items"][0]["summary"] == "First slide"
    assert [c["key"] for c in node["items"][0]["controls"]] == ["caption", "image", "order"]


def test_array_without_items_is_labeled():
    assert build_control(_array_field(), [])["empty_label"] == "No items yet"


def test_array_control_marks_non_object_rows():
    node = build_control(_array_field(), ["stray", {"caption": "Kept"}])
    assert node["items"][0] == {"index": 0, "widget": "error", "error": "Unsupported item value", "value": "stray"}
    assert node["items"][1]["summary"] == "Kept"


# ---------- control -> value ----------
@pytest.mark.parametrize("raw,expected", [
    ("42", 42), ("4.5", 4.5), ("", None), ("abc", None), (7, 7),
    ("inf", None), ("NaN", None), (float("-inf"), None),
])
def test_number_coercion(raw, expected):
    assert coerce_control_value(FieldType.number, raw) == expected


def test_boolean_and_media_coercion():
    assert coerce_control_value("boolean", "on") is True
    assert coerce_control_value("boolean", "false") is False
    assert coerce_control_value("media", {"url": ""}) == ""


def test_accept_media_url():
    assert accept_media_url(" /img/a.png ") == "/img/a.png"
    with pytest.raises(ValueError):
        accept_media_url("img/a.png")


# ---------- arrays ----------
def test_move_item_is_stable():
    assert move_item(["A", "B", "C"], 0, 2) == ["B", "C", "A"]
    assert move_item(["A", "B", "C"], 2, 0) == ["C", "A", "B"]
    with pytest.raises(IndexError):
        move_item(["A"], 0, 3)


def test_summary_truncates_and_falls_back():
    long = "x" * 61
    assert item_summary(ITEMS, {"caption": long}) == "x" * 60 + "..."
    assert item_summary(ITEMS, {"caption": "x" * 60}) == "x" * 60
    assert item_summary(ITEMS, {"caption": ""}) == "Item"
    assert item_summary(ITEMS[1:], {"image": "/a.png"}) == "Item"


def test_add_item_seeds_defaults():
    editor = ArrayEditor(ITEMS)
    index = editor.add_item()
    assert index == 0
    assert editor.value == [{"caption": "", "image": "", "order": 0}]


def test_remove_shifts_collapse_state_above_only():
    editor = ArrayEditor(ITEMS, [{"caption": c} for c in "ABCDE"], collapsed={0, 2, 4})
    editor.remove_item(2)
    assert [i["caption"] for i in editor.items] == ["A", "B", "D", "E"]
    assert editor.collapsed == {0, 3}


def test_move_carries_collapse_state_with_the_row():
    editor = ArrayEditor(ITEMS, [{"caption": c} for c in "ABC"], collapsed={2})
    editor.move_item(0, 2)
    assert [i["caption"] for i in editor.items] == ["B", "C", "A"]
    # C was collapsed at index 2 and is now at index 1
    assert editor.collapsed == {1}


def test_update_item_coerces_by_item_type():
    editor = ArrayEditor(ITEMS, [{"caption": "A", "image": "", "order": 0}])
    editor.update_item(0, "order", "3")
    assert editor.items[0]["order"] == 3
    with pytest.raises(IndexError):
        editor.update_item(4, "order", 1)


def test_toggle_collapse():
    editor = ArrayEditor(ITEMS, [{"caption": "A"}])
    assert editor.toggle_collapse(0) is True
    assert editor.toggle_collapse(0) is False


def test_for_field_rejects_non_array():
    f = FieldDefinition(name="T", api_identifier="t", field_type="short_text")
    with pytest.raises(ValueError):
        ArrayEditor.for_field(f, [])
