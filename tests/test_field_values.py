# tests/test_field_values.py
from __future__ import annotations

import pytest

from app.services.field_types import FieldType, ItemFieldType, default_value_for, list_field_types
from app.services.field_values import (
    get_media_url,
    is_blank,
    is_valid_media_url,
    normalize_button_value,
    normalize_media_value,
)


def test_legacy_bare_string_media_is_upgraded():
    once = normalize_media_value("https://x/y.png")
    assert once == {"url": "https://x/y.png", "photographer": "", "route": ""}
    assert normalize_media_value(once) == once
    assert normalize_media_value(once["url"]) == once


def test_media_object_gets_missing_keys():
    raw = {"url": "/a.png", "photographer": "Ann"}
    assert normalize_media_value(raw) == {"url": "/a.png", "photographer": "Ann", "route": ""}
    # stored value untouched
    assert raw == {"url": "/a.png", "photographer": "Ann"}


@pytest.mark.parametrize("value", [None, "", 12])
def test_media_nothing_selected(value):
    assert normalize_media_value(value) is None
    assert get_media_url(value) is None


@pytest.mark.parametrize("url,ok", [
    ("https://cdn.test/a.png", True),
    ("/uploads/a.png", True),
    ("mailto:someone@test.com", True),
    ("uploads/a.png", False),
    ("3f2504e0-4f89-41d3-9a0c-0305e82c3301", False),
])
def test_media_url_shapes(url, ok):
    assert is_valid_media_url(url) is ok


def test_button_defaults_and_unknown_target():
    assert normalize_button_value(None) == {"text": "", "url": "", "target": "_self"}
    assert normalize_button_value({"text": "Go", "url": "/go", "target": "_top"})["target"] == "_self"
    assert normalize_button_value({"text": "Go", "target": "_blank"})["target"] == "_blank"


def test_blank_is_only_none_and_empty_string():
    assert is_blank(None) and is_blank("")
    assert not is_blank(0)
    assert not is_blank(False)
    assert not is_blank(" ")


def test_type_defaults():
    assert default_value_for(FieldType.boolean) is False
    assert default_value_for(FieldType.number) == 0
    assert default_value_for(FieldType.button) == {"text": "", "url": "", "target": "_self"}
    assert default_value_for(FieldType.array) == []
    assert default_value_for(FieldType.short_text) == ""
    assert default_value_for(ItemFieldType.number) == 0


def test_defaults_are_fresh_objects():
    a = default_value_for(FieldType.array)
    a.append(1)
    assert default_value_for(FieldType.array) == []


def test_registry_lists_every_type():
    listed = {t["type"]: t for t in list_field_types()}
    assert set(listed) == {t.value for t in FieldType}
    assert listed["reference"]["requires"] == "reference_to"
    assert listed["array"]["item_field_type"] is False
    assert listed["media"]["item_field_type"] is True
    assert "pattern" in listed["short_text"]["rules"]
