# tests/test_content_api.py
from __future__ import annotations

import pytest

from app.core.settings import settings

API = settings.API_V1_STR

SLIDES_MODEL = {
    "name": "Home Carousel",
    "description": "Slides on the landing page",
    "fields": [
        {"name": "Headline", "field_type": "short_text", "validation": {"max_length": 20}},
        {
            "name": "Slides",
            "api_identifier": "slides",
            "field_type": "array",
            "required": True,
            "options": {"item_fields": [
                {"name": "Caption", "api_identifier": "caption", "field_type": "short_text"},
                {"name": "Image", "api_identifier": "image", "field_type": "media", "required": True},
            ]},
        },
    ],
}


@pytest.fixture()
def slides_model(client, editor_headers):
    r = client.post(f"{API}/content/models", json=SLIDES_MODEL, headers=editor_headers)
    assert r.status_code == 201, r.text
    return r.json()


# ---------- models ----------
def test_create_model_derives_identifiers(slides_model):
    assert slides_model["api_identifier"] == "home_carousel"
    keys = [f["api_identifier"] for f in slides_model["fields"]]
    assert keys == ["headline", "slides"]
    assert all(f["id"].startswith("field_") for f in slides_model["fields"])


def test_duplicate_model_identifier_is_a_field_error(client, editor_headers, slides_model):
    r = client.post(f"{API}/content/models", json=SLIDES_MODEL, headers=editor_headers)
    assert r.status_code == 409
    detail = r.json()["detail"]
    assert detail["errors"] == [
        {"field": "api_identifier", "message": "A content model with this API identifier already exists"}
    ]


def test_bad_model_identifier(client, editor_headers):
    r = client.post(
        f"{API}/content/models",
        json={"name": "X", "api_identifier": "1abc", "fields": []},
        headers=editor_headers,
    )
    assert r.status_code == 422
    assert r.json()["detail"]["errors"][0]["field"] == "api_identifier"


def test_invalid_field_definitions_are_rejected(client, editor_headers):
    payload = {
        "name": "Broken",
        "fields": [
            {"name": "Author", "field_type": "reference"},
            {"name": "Rows", "field_type": "array", "options": {"item_fields": []}},
        ],
    }
    r = client.post(f"{API}/content/models", json=payload, headers=editor_headers)
    assert r.status_code == 422
    fields = {e["field"] for e in r.json()["detail"]["errors"]}
    assert fields == {"fields.0.reference_to", "fields.1.options.item_fields"}


def test_viewer_cannot_write(client, viewer_headers):
    r = client.post(f"{API}/content/models", json=SLIDES_MODEL, headers=viewer_headers)
    assert r.status_code == 403


def test_list_models_newest_first(client, editor_headers, slides_model):
    r = client.post(f"{API}/content/models", json={"name": "Team", "fields": []}, headers=editor_headers)
    assert r.status_code == 201
    listed = client.get(f"{API}/content/models", headers=editor_headers).json()
    assert [m["api_identifier"] for m in listed] == ["team", "home_carousel"]


def test_field_type_cannot_change(client, editor_headers, slides_model):
    fields = slides_model["fields"]
    fields[0]["field_type"] = "number"
    r = client.patch(
        f"{API}/content/models/{slides_model['id']}", json={"fields": fields}, headers=editor_headers
    )
    assert r.status_code == 422
    assert r.json()["detail"]["errors"] == [
        {"field": "fields.0.field_type", "message": "Field type of 'Headline' cannot be changed"}
    ]


def test_field_builder_add_reorder_remove(client, editor_headers, slides_model):
    mid = slides_model["id"]
    r = client.post(
        f"{API}/content/models/{mid}/fields",
        json={"name": "Published", "field_type": "boolean"},
        headers=editor_headers,
    )
    assert r.status_code == 201
    fields = r.json()["fields"]
    assert fields[-1]["api_identifier"] == "published"

    order = [f["id"] for f in reversed(fields)]
    r = client.put(f"{API}/content/models/{mid}/fields/order", json={"order": order}, headers=editor_headers)
    assert r.status_code == 200
    assert [f["id"] for f in r.json()["fields"]] == order

    r = client.put(f"{API}/content/models/{mid}/fields/order", json={"order": order[:1]}, headers=editor_headers)
    assert r.status_code == 400

    r = client.delete(f"{API}/content/models/{mid}/fields/{order[0]}", headers=editor_headers)
    assert r.status_code == 200
    assert order[0] not in [f["id"] for f in r.json()["fields"]]


def test_adding_duplicate_field_identifier(client, editor_headers, slides_model):
    r = client.post(
        f"{API}/content/models/{slides_model['id']}/fields",
        json={"name": "Slides again", "api_identifier": "slides", "field_type": "short_text"},
        headers=editor_headers,
    )
    assert r.status_code == 422
    assert {"field": "fields.2.api_identifier", "message": "A field with this API identifier already exists"} in (
        r.json()["detail"]["errors"]
    )


def test_replace_field_keeps_identifier(client, editor_headers, slides_model):
    headline = slides_model["fields"][0]
    r = client.put(
        f"{API}/content/models/{slides_model['id']}/fields/{headline['id']}",
        json={"name": "Main Headline", "field_type": "short_text"},
        headers=editor_headers,
    )
    assert r.status_code == 200
    updated = r.json()["fields"][0]
    assert updated["name"] == "Main Headline"
    assert updated["api_identifier"] == "headline"


# ---------- entries ----------
def test_required_array_end_to_end(client, editor_headers, slides_model):
    base = {"content_model_id": slides_model["id"], "title": "Spring"}

    r = client.post(f"{API}/content/entries", json={**base, "fields": {"slides": []}}, headers=editor_headers)
    assert r.status_code == 422
    assert r.json()["detail"]["errors"] == [{"field": "slides", "message": "Slides must have at least one item"}]

    item = {"caption": "Hello", "image": "https://cdn.test/a.png"}
    r = client.post(f"{API}/content/entries", json={**base, "fields": {"slides": [item]}}, headers=editor_headers)
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["status"] == "draft"
    assert body["published_at"] is None
    assert body["fields"]["slides"] == [item]


def test_missing_title_and_field_errors_together(client, editor_headers, slides_model):
    r = client.post(
        f"{API}/content/entries",
        json={"content_model_id": slides_model["id"], "title": " ", "fields": {"headline": "x" * 21}},
        headers=editor_headers,
    )
    assert r.status_code == 422
    assert [e["field"] for e in r.json()["detail"]["errors"]] == ["title", "headline", "slides"]


def test_entry_for_unknown_model(client, editor_headers):
    r = client.post(
        f"{API}/content/entries",
        json={"content_model_id": "nope", "title": "x"},
        headers=editor_headers,
    )
    assert r.status_code == 404


def test_entry_without_fields_is_seeded(client, editor_headers):
    model = client.post(
        f"{API}/content/models",
        json={"name": "Stats", "fields": [
            {"name": "Visitors", "field_type": "number", "required": True},
            {"name": "Live", "field_type": "boolean"},
        ]},
        headers=editor_headers,
    ).json()
    r = client.post(
        f"{API}/content/entries", json={"content_model_id": model["id"], "title": "Q1"}, headers=editor_headers
    )
    assert r.status_code == 201
    # number seeds 0, which satisfies "required"
    assert r.json()["fields"] == {"visitors": 0, "live": False}


def _entry(client, headers, model):
    r = client.post(
        f"{API}/content/entries",
        json={
            "content_model_id": model["id"],
            "title": "Spring",
            "fields": {"slides": [{"caption": "A", "image": "/a.png"}]},
        },
        headers=headers,
    )
    assert r.status_code == 201, r.text
    return r.json()


def test_publish_and_unpublish(client, editor_headers, slides_model):
    entry = _entry(client, editor_headers, slides_model)

    published = client.post(f"{API}/content/entries/{entry['id']}/publish", headers=editor_headers).json()
    assert published["status"] == "published"
    assert published["published_at"] is not None

    resaved = client.patch(
        f"{API}/content/entries/{entry['id']}", json={"title": "Spring 2"}, headers=editor_headers
    ).json()
    assert resaved["published_at"] == published["published_at"]

    draft = client.post(f"{API}/content/entries/{entry['id']}/unpublish", headers=editor_headers).json()
    assert draft["status"] == "draft"
    assert draft["published_at"] is None

    archived = client.post(f"{API}/content/entries/{entry['id']}/archive", headers=editor_headers).json()
    assert archived["status"] == "archived"


def test_update_revalidates_merged_fields(client, editor_headers, slides_model):
    entry = _entry(client, editor_headers, slides_model)
    r = client.patch(
        f"{API}/content/entries/{entry['id']}", json={"fields": {"slides": []}}, headers=editor_headers
    )
    assert r.status_code == 422


def test_list_entries_by_model_and_status(client, editor_headers, slides_model):
    entry = _entry(client, editor_headers, slides_model)
    client.post(f"{API}/content/entries/{entry['id']}/publish", headers=editor_headers)
    _entry(client, editor_headers, slides_model)

    everything = client.get(
        f"{API}/content/entries", params={"model_id": slides_model["id"]}, headers=editor_headers
    ).json()
    assert len(everything) == 2
    published = client.get(
        f"{API}/content/entries", params={"status": "published"}, headers=editor_headers
    ).json()
    assert [e["id"] for e in published] == [entry["id"]]


def test_delete_model_orphans_entries(client, editor_headers, slides_model):
    entry = _entry(client, editor_headers, slides_model)
    r = client.delete(f"{API}/content/models/{slides_model['id']}", headers=editor_headers)
    assert r.json() == {"deleted": True, "orphaned_entries": 1}

    still_there = client.get(f"{API}/content/entries/{entry['id']}", headers=editor_headers)
    assert still_there.status_code == 200
    exported = client.get(f"{API}/content/entries/{entry['id']}/json", headers=editor_headers).json()
    assert exported["model"] is None
    assert exported["fields"] == entry["fields"]


def test_oversized_fields_are_rejected(client, editor_headers, slides_model, monkeypatch):
    monkeypatch.setattr(settings, "MAX_ENTRY_DATA_KB", 1)
    r = client.post(
        f"{API}/content/entries",
        json={
            "content_model_id": slides_model["id"],
            "title": "Big",
            "fields": {"headline": "x", "slides": [{"caption": "y" * 2048, "image": "/a.png"}]},
        },
        headers=editor_headers,
    )
    assert r.status_code == 413


# ---------- validation, form, export ----------
def test_validate_endpoint_is_a_dry_run(client, editor_headers, slides_model):
    r = client.post(
        f"{API}/content/models/{slides_model['id']}/validate",
        json={"fields": {"headline": "ok"}},
        headers=editor_headers,
    )
    assert r.json() == {"valid": False, "errors": [{"field": "slides", "message": "Slides must have at least one item"}]}


def test_form_for_new_and_existing_entry(client, editor_headers, slides_model):
    form = client.get(f"{API}/content/models/{slides_model['id']}/form", headers=editor_headers).json()
    assert [c["key"] for c in form["fields"]] == ["headline", "slides"]
    assert form["fields"][1]["items"] == []

    entry = _entry(client, editor_headers, slides_model)
    form = client.get(
        f"{API}/content/models/{slides_model['id']}/form",
        params={"entry_id": entry["id"]},
        headers=editor_headers,
    ).json()
    assert form["fields"][1]["items"][0]["summary"] == "A"


def test_model_schema_export(client, editor_headers, slides_model):
    r = client.get(f"{API}/content/models/{slides_model['id']}/schema", headers=editor_headers)
    body = r.json()
    assert body["api_identifier"] == "home_carousel"
    assert body["fields"][1]["options"]["item_fields"][1]["field_type"] == "media"


def test_reference_options(client, editor_headers, slides_model):
    entry = _entry(client, editor_headers, slides_model)
    found = client.get(f"{API}/content/references/home_carousel/options", headers=editor_headers).json()
    assert found["found"] is True
    assert found["options"] == [{"id": entry["id"], "title": "Spring"}]

    missing = client.get(f"{API}/content/references/ghost/options", headers=editor_headers).json()
    assert missing == {
        "model_api_identifier": "ghost",
        "found": False,
        "options": [],
        "empty_label": "No ghost entries found",
    }


def test_api_identifier_check(client, editor_headers):
    r = client.get(f"{API}/content/api-identifier/check", params={"name": "Blog Post"}, headers=editor_headers)
    assert r.json() == {"value": "blog_post", "valid": True, "error": None}
    r = client.get(f"{API}/content/api-identifier/check", params={"value": "a"}, headers=editor_headers)
    assert r.json()["valid"] is False


def test_field_types_listing(client, viewer_headers):
    r = client.get(f"{API}/content/field-types", headers=viewer_headers)
    assert r.status_code == 200
    assert len(r.json()) == 10


def test_field_type_cannot_change_when_ids_are_omitted(client, editor_headers, slides_model):
    fields = [
        {"name": "Headline", "api_identifier": "headline", "field_type": "number"},
        {k: v for k, v in slides_model["fields"][1].items() if k != "id"},
    ]
    r = client.patch(
        f"{API}/content/models/{slides_model['id']}", json={"fields": fields}, headers=editor_headers
    )
    assert r.status_code == 422
    assert r.json()["detail"]["errors"] == [
        {"field": "fields.0.field_type", "message": "Field type of 'Headline' cannot be changed"}
    ]


def test_resent_fields_keep_their_ids(client, editor_headers, slides_model):
    fields = [{k: v for k, v in f.items() if k != "id"} for f in slides_model["fields"]]
    fields[0]["help_text"] = "Shown above the slides"
    fields.append({"name": "Subtitle", "field_type": "short_text"})
    r = client.patch(
        f"{API}/content/models/{slides_model['id']}", json={"fields": fields}, headers=editor_headers
    )
    assert r.status_code == 200, r.text
    updated = r.json()["fields"]
    assert [f["id"] for f in updated[:2]] == [f["id"] for f in slides_model["fields"]]
    assert updated[0]["help_text"] == "Shown above the slides"
    assert updated[2]["id"] not in {f["id"] for f in slides_model["fields"]}


def test_non_finite_number_is_rejected(client, editor_headers):
    model = client.post(
        f"{API}/content/models",
        json={"name": "Stats", "fields": [{"name": "Count", "field_type": "number"}]},
        headers=editor_headers,
    ).json()
    body = '{"content_model_id": "%s", "title": "Q1", "fields": {"count": Infinity}}' % model["id"]
    r = client.post(
        f"{API}/content/entries",
        content=body,
        headers={**editor_headers, "Content-Type": "application/json"},
    )
    assert r.status_code == 422
    assert r.json()["detail"]["errors"] == [{"field": "count", "message": "Count must be a valid number"}]
