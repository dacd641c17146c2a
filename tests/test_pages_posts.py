# tests/test_pages_posts.py
from __future__ import annotations

import pytest

from app.core.settings import settings

API = settings.API_V1_STR

ABOUT_PAGE = {
    "title": "About us",
    "slug": "about",
    "content": "<p>Studio history</p>",
    "meta_description": "Who we are",
}


@pytest.fixture()
def about_page(client, editor_headers):
    r = client.post(f"{API}/pages", json=ABOUT_PAGE, headers=editor_headers)
    assert r.status_code == 201, r.text
    return r.json()


# ---------- pages ----------
def test_create_page_defaults_to_draft(about_page):
    assert about_page["status"] == "draft"
    assert about_page["published_at"] is None
    assert about_page["meta_keywords"] == ""


def test_page_lookup_by_id_and_slug(client, viewer_headers, about_page):
    by_id = client.get(f"{API}/pages/{about_page['id']}", headers=viewer_headers)
    by_slug = client.get(f"{API}/pages/by-slug/about", headers=viewer_headers)
    assert by_id.status_code == 200
    assert by_slug.json()["id"] == about_page["id"]
    assert client.get(f"{API}/pages/by-slug/missing", headers=viewer_headers).status_code == 404


def test_duplicate_page_slug_is_a_conflict(client, editor_headers, about_page):
    r = client.post(f"{API}/pages", json={**ABOUT_PAGE, "title": "About again"}, headers=editor_headers)
    assert r.status_code == 409
    assert r.json()["detail"]["errors"] == [{"field": "slug", "message": "Slug already exists"}]


def test_renaming_page_slug_onto_another_is_a_conflict(client, editor_headers, about_page):
    other = client.post(
        f"{API}/pages", json={**ABOUT_PAGE, "title": "Contact", "slug": "contact"}, headers=editor_headers
    ).json()
    r = client.patch(f"{API}/pages/{other['id']}", json={"slug": "about"}, headers=editor_headers)
    assert r.status_code == 409


def test_page_publish_stamps_then_unpublish_clears(client, editor_headers, about_page):
    url = f"{API}/pages/{about_page['id']}"
    published = client.patch(url, json={"status": "published"}, headers=editor_headers).json()
    assert published["published_at"] is not None

    edited = client.patch(url, json={"title": "About the studio"}, headers=editor_headers).json()
    assert edited["published_at"] == published["published_at"]

    draft = client.patch(url, json={"status": "draft"}, headers=editor_headers).json()
    assert draft["status"] == "draft"
    assert draft["published_at"] is None


def test_update_and_delete_page(client, editor_headers, about_page):
    url = f"{API}/pages/{about_page['id']}"
    r = client.patch(url, json={"content": "<p>New</p>"}, headers=editor_headers)
    assert r.json()["content"] == "<p>New</p>"
    assert r.json()["slug"] == "about"

    assert client.delete(url, headers=editor_headers).json() == {"deleted": True}
    assert client.get(url, headers=editor_headers).status_code == 404


def test_viewer_cannot_create_pages(client, viewer_headers):
    assert client.post(f"{API}/pages", json=ABOUT_PAGE, headers=viewer_headers).status_code == 403


def test_list_pages_by_status(client, editor_headers, about_page):
    client.post(
        f"{API}/pages", json={**ABOUT_PAGE, "slug": "live", "status": "published"}, headers=editor_headers
    )
    listed = client.get(f"{API}/pages", params={"status": "published"}, headers=editor_headers).json()
    assert [p["slug"] for p in listed] == ["live"]


# ---------- posts ----------
def _post(client, headers, **extra):
    body = {"title": "Launch notes", "slug": "launch-notes", "excerpt": "What shipped", **extra}
    r = client.post(f"{API}/posts", json=body, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


def test_post_published_at_is_what_the_author_sends(client, editor_headers):
    # manual policy: published_at is independent of status
    post = _post(client, editor_headers, status="draft", published_at="2024-05-01T09:00:00Z")
    assert post["published_at"].startswith("2024-05-01T09:00:00")
    assert post["excerpt"] == "What shipped"

    url = f"{API}/posts/{post['id']}"
    published = client.patch(url, json={"status": "published"}, headers=editor_headers).json()
    assert published["published_at"].startswith("2024-05-01T09:00:00")

    cleared = client.patch(url, json={"published_at": None}, headers=editor_headers).json()
    assert cleared["status"] == "published"
    assert cleared["published_at"] is None


def test_published_post_without_date_stays_unstamped(client, editor_headers):
    post = _post(client, editor_headers, status="published")
    assert post["published_at"] is None


def test_post_slug_lookup_and_conflict(client, editor_headers):
    post = _post(client, editor_headers)
    assert client.get(f"{API}/posts/by-slug/launch-notes", headers=editor_headers).json()["id"] == post["id"]

    r = client.post(f"{API}/posts", json={"title": "Dup", "slug": "launch-notes"}, headers=editor_headers)
    assert r.status_code == 409


def test_page_and_post_slugs_are_separate(client, editor_headers, about_page):
    post = _post(client, editor_headers, slug="about")
    assert post["slug"] == "about"


def test_delete_post(client, editor_headers):
    post = _post(client, editor_headers)
    url = f"{API}/posts/{post['id']}"
    assert client.delete(url, headers=editor_headers).status_code == 200
    assert client.get(url, headers=editor_headers).status_code == 404
