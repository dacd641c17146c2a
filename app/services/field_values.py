# app/services/field_values.py
# Canonical value shapes for media/button fields and small value predicates.
from __future__ import annotations

import re
from typing import Any, Dict, Optional
from urllib.parse import urlsplit

UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)

BUTTON_TARGETS = ("_self", "_blank")


def is_uuid(value: Any) -> bool:
    return isinstance(value, str) and bool(UUID_RE.match(value))


def is_blank(value: Any) -> bool:
    """None and '' are "absent"; 0 and False are real values."""
    return value is None or (isinstance(value, str) and value == "")


# -------- Media --------
def normalize_media_value(value: Any) -> Optional[Dict[str, str]]:
    """
    Upgrade a stored media value to {url, photographer, route}.
      - None / ''    -> None (nothing selected)
      - bare string  -> {url: value, photographer: '', route: ''}
      - mapping      -> missing keys filled with ''
    Returns a new dict; the stored value is never mutated.
    """
    if value is None or value == "":
        return None
    if isinstance(value, str):
        return {"url": value, "photographer": "", "route": ""}
    if isinstance(value, dict):
        return {
            "url": _as_str(value.get("url")),
            "photographer": _as_str(value.get("photographer")),
            "route": _as_str(value.get("route")),
        }
    return None


def get_media_url(value: Any) -> Optional[str]:
    normalized = normalize_media_value(value)
    if not normalized:
        return None
    return normalized["url"] or None


def is_valid_media_url(url: str) -> bool:
    """Absolute URL (scheme + location) or a site-relative path starting with '/'."""
    if url.startswith("/"):
        return True
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    if not parts.scheme or not re.match(r"^[a-zA-Z][a-zA-Z0-9+.-]*$", parts.scheme):
        return False
    return bool(parts.netloc or parts.path)


# -------- Button --------
def normalize_button_value(value: Any) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {"text": "", "url": "", "target": "_self"}
    target = value.get("target")
    return {
        "text": _as_str(value.get("text")),
        "url": _as_str(value.get("url")),
        "target": target if target in BUTTON_TARGETS else "_self",
    }


def _as_str(v: Any) -> str:
    if v is None:
        return ""
    return v if isinstance(v, str) else str(v)
