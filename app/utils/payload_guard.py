# app/utils/payload_guard.py
from __future__ import annotations

import json
from typing import Any, Dict, Optional

from fastapi import HTTPException

from app.core.settings import settings


def entry_fields_kb(fields: Dict[str, Any]) -> float:
    # compact JSON to measure true wire-size
    raw = json.dumps(fields, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    return len(raw) / 1024.0


def enforce_entry_fields_size(fields: Optional[Dict[str, Any]]) -> None:
    """
    Caps the serialized size (KB) of an entry's field values.
    Raises HTTP 413 on overflow. A limit of 0 disables the check.
    """
    limit_kb = float(settings.MAX_ENTRY_DATA_KB or 0)
    if limit_kb <= 0 or fields is None:
        return
    kb = entry_fields_kb(fields)
    if kb > limit_kb:
        raise HTTPException(
            status_code=413,
            detail=f"Payload too large: fields are {kb:.1f}KB, limit is {limit_kb:.0f}KB",
        )
