# app/services/publish_service.py
# ⟶ published_at policies for entries, pages and posts
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal, Optional

Status = Literal["draft", "published", "archived"]


class PublishedAtPolicy(str, Enum):
    """
    How `published_at` follows `status`.
      - stamp_and_clear: stamped on the transition to published, kept while
        published, null for any other status (page/entry editors).
      - stamp_and_retain: stamped on the transition to published, kept when
        the entry later leaves published.
      - manual: whatever the author sends, independent of status (post editor).
    """
    stamp_and_clear = "stamp_and_clear"
    stamp_and_retain = "stamp_and_retain"
    manual = "manual"


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def resolve_published_at(
    policy: PublishedAtPolicy | str,
    *,
    new_status: Status,
    previous_status: Optional[Status] = None,
    previous_published_at: Optional[datetime] = None,
    requested: Any = UNSET,
    now: Optional[datetime] = None,
) -> Optional[datetime]:
    """
    Compute the published_at to persist. `previous_status` is None on create;
    `requested` is UNSET when the caller did not send a published_at at all.
    """
    policy = PublishedAtPolicy(policy)
    now = now or _now_utc()

    if policy == PublishedAtPolicy.manual:
        if requested is UNSET:
            return previous_published_at
        return requested

    if new_status == "published":
        if previous_status == "published" and previous_published_at is not None:
            return previous_published_at
        return now

    if policy == PublishedAtPolicy.stamp_and_clear:
        return None
    # stamp_and_retain: leaving published keeps the historical stamp
    return previous_published_at
