# app/services/upload_service.py
# Upload grants (pre-signed PUT) and pre-upload file checks.
from __future__ import annotations

import logging
import math
import re
import time
from datetime import timedelta
from typing import Dict, Literal, Optional, Protocol

from app.core.errors import UploadRejected
from app.core.settings import settings

logger = logging.getLogger(__name__)

# First bytes per file extension / MIME fragment
MAGIC_BYTES: Dict[str, bytes] = {
    "png": b"\x89\x50\x4e\x47",
    "jpg": b"\xff\xd8\xff",
    "jpeg": b"\xff\xd8\xff",
    "pdf": b"\x25\x50\x44\x46",  # %PDF
    "gif": b"\x47\x49\x46",
    "webp": b"\x52\x49\x46\x46",  # RIFF
}

SNIFF_BYTES = 100
TRUSTED_TEXT_TYPES = ("text/csv", "text/plain")


class UploadSigner(Protocol):
    def presign_put(self, key: str, content_type: str, expires: timedelta) -> str: ...
    def public_url(self, key: str) -> str: ...


def allowed_mime_types() -> list[str]:
    return list(settings.UPLOAD_ALLOWED_MIME_TYPES)


# -------- Grants --------
def _check_filename(filename: str) -> None:
    if ".." in filename or "/" in filename:
        raise UploadRejected("Invalid filename")


def object_key_for(filename: str) -> str:
    return f"{settings.UPLOAD_KEY_PREFIX}/{filename}"


def issue_upload_grant(signer: UploadSigner, *, filename: Optional[str], content_type: Optional[str]) -> Dict[str, str]:
    """
    Validate the request and return {presignedUrl, publicUrl, filename}.
    The grant is a PUT on exactly `media/<filename>`.
    """
    if not filename or not content_type:
        raise UploadRejected("Missing filename or contentType")
    if content_type not in allowed_mime_types():
        raise UploadRejected("File type not allowed")
    _check_filename(filename)

    key = object_key_for(filename)
    expires = timedelta(minutes=settings.UPLOAD_GRANT_EXPIRE_MINUTES)
    presigned = signer.presign_put(key, content_type, expires)
    logger.info("upload grant issued for %s (%s), valid %s", key, content_type, expires)
    return {
        "presignedUrl": presigned,
        "publicUrl": signer.public_url(key),
        "filename": filename,
    }


# -------- File checks --------
def _magic_matches(filename: str, content_type: str, head: bytes) -> bool:
    if content_type == "image/svg+xml" or filename.lower().endswith(".svg"):
        text = head[:SNIFF_BYTES].decode("utf-8", errors="ignore")
        return "<svg" in text or "<?xml" in text

    if content_type in TRUSTED_TEXT_TYPES:
        return True

    lowered = filename.lower()
    for kind, magic in MAGIC_BYTES.items():
        if kind in content_type or lowered.endswith(f".{kind}"):
            if head[: len(magic)] == magic:
                return True
    return False


def validate_upload_file(*, filename: str, content_type: str, size: int, head: bytes) -> None:
    """
    Reject before any network call: size cap, allow-listed MIME, and first
    bytes that corroborate the declared type. `head` is the first bytes of
    the file (at least 100 for SVG sniffing).
    """
    max_bytes = settings.UPLOAD_MAX_BYTES
    if size > max_bytes:
        raise UploadRejected(f"File is too large. Maximum size is {max_bytes // (1024 * 1024)}MB")
    if content_type not in allowed_mime_types():
        raise UploadRejected(
            f"File type {content_type} is not allowed. Allowed types: PNG, JPG, GIF, WebP, SVG, PDF, CSV, TXT"
        )
    if not _magic_matches(filename, content_type, head):
        raise UploadRejected("File content does not match the file type. Please check the file and try again.")


# -------- Helpers --------
def file_category(mime_type: str) -> Literal["image", "document", "spreadsheet", "other"]:
    if mime_type.startswith("image/"):
        return "image"
    if mime_type in ("application/pdf", "text/plain"):
        return "document"
    if mime_type == "text/csv":
        return "spreadsheet"
    return "other"


def format_file_size(num_bytes: int) -> str:
    if num_bytes == 0:
        return "0 Bytes"
    k = 1024
    sizes = ["Bytes", "KB", "MB"]
    i = min(int(math.floor(math.log(num_bytes) / math.log(k))), len(sizes) - 1)
    value = round(num_bytes / math.pow(k, i), 2)
    return f"{value:g} {sizes[i]}"


def generate_unique_filename(original: str, *, now_ms: Optional[int] = None) -> str:
    """'My Photo.PNG' -> 'my-photo-<millis>.PNG'"""
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    if "." in original:
        stem, ext = original.rsplit(".", 1)
    else:
        stem, ext = original, ""
    sanitized = re.sub(r"-+", "-", re.sub(r"[^a-z0-9\-_]", "-", stem.lower()))
    return f"{sanitized}-{stamp}.{ext}"
