# app/services/firebase_storage.py
# Object-storage collaborator (Firebase / GCS bucket): signed PUT grants,
# public URLs and direct server-side uploads.
from __future__ import annotations

import os
import urllib.parse
import uuid
from datetime import timedelta
from typing import BinaryIO, Optional

import firebase_admin
from firebase_admin import credentials, storage

from app.core.errors import StorageNotConfiguredError
from app.core.settings import settings

_FIREBASE_APP = None


def _normalize_bucket(bucket: str) -> str:
    if bucket.startswith("gs://"):
        return bucket[5:]
    return bucket


def is_firebase_configured() -> bool:
    cred_path = settings.FIREBASE_CREDENTIALS_PATH or ""
    bucket = settings.FIREBASE_STORAGE_BUCKET or ""
    if not cred_path or not bucket:
        return False
    return os.path.exists(cred_path)


def _get_firebase_app():
    global _FIREBASE_APP
    if _FIREBASE_APP is not None:
        return _FIREBASE_APP
    try:
        _FIREBASE_APP = firebase_admin.get_app()
        return _FIREBASE_APP
    except ValueError:
        pass

    cred_path = settings.FIREBASE_CREDENTIALS_PATH or ""
    bucket = settings.FIREBASE_STORAGE_BUCKET or ""
    if not cred_path:
        raise StorageNotConfiguredError("FIREBASE_CREDENTIALS_PATH is not set")
    if not os.path.exists(cred_path):
        raise StorageNotConfiguredError("FIREBASE_CREDENTIALS_PATH does not exist")
    if not bucket:
        raise StorageNotConfiguredError("FIREBASE_STORAGE_BUCKET is not set")

    cred = credentials.Certificate(cred_path)
    _FIREBASE_APP = firebase_admin.initialize_app(
        cred,
        {"storageBucket": _normalize_bucket(bucket)},
    )
    return _FIREBASE_APP


class FirebaseUploadSigner:
    """Issues short-lived signed PUT URLs scoped to one object key."""

    def __init__(self, app=None, public_base_url: Optional[str] = None):
        self._app = app or _get_firebase_app()
        self._bucket = storage.bucket(app=self._app)
        self._public_base_url = (public_base_url or settings.MEDIA_PUBLIC_URL or "").rstrip("/")

    def presign_put(self, key: str, content_type: str, expires: timedelta) -> str:
        blob = self._bucket.blob(key)
        return blob.generate_signed_url(
            version="v4",
            expiration=expires,
            method="PUT",
            content_type=content_type,
        )

    def public_url(self, key: str) -> str:
        if self._public_base_url:
            return f"{self._public_base_url}/{key}"
        encoded = urllib.parse.quote(key, safe="/")
        return f"https://storage.googleapis.com/{self._bucket.name}/{encoded}"


def get_upload_signer() -> FirebaseUploadSigner:
    """FastAPI dependency; raises StorageNotConfiguredError instead of returning None."""
    return FirebaseUploadSigner()


def upload_file_to_firebase(file_obj: BinaryIO, content_type: str | None, dest_path: str) -> str:
    app = _get_firebase_app()
    bucket = storage.bucket(app=app)

    token = uuid.uuid4().hex
    blob = bucket.blob(dest_path)
    blob.metadata = {"firebaseStorageDownloadTokens": token}
    blob.upload_from_file(file_obj, content_type=(content_type or "application/octet-stream"))

    if settings.MEDIA_PUBLIC_URL:
        return f"{settings.MEDIA_PUBLIC_URL.rstrip('/')}/{dest_path}"
    bucket_name = _normalize_bucket(settings.FIREBASE_STORAGE_BUCKET or "")
    encoded_path = urllib.parse.quote(dest_path, safe="")
    return f"https://firebasestorage.googleapis.com/v0/b/{bucket_name}/o/{encoded_path}?alt=media&token={token}"
