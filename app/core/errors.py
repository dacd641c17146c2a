# app/core/errors.py
# Domain errors raised by services; endpoints translate them to HTTP.
from __future__ import annotations

from typing import List, TypedDict


class FieldError(TypedDict):
    field: str
    message: str


class ContentError(Exception):
    """Base class for domain errors of the content core."""


class FieldValidationFailed(ContentError):
    def __init__(self, errors: List[FieldError], message: str = "Validation failed"):
        super().__init__(message)
        self.message = message
        self.errors = list(errors)

    def to_detail(self) -> dict:
        return {"message": self.message, "errors": self.errors}


class DuplicateIdentifierError(FieldValidationFailed):
    """api_identifier already taken (model-wide or within a model's fields)."""

    def __init__(self, field: str, message: str):
        super().__init__([{"field": field, "message": message}], message=message)


class NotFoundError(ContentError):
    pass


class StorageNotConfiguredError(ContentError):
    """The object-storage collaborator is missing credentials or a bucket."""


class UploadRejected(ContentError):
    pass


class ProvisioningError(ContentError):
    pass
