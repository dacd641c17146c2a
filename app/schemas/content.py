# app/schemas/content.py
# Pydantic: field definitions, content models and entries
from __future__ import annotations
import uuid
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, JsonValue

from app.services.field_types import FieldType, ItemFieldType

EntryStatus = Literal["draft", "published", "archived"]

Number = Union[int, float]


def new_field_id() -> str:
    return f"field_{uuid.uuid4().hex}"


# ---------- Field schema ----------
class FieldValidationRules(BaseModel):
    min_length: Optional[int] = Field(None, ge=0)
    max_length: Optional[int] = Field(None, ge=0)
    pattern: Optional[str] = None
    min_value: Optional[Number] = None
    max_value: Optional[Number] = None

    model_config = ConfigDict(extra="ignore")


class ArrayItemField(BaseModel):
    name: str
    api_identifier: str
    # ItemFieldType leaves out array/reference: one nesting level only
    field_type: ItemFieldType
    required: bool = False


class FieldOptions(BaseModel):
    placeholder: Optional[str] = None
    rows: Optional[int] = Field(None, ge=1)
    item_fields: Optional[List[ArrayItemField]] = None

    model_config = ConfigDict(extra="ignore")


class FieldDefinition(BaseModel):
    id: str = Field(default_factory=new_field_id)
    name: str
    api_identifier: str = ""
    field_type: FieldType
    required: bool = False
    help_text: Optional[str] = None
    validation: Optional[FieldValidationRules] = None
    default_value: Optional[JsonValue] = None
    reference_to: Optional[str] = None
    options: Optional[FieldOptions] = None

    @property
    def item_fields(self) -> List[ArrayItemField]:
        if self.options and self.options.item_fields:
            return list(self.options.item_fields)
        return []

    def to_storage(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


# ---------- ContentModel ----------
class ContentModelBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    description: str = Field("", max_length=1024)
    icon: str = Field("", max_length=64)


class ContentModelCreate(ContentModelBase):
    # empty -> derived from name
    api_identifier: str = Field("", max_length=64)
    fields: List[FieldDefinition] = Field(default_factory=list)


class ContentModelUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=128)
    api_identifier: Optional[str] = Field(None, max_length=64)
    description: Optional[str] = Field(None, max_length=1024)
    icon: Optional[str] = Field(None, max_length=64)
    fields: Optional[List[FieldDefinition]] = None


class FieldReorder(BaseModel):
    order: List[str] = Field(..., description="Field ids in the new display order")


class ContentModelOut(ContentModelBase):
    model_config = ConfigDict(from_attributes=True)
    id: str
    api_identifier: str
    fields: List[FieldDefinition]
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ContentModelSchemaOut(BaseModel):
    """What downstream frontends consume to understand a model's shape."""
    id: str
    name: str
    api_identifier: str
    description: str
    fields: List[FieldDefinition]


# ---------- ContentEntry ----------
class EntryCreate(BaseModel):
    content_model_id: str
    title: str = Field(..., max_length=255)
    # None -> seeded from the model's defaults
    fields: Optional[Dict[str, JsonValue]] = None
    status: EntryStatus = "draft"
    # Only honoured under the "manual" published_at policy
    published_at: Optional[datetime] = None


class EntryUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=255)
    fields: Optional[Dict[str, JsonValue]] = None
    status: Optional[EntryStatus] = None
    published_at: Optional[datetime] = None

    # content_model_id is fixed at creation: silently dropped here
    model_config = ConfigDict(extra="ignore")


class EntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    content_model_id: str
    title: str
    fields: Dict[str, JsonValue]
    status: EntryStatus
    published_at: Optional[datetime] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class EntryJsonOut(BaseModel):
    id: str
    model: Optional[str] = None
    title: str
    status: EntryStatus
    published_at: Optional[datetime] = None
    fields: Dict[str, JsonValue]
    created_at: datetime
    updated_at: datetime


# ---------- Validation ----------
class FieldErrorOut(BaseModel):
    field: str
    message: str


class ValidationResult(BaseModel):
    valid: bool
    errors: List[FieldErrorOut] = Field(default_factory=list)


class ValidateFieldsIn(BaseModel):
    fields: Dict[str, JsonValue] = Field(default_factory=dict)


# ---------- Reference picker ----------
class ReferenceOption(BaseModel):
    id: str
    title: str


class ReferenceOptionsOut(BaseModel):
    model_api_identifier: str
    found: bool
    options: List[ReferenceOption] = Field(default_factory=list)
    empty_label: Optional[str] = None
