from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class FieldScope(str, Enum):
    PROJECT = "project"
    CLIENT = "client"


PROJECT_FIELD_TYPES = frozenset(
    {"text", "number", "date", "url", "email", "select", "multiselect", "textarea", "checkbox"}
)
CLIENT_FIELD_TYPES = frozenset({"text", "number", "date", "longtext", "select"})

FIELD_TYPES: dict[FieldScope, frozenset[str]] = {
    FieldScope.PROJECT: PROJECT_FIELD_TYPES,
    FieldScope.CLIENT: CLIENT_FIELD_TYPES,
}


class FieldDefinitionCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    label: str = Field(min_length=1, max_length=255)
    type: str
    category: str = Field(default="General", max_length=100)
    is_required: bool = False
    sort_order: int = Field(default=0, ge=0)
    options: Optional[list[str]] = None


class FieldDefinitionUpdate(BaseModel):
    label: Optional[str] = Field(default=None, min_length=1, max_length=255)
    type: Optional[str] = None
    category: Optional[str] = Field(default=None, max_length=100)
    is_required: Optional[bool] = None
    sort_order: Optional[int] = Field(default=None, ge=0)
    options: Optional[list[str]] = None
    active: Optional[bool] = None


class FieldDefinitionRecord(BaseModel):
    id: str
    scope: FieldScope
    name: str
    label: str
    type: str
    category: str = "General"
    is_required: bool = False
    sort_order: int = 0
    options: Optional[list[str]] = None
    active: bool = True
