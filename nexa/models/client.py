from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, EmailStr, Field


class ClientCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    contact_name: str = Field(default="", max_length=255)
    industry: str = Field(default="", max_length=100)
    email: EmailStr
    phone: str = Field(default="", max_length=50)
    notes: str = ""
    projects: list[str] = Field(default_factory=list)
    custom_data: dict[str, Any] = Field(default_factory=dict)


class ClientUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    contact_name: Optional[str] = Field(default=None, max_length=255)
    industry: Optional[str] = Field(default=None, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=50)
    notes: Optional[str] = None
    projects: Optional[list[str]] = None
    custom_data: Optional[dict[str, Any]] = None
    active: Optional[bool] = None


class ClientRecord(BaseModel):
    id: str
    name: str
    contact_name: str = ""
    industry: str = ""
    email: str
    phone: str = ""
    notes: str = ""
    projects: list[str] = Field(default_factory=list)
    active: bool = True
    custom_data: dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
