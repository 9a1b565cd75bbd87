from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, model_validator

from nexa.core.rbac import Role


class UserPublic(BaseModel):
    id: str
    username: str
    email: str
    role: Role
    active: bool = True
    created_at: Optional[datetime] = None


class UserCreate(BaseModel):
    username: str = Field(min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6)
    role: Role


class UserUpdate(BaseModel):
    username: Optional[str] = Field(default=None, min_length=3, max_length=100)
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    role: Optional[Role] = None
    active: Optional[bool] = None

    @model_validator(mode="after")
    def validate_password(self) -> "UserUpdate":
        # An empty password means "keep the current one".
        if self.password and len(self.password) < 6:
            raise ValueError("La contraseña debe tener al menos 6 caracteres")
        return self

    def to_changes(self) -> "UserChanges":
        return UserChanges(
            username=self.username,
            email=str(self.email) if self.email is not None else None,
            password=self.password or None,
            role=self.role,
            active=self.active,
        )


class UserStatusUpdate(BaseModel):
    active: bool


@dataclass(frozen=True)
class UserChanges:
    """Partial identity update; ``None`` means the field is left as is."""

    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[Role] = None
    active: Optional[bool] = None

    def is_empty(self) -> bool:
        return all(
            value is None
            for value in (self.username, self.email, self.password, self.role, self.active)
        )
