from pydantic import BaseModel, ConfigDict, Field

from nexa.core.rbac import Role


class LoginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user: str = Field(min_length=3, max_length=100)
    password: str = Field(alias="pass", min_length=6)


class UserInfo(BaseModel):
    id: str
    username: str
    email: str
    role: Role


class LoginResponse(BaseModel):
    token: str
    user_info: UserInfo


class TokenPayload(BaseModel):
    """Claims carried by a verified session token."""

    id: str
    username: str
    role: Role
