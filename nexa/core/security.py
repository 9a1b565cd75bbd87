from datetime import datetime, timedelta, timezone
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError as PydanticValidationError

from nexa.core.config import Settings, settings as default_settings
from nexa.core.errors import InvalidToken, TokenExpired
from nexa.models.auth import TokenPayload, UserInfo


pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Stored value is not a recognizable hash.
        return False


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(
    user: UserInfo,
    settings: Settings | None = None,
    expires_delta: timedelta | None = None,
) -> tuple[str, datetime]:
    settings = settings or default_settings
    issued_at = datetime.now(timezone.utc)
    expire = issued_at + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode: dict[str, Any] = {
        "sub": user.id,
        "id": user.id,
        "username": user.username,
        "role": user.role.value,
        "iat": issued_at,
        "exp": expire,
    }
    encoded_jwt = jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)
    return encoded_jwt, expire


def decode_access_token(token: str, settings: Settings | None = None) -> TokenPayload:
    settings = settings or default_settings
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except ExpiredSignatureError as exc:
        raise TokenExpired() from exc
    except JWTError as exc:
        raise InvalidToken() from exc

    try:
        return TokenPayload(
            id=payload.get("id") or payload.get("sub"),
            username=payload.get("username"),
            role=payload.get("role"),
        )
    except PydanticValidationError as exc:
        raise InvalidToken() from exc
