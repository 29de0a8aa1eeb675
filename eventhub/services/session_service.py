"""Bearer token helpers (issue, decode, FastAPI dependencies)."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from eventhub.core.config import Settings, get_settings
from eventhub.domain.models import User

bearer_scheme = HTTPBearer(auto_error=False)


class TokenInvalidError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class Identity:
    """Authenticated caller as carried by the token. Trusted as-is."""

    id: int
    email: str
    name: str


def issue_token(user: User, settings: Settings | None = None) -> str:
    settings = settings or get_settings()
    expires_at = datetime.now(timezone.utc) + timedelta(seconds=max(60, settings.token_ttl_seconds))
    claims = {"id": user.id, "email": user.email, "name": user.name, "exp": expires_at}
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str, settings: Settings | None = None) -> Identity:
    settings = settings or get_settings()
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError as exc:
        raise TokenInvalidError("Token expired") from exc
    except JWTError as exc:
        raise TokenInvalidError("Invalid token") from exc
    try:
        return Identity(id=int(claims["id"]), email=str(claims.get("email", "")), name=str(claims.get("name", "")))
    except (KeyError, TypeError, ValueError) as exc:
        raise TokenInvalidError("Invalid token") from exc


def _app_settings(request: Request) -> Settings:
    return getattr(getattr(request.app, "state", None), "settings", None) or get_settings()


def current_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Identity:
    if credentials is None or not credentials.credentials:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Access token required")
    try:
        return decode_token(credentials.credentials, _app_settings(request))
    except TokenInvalidError as exc:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, exc.message)


def optional_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[Identity]:
    """Like current_identity, but an absent or bad token just means anonymous."""
    if credentials is None or not credentials.credentials:
        return None
    try:
        return decode_token(credentials.credentials, _app_settings(request))
    except TokenInvalidError:
        return None
