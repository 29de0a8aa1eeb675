from __future__ import annotations

from datetime import datetime, timezone
import time

from fastapi import APIRouter, Depends, HTTPException, Request

from eventhub.core.rate_limiter import rate_limit_ip
from eventhub.domain.errors import NotFoundError
from eventhub.repositories.user_store import UserStore
from eventhub.schemas import ChangePasswordIn, LoginIn, RegisterIn
from eventhub.services.auth_service import (
    AccountExistsError,
    AuthService,
    InvalidCredentialsError,
    RegistrationError,
)
from eventhub.services.session_service import Identity, current_identity

router = APIRouter(prefix="/api", tags=["auth"])
_STARTED = time.monotonic()


def _auth_service(request: Request) -> AuthService:
    svc = getattr(getattr(request.app, "state", None), "auth_service", None)
    if svc is None:
        raise RuntimeError("AuthService not configured")
    return svc


def _users(request: Request) -> UserStore:
    store = getattr(getattr(request.app, "state", None), "users", None)
    if store is None:
        raise RuntimeError("UserStore not configured")
    return store


@router.post("/register", status_code=201)
async def register(body: RegisterIn, request: Request):
    rate_limit_ip(request, "auth:register", limit=20, window_seconds=300)
    try:
        user = await _auth_service(request).register(body.name, body.email, body.password)
    except RegistrationError as exc:
        raise HTTPException(400, exc.message)
    except AccountExistsError as exc:
        raise HTTPException(409, exc.message)
    return {"success": True, "message": "User registered successfully", "user": user}


@router.post("/login")
async def login(body: LoginIn, request: Request):
    rate_limit_ip(request, "auth:login", limit=20, window_seconds=60)
    try:
        result = await _auth_service(request).login(body.email, body.password)
    except InvalidCredentialsError as exc:
        raise HTTPException(401, exc.message)
    return {"success": True, "message": "Login successful", "user": result.user, "token": result.token}


@router.get("/profile")
async def profile(request: Request, identity: Identity = Depends(current_identity)):
    users = _users(request)
    user = await users.find_by_id(identity.id)
    if user is None:
        raise HTTPException(404, "User not found")
    stats = await users.get_user_stats(user.id)
    return {"success": True, "user": user.public_dict(), "stats": stats}


@router.post("/profile/password")
async def change_password(body: ChangePasswordIn, request: Request, identity: Identity = Depends(current_identity)):
    try:
        await _auth_service(request).change_password(identity.id, body.current_password, body.new_password)
    except InvalidCredentialsError as exc:
        raise HTTPException(401, exc.message)
    except RegistrationError as exc:
        raise HTTPException(400, exc.message)
    except NotFoundError:
        raise HTTPException(404, "User not found")
    return {"success": True, "message": "Password updated"}


@router.get("/health")
def health():
    return {
        "success": True,
        "message": "Authentication service is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - _STARTED, 3),
    }
