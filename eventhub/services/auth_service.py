"""
Authentication and identity related use cases.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging

import anyio

from eventhub.core.config import Settings
from eventhub.core.security import hash_password, password_needs_rehash
from eventhub.repositories.user_store import UserStore
from eventhub.services.session_service import issue_token

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Base class for authentication-related exceptions."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RegistrationError(AuthError):
    pass


class AccountExistsError(AuthError):
    pass


class InvalidCredentialsError(AuthError):
    pass


@dataclass
class LoginSuccess:
    user: dict
    token: str


@dataclass
class AuthService:
    """Handles signup, login and password changes on top of the UserStore."""

    users: UserStore
    settings: Settings

    def _check_password_length(self, password: str) -> None:
        minimum = self.settings.password_min_length
        if len(password or "") < minimum:
            raise RegistrationError(f"Password must be at least {minimum} characters long")

    # -------------------------------------- signup --------------------------------------
    async def register(self, name: str, email: str, password: str) -> dict:
        name = (name or "").strip()
        raw_email = (email or "").strip().lower()
        if not name or not raw_email or not password:
            raise RegistrationError("All fields are required")
        self._check_password_length(password)
        if await self.users.find_by_email(raw_email):
            raise AccountExistsError("User with this email already exists")
        password_hash = await anyio.to_thread.run_sync(hash_password, password)
        return await self.users.create(name, raw_email, password_hash)

    # -------------------------------------- login --------------------------------------
    async def login(self, email: str, password: str) -> LoginSuccess:
        raw_email = (email or "").strip()
        if not raw_email or not password:
            raise InvalidCredentialsError("Email and password are required")
        user = await self.users.find_by_email(raw_email)
        if not user or not await self.users.validate_password(user.id, password):
            raise InvalidCredentialsError("Invalid email or password")
        if password_needs_rehash(user.password_hash):
            logger.info("Rehashing password for user %s", user.id)
            await self.users.change_password(user.id, password)
            user = await self.users.find_by_id(user.id)
        return LoginSuccess(user=user.public_dict(), token=issue_token(user, self.settings))

    # -------------------------------------- password --------------------------------------
    async def change_password(self, user_id: int, current_password: str, new_password: str) -> None:
        if not await self.users.validate_password(user_id, current_password):
            raise InvalidCredentialsError("Current password is incorrect")
        self._check_password_length(new_password)
        await self.users.change_password(user_id, new_password)
