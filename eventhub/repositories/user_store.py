"""User collection backed by a JSON file."""
from __future__ import annotations

from typing import Optional
import logging

import anyio

from eventhub.core.security import hash_password, verify_password
from eventhub.core.utils import utc_now_iso
from eventhub.domain.models import USER_MUTABLE_FIELDS, User
from eventhub.repositories.collection import CollectionStore

logger = logging.getLogger(__name__)


class UserStore(CollectionStore[User]):
    """
    Identity records: lookup by id/email, password checks and the list of
    events each user registered for.

    Email uniqueness is not enforced here; callers check `find_by_email`
    before `create`.
    """

    kind = "User"
    mutable_fields = USER_MUTABLE_FIELDS

    def _from_dict(self, data: dict) -> User:
        return User.from_dict(data)

    # -------------------------------------- lookups --------------------------------------
    async def find_by_id(self, user_id: int | str) -> Optional[User]:
        return self._get(user_id)

    async def find_by_email(self, email: str) -> Optional[User]:
        needle = (email or "").strip().lower()
        if not needle:
            return None
        for user in self._records.values():
            if user.email == needle:
                return user
        return None

    async def get_all_users(self) -> list[dict]:
        return [u.public_dict() for u in self._records.values()]

    async def search_users(self, term: str) -> list[dict]:
        needle = (term or "").lower()
        return [
            u.public_dict()
            for u in self._records.values()
            if needle in u.name.lower() or needle in u.email
        ]

    async def get_user_stats(self, user_id: int | str) -> dict:
        user = self._require(user_id)
        return {
            "totalEvents": len(user.registered_events),
            "memberSince": user.created_at,
            "lastUpdated": user.updated_at,
        }

    # -------------------------------------- mutations --------------------------------------
    async def create(self, name: str, email: str, password_hash: str) -> dict:
        """Persist a new user and return it without the password hash."""
        async with self._lock:
            now = utc_now_iso()
            user = User(
                id=self._take_id(),
                name=name,
                email=(email or "").strip().lower(),
                password_hash=password_hash,
                registered_events=(),
                created_at=now,
                updated_at=now,
            )
            await self._commit(user)
        logger.info("Created user %s", user.id)
        return user.public_dict()

    async def update(self, user_id: int | str, **fields) -> dict:
        if "email" in fields:
            fields["email"] = (fields["email"] or "").strip().lower()
        async with self._lock:
            user = self._merged(self._require(user_id), fields)
            await self._commit(user)
        return user.public_dict()

    async def delete(self, user_id: int | str) -> bool:
        async with self._lock:
            user = self._require(user_id)
            await self._commit_delete(user.id)
        logger.info("Deleted user %s", user.id)
        return True

    async def add_registered_event(self, user_id: int | str, event_id: int | str) -> bool:
        event_id = int(event_id)
        async with self._lock:
            user = self._require(user_id)
            if event_id in user.registered_events:
                return True
            await self._commit(self._merged(user, {"registered_events": user.registered_events + (event_id,)}))
        return True

    async def remove_registered_event(self, user_id: int | str, event_id: int | str) -> bool:
        event_id = int(event_id)
        async with self._lock:
            user = self._require(user_id)
            remaining = tuple(e for e in user.registered_events if e != event_id)
            await self._commit(self._merged(user, {"registered_events": remaining}))
        return True

    # -------------------------------------- passwords --------------------------------------
    async def validate_password(self, user_id: int | str, password: str) -> bool:
        """Compare `password` with the stored hash; any failure reads as False."""
        user = self._get(user_id)
        if user is None:
            return False
        try:
            return await anyio.to_thread.run_sync(verify_password, password, user.password_hash)
        except Exception:
            logger.exception("Error validating password for user %s", user.id)
            return False

    async def change_password(self, user_id: int | str, new_password: str) -> bool:
        new_hash = await anyio.to_thread.run_sync(hash_password, new_password)
        async with self._lock:
            user = self._merged(self._require(user_id), {"password_hash": new_hash})
            await self._commit(user)
        logger.info("Password changed for user %s", user.id)
        return True
