"""Use cases that touch both stores: event sign-ups and event removal."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging

from eventhub.domain.errors import ConflictError, NotFoundError, StoreError
from eventhub.domain.schedule import is_upcoming
from eventhub.repositories.event_store import EventStore
from eventhub.repositories.user_store import UserStore

logger = logging.getLogger(__name__)


@dataclass
class RegistrationService:
    """
    Keeps `Event.registered_users` and `User.registered_events` in step.

    The event side is written first. If the user side then fails, the event
    change is undone before the error propagates. A crash between the two
    file writes can still leave them out of sync.

    `cancel_event` is not serialized against `register`. A registration whose
    event side committed before the delete but whose user side lands after
    the cleanup loop leaves a dangling event id in that user's list.
    """

    events: EventStore
    users: UserStore

    async def register(self, event_id: int, user_id: int, now: datetime | None = None) -> None:
        event = await self.events.find_by_id(event_id)
        if event is None:
            raise NotFoundError("Event", event_id)
        if not is_upcoming(event, now):
            raise ConflictError("Cannot register for past events")
        if await self.users.find_by_id(user_id) is None:
            raise NotFoundError("User", user_id)

        await self.events.register_user(event.id, user_id)
        try:
            await self.users.add_registered_event(user_id, event.id)
        except StoreError:
            logger.warning("Rolling back registration of user %s for event %s", user_id, event.id)
            await self._undo(self.events.unregister_user, event.id, user_id)
            raise

    async def unregister(self, event_id: int, user_id: int) -> None:
        await self.events.unregister_user(event_id, user_id)
        try:
            await self.users.remove_registered_event(user_id, int(event_id))
        except NotFoundError:
            # user record is gone; nothing left to update on that side
            logger.warning("User %s vanished while leaving event %s", user_id, event_id)
        except StoreError:
            logger.warning("Restoring registration of user %s for event %s", user_id, event_id)
            await self._undo(self.events.register_user, event_id, user_id)
            raise

    async def cancel_event(self, event_id: int) -> None:
        """Delete an event and drop it from every registered user's list."""
        event = await self.events.find_by_id(event_id)
        if event is None:
            raise NotFoundError("Event", event_id)
        await self.events.delete(event.id)
        for user_id in event.registered_users:
            try:
                await self.users.remove_registered_event(user_id, event.id)
            except NotFoundError:
                logger.info("Registered user %s of event %s no longer exists", user_id, event.id)

    async def _undo(self, action, event_id: int, user_id: int) -> None:
        try:
            await action(event_id, user_id)
        except StoreError:
            logger.exception("Compensation failed for event %s / user %s", event_id, user_id)
