"""Event collection backed by a JSON file."""
from __future__ import annotations

from collections import Counter
from datetime import datetime
from typing import Optional
import logging

from eventhub.core.utils import utc_now_iso
from eventhub.domain.errors import ConflictError
from eventhub.domain.models import EVENT_MUTABLE_FIELDS, Event, ListedEvent
from eventhub.domain.schedule import is_upcoming, sort_key
from eventhub.repositories.collection import CollectionStore

logger = logging.getLogger(__name__)


class EventStore(CollectionStore[Event]):
    """
    Event records plus registration bookkeeping.

    `registrations` always equals `len(registered_users)` as long as changes
    go through `register_user`/`unregister_user`; `update()` does not
    recompute it.
    """

    kind = "Event"
    mutable_fields = EVENT_MUTABLE_FIELDS

    def _from_dict(self, data: dict) -> Event:
        return Event.from_dict(data)

    # -------------------------------------- queries --------------------------------------
    async def find_by_id(self, event_id: int | str) -> Optional[Event]:
        return self._get(event_id)

    async def find_all(self, now: datetime | None = None) -> list[ListedEvent]:
        """All events, earliest start first, flagged with `is_upcoming`."""
        now = now or datetime.now()
        ordered = sorted(self._records.values(), key=sort_key)
        return [ListedEvent(event=e, is_upcoming=is_upcoming(e, now)) for e in ordered]

    async def find_by_category(self, category: str) -> list[Event]:
        wanted = (category or "").lower()
        return [e for e in self._records.values() if e.category.lower() == wanted]

    async def search(self, term: str) -> list[Event]:
        needle = (term or "").lower()
        return [
            e
            for e in self._records.values()
            if needle in e.title.lower()
            or needle in e.description.lower()
            or needle in e.location.lower()
            or needle in e.category.lower()
        ]

    async def get_upcoming_events(self, limit: int = 10, now: datetime | None = None) -> list[Event]:
        now = now or datetime.now()
        upcoming = [e for e in self._records.values() if is_upcoming(e, now)]
        return sorted(upcoming, key=sort_key)[:limit]

    async def get_popular_events(self, limit: int = 5) -> list[Event]:
        ranked = sorted(self._records.values(), key=lambda e: e.registrations, reverse=True)
        return ranked[:limit]

    async def get_events_by_organizer(self, organizer_id: int) -> list[Event]:
        return [e for e in self._records.values() if e.organizer_id == organizer_id]

    async def get_event_stats(self, now: datetime | None = None) -> dict:
        now = now or datetime.now()
        events = self._values()
        upcoming = sum(1 for e in events if is_upcoming(e, now))
        return {
            "totalEvents": len(events),
            "upcomingEvents": upcoming,
            "pastEvents": len(events) - upcoming,
            "totalRegistrations": sum(e.registrations for e in events),
            "categoryStats": dict(Counter(e.category for e in events)),
        }

    async def cleanup_past_events(self, now: datetime | None = None) -> int:
        """Count events that already started. Nothing is archived or removed."""
        now = now or datetime.now()
        past = sum(1 for e in self._records.values() if not is_upcoming(e, now))
        logger.info("Found %d past events", past)
        return past

    # -------------------------------------- mutations --------------------------------------
    async def create(
        self,
        *,
        title: str,
        category: str,
        date: str,
        time: str,
        location: str,
        description: str,
        capacity: int,
        price: float,
        organizer_id: int | None = None,
        organizer_name: str = "",
        registrations: int = 0,
        registered_users: tuple[int, ...] = (),
    ) -> Event:
        async with self._lock:
            now = utc_now_iso()
            event = Event(
                id=self._take_id(),
                title=title,
                category=category,
                date=date,
                time=time,
                location=location,
                description=description,
                capacity=capacity,
                price=price,
                organizer_id=organizer_id,
                organizer_name=organizer_name,
                registrations=registrations,
                registered_users=registered_users,
                created_at=now,
                updated_at=now,
            )
            await self._commit(event)
        logger.info("Created event %s (%s)", event.id, event.title)
        return event

    async def update(self, event_id: int | str, **fields) -> Event:
        async with self._lock:
            event = self._merged(self._require(event_id), fields)
            await self._commit(event)
        return event

    async def delete(self, event_id: int | str) -> bool:
        async with self._lock:
            event = self._require(event_id)
            await self._commit_delete(event.id)
        logger.info("Deleted event %s", event.id)
        return True

    async def register_user(self, event_id: int | str, user_id: int | str) -> bool:
        user_id = int(user_id)
        async with self._lock:
            event = self._require(event_id)
            if event.is_full:
                raise ConflictError("Event is full")
            if user_id in event.registered_users:
                raise ConflictError("User already registered for this event")
            await self._commit(
                self._merged(
                    event,
                    {
                        "registered_users": event.registered_users + (user_id,),
                        "registrations": event.registrations + 1,
                    },
                )
            )
        logger.debug("User %s registered for event %s", user_id, event.id)
        return True

    async def unregister_user(self, event_id: int | str, user_id: int | str) -> bool:
        user_id = int(user_id)
        async with self._lock:
            event = self._require(event_id)
            if user_id not in event.registered_users:
                raise ConflictError("User not registered for this event")
            await self._commit(
                self._merged(
                    event,
                    {
                        "registered_users": tuple(u for u in event.registered_users if u != user_id),
                        "registrations": max(0, event.registrations - 1),
                    },
                )
            )
        logger.debug("User %s unregistered from event %s", user_id, event.id)
        return True
