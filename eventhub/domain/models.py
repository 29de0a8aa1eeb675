"""Record types persisted by the JSON stores.

Python attributes are snake_case; the on-disk and API shape keeps the
camelCase keys the data files have always used.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping


def _ids(values: Any) -> tuple[int, ...]:
    return tuple(int(v) for v in (values or ()))


@dataclass(frozen=True)
class User:
    id: int
    name: str
    email: str
    password_hash: str
    registered_events: tuple[int, ...] = ()
    created_at: str = ""
    updated_at: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "registered_events", _ids(self.registered_events))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "User":
        return cls(
            id=int(data["id"]),
            name=data.get("name") or "",
            email=(data.get("email") or "").lower(),
            password_hash=data.get("password") or "",
            registered_events=data.get("registeredEvents") or (),
            created_at=data.get("createdAt") or "",
            updated_at=data.get("updatedAt") or "",
        )

    def to_dict(self) -> dict:
        payload = self.public_dict()
        payload["password"] = self.password_hash
        return payload

    def public_dict(self) -> dict:
        """Wire shape without the password hash."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "registeredEvents": list(self.registered_events),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass(frozen=True)
class Event:
    id: int
    title: str
    category: str
    date: str
    time: str
    location: str
    description: str
    capacity: int
    price: float
    organizer_id: int | None = None
    organizer_name: str = ""
    registrations: int = 0
    registered_users: tuple[int, ...] = ()
    created_at: str = ""
    updated_at: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "registered_users", _ids(self.registered_users))
        object.__setattr__(self, "capacity", int(self.capacity))
        object.__setattr__(self, "price", float(self.price))
        object.__setattr__(self, "registrations", int(self.registrations))

    @property
    def is_full(self) -> bool:
        return self.registrations >= self.capacity

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Event":
        return cls(
            id=int(data["id"]),
            title=data.get("title") or "",
            category=data.get("category") or "",
            date=data.get("date") or "",
            time=data.get("time") or "",
            location=data.get("location") or "",
            description=data.get("description") or "",
            capacity=data.get("capacity") or 0,
            price=data.get("price") or 0,
            organizer_id=data.get("organizerId"),
            organizer_name=data.get("organizerName") or "",
            registrations=data.get("registrations") or 0,
            registered_users=data.get("registeredUsers") or (),
            created_at=data.get("createdAt") or "",
            updated_at=data.get("updatedAt") or "",
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "category": self.category,
            "date": self.date,
            "time": self.time,
            "location": self.location,
            "description": self.description,
            "capacity": self.capacity,
            "price": self.price,
            "organizerId": self.organizer_id,
            "organizerName": self.organizer_name,
            "registrations": self.registrations,
            "registeredUsers": list(self.registered_users),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass(frozen=True)
class ListedEvent:
    """An event plus the upcoming flag computed at query time."""

    event: Event
    is_upcoming: bool

    def to_dict(self) -> dict:
        payload = self.event.to_dict()
        payload["isUpcoming"] = self.is_upcoming
        return payload


def field_names(record_type: type) -> frozenset[str]:
    return frozenset(f.name for f in fields(record_type))


USER_MUTABLE_FIELDS = field_names(User) - {"id", "created_at", "updated_at"}
EVENT_MUTABLE_FIELDS = field_names(Event) - {"id", "created_at", "updated_at"}
