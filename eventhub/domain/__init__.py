"""Record types, errors and schedule helpers shared by stores and routers."""

from eventhub.domain.errors import ConflictError, NotFoundError, PersistenceError, StoreError
from eventhub.domain.models import Event, ListedEvent, User

__all__ = [
    "User",
    "Event",
    "ListedEvent",
    "StoreError",
    "NotFoundError",
    "ConflictError",
    "PersistenceError",
]
