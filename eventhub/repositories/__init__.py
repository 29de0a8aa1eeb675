"""
Persistence adapters.

Both stores keep their whole collection in memory and rewrite a JSON file on
every mutation. Services should depend on the store objects rather than
touching the JSON files.
"""

from .event_store import EventStore
from .json_storage import JsonCollectionFile
from .user_store import UserStore

__all__ = ["EventStore", "JsonCollectionFile", "UserStore"]
