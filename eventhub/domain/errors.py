"""Store-level errors surfaced to routers/services."""

from __future__ import annotations


class StoreError(Exception):
    """Base class for store failures, carries a user-safe message."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(StoreError):
    """Raised when operating on an id that is not in the collection."""

    def __init__(self, kind: str, record_id: int):
        super().__init__(f"{kind} not found")
        self.kind = kind
        self.record_id = record_id


class ConflictError(StoreError):
    """Capacity exceeded, duplicate registration or missing registration."""


class PersistenceError(StoreError):
    """Reading or writing the backing JSON file failed."""

    def __init__(self, message: str, path: str):
        super().__init__(message)
        self.path = path
