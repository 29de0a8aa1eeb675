"""Shared mechanics of the in-memory + full-file stores."""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Any, Generic, Iterable, TypeVar
import logging

import anyio

from eventhub.core.utils import utc_now_iso
from eventhub.domain.errors import NotFoundError, PersistenceError
from eventhub.repositories.json_storage import JsonCollectionFile

logger = logging.getLogger(__name__)

R = TypeVar("R")


class CollectionStore(ABC, Generic[R]):
    """
    Keeps every record in memory, keyed by id, and rewrites the backing file
    after each mutation.

    Mutations run under a per-store lock: id assignment, the in-memory change
    and the file write happen as one step, so concurrent callers queue instead
    of overwriting each other's changes. The in-memory collection is only
    swapped once the file write succeeded.
    """

    kind = "Record"
    mutable_fields: frozenset[str] = frozenset()

    def __init__(self, file: JsonCollectionFile):
        self._file = file
        self._records: dict[int, R] = {}
        self._next_id = 1
        self._lock = anyio.Lock()

    @property
    def path(self):
        return self._file.path

    def __len__(self) -> int:
        return len(self._records)

    @abstractmethod
    def _from_dict(self, data: dict) -> R:
        """Build one record from its JSON object."""

    async def load(self) -> None:
        """(Re)read the backing file and resume ids at max(id) + 1."""
        raw = await anyio.to_thread.run_sync(self._file.load)
        try:
            records = [self._from_dict(item) for item in raw]
        except (KeyError, TypeError, ValueError) as exc:
            logger.exception("Malformed %s record in %s", self.kind.lower(), self._file.path)
            raise PersistenceError(f"Malformed record in {self._file.path.name}", str(self._file.path)) from exc
        self._records = {r.id: r for r in records}
        self._next_id = max(self._records, default=0) + 1
        logger.info("Loaded %d %s record(s) from %s", len(records), self.kind.lower(), self._file.path)

    # -------------------------------------- helpers --------------------------------------
    def _get(self, record_id: int | str) -> R | None:
        try:
            return self._records.get(int(record_id))
        except (TypeError, ValueError):
            return None

    def _require(self, record_id: int | str) -> R:
        record = self._get(record_id)
        if record is None:
            raise NotFoundError(self.kind, record_id)
        return record

    def _take_id(self) -> int:
        new_id = self._next_id
        self._next_id += 1
        return new_id

    def _values(self) -> list[R]:
        return list(self._records.values())

    def _check_fields(self, fields: Iterable[str]) -> None:
        unknown = sorted(set(fields) - self.mutable_fields)
        if unknown:
            raise ValueError(f"Unknown {self.kind.lower()} field(s): {', '.join(unknown)}")

    def _merged(self, record: R, fields: dict[str, Any]) -> R:
        self._check_fields(fields)
        return replace(record, **fields, updated_at=utc_now_iso())

    async def _commit(self, record: R) -> R:
        """Insert or replace one record and rewrite the whole file."""
        records = dict(self._records)
        records[record.id] = record
        await self._write(records)
        return record

    async def _commit_delete(self, record_id: int) -> None:
        records = dict(self._records)
        del records[record_id]
        await self._write(records)

    async def _write(self, records: dict[int, R]) -> None:
        payload = [r.to_dict() for r in records.values()]
        await anyio.to_thread.run_sync(self._file.save, payload)
        self._records = records
