"""
Full-file JSON persistence shared by the stores.

Each collection lives in its own file as one pretty-printed JSON array.
There is no record-level persistence: every save rewrites the whole file.
"""

from __future__ import annotations

from pathlib import Path
import json
import logging
import os
import tempfile

from eventhub.domain.errors import PersistenceError

logger = logging.getLogger(__name__)


class JsonCollectionFile:
    """Reads and writes a whole collection (a JSON array of objects)."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def load(self) -> list[dict]:
        """Return the stored array, or [] when the file does not exist yet."""
        if not self.path.exists():
            logger.info("No data file at %s, starting with an empty collection", self.path)
            return []
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            logger.exception("Error loading %s", self.path)
            raise PersistenceError(f"Could not read {self.path.name}", str(self.path)) from exc
        if not isinstance(data, list):
            logger.error("Data file %s does not hold a JSON array", self.path)
            raise PersistenceError(f"{self.path.name} is not a JSON array", str(self.path))
        return data

    def save(self, records: list[dict]) -> None:
        """Rewrite the file with `records`, replacing it atomically."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(records, f, ensure_ascii=False, indent=2)
                os.replace(tmp_name, self.path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as exc:
            logger.exception("Error saving %s", self.path)
            raise PersistenceError(f"Could not write {self.path.name}", str(self.path)) from exc
