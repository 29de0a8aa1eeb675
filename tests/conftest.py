from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure the eventhub package is importable when running tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from eventhub.core import config as core_config  # noqa: E402
from eventhub.repositories.event_store import EventStore  # noqa: E402
from eventhub.repositories.json_storage import JsonCollectionFile  # noqa: E402
from eventhub.repositories.user_store import UserStore  # noqa: E402


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture()
def data_dir(tmp_path) -> Path:
    return tmp_path / "data"


@pytest.fixture()
def settings(data_dir, monkeypatch):
    """Point the settings at a temporary data dir and reset the settings cache."""
    monkeypatch.setenv("DATA_DIR", str(data_dir))
    monkeypatch.setenv("JWT_SECRET", "test-secret")
    monkeypatch.setenv("APP_ENV", "test")
    core_config.get_settings.cache_clear()
    yield core_config.get_settings()
    core_config.get_settings.cache_clear()


@pytest.fixture()
async def user_store(data_dir) -> UserStore:
    store = UserStore(JsonCollectionFile(data_dir / "users.json"))
    await store.load()
    return store


@pytest.fixture()
async def event_store(data_dir) -> EventStore:
    store = EventStore(JsonCollectionFile(data_dir / "events.json"))
    await store.load()
    return store


def event_fields(**overrides) -> dict:
    fields = {
        "title": "Jazz Night",
        "category": "Music",
        "date": "2099-01-01",
        "time": "20:00",
        "location": "Blue Room",
        "description": "An evening of live jazz",
        "capacity": 10,
        "price": 15.5,
        "organizer_id": 1,
        "organizer_name": "Ada",
    }
    fields.update(overrides)
    return fields
