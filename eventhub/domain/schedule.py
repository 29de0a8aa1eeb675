"""Pure helpers for event start times (date + time strings)."""
from __future__ import annotations

from datetime import datetime

from eventhub.domain.models import Event


def event_start(date: str, time: str) -> datetime | None:
    """Combine "YYYY-MM-DD" and "HH:MM" into a naive local datetime."""
    try:
        return datetime.fromisoformat(f"{(date or '').strip()}T{(time or '').strip()}")
    except ValueError:
        return None


def sort_key(event: Event) -> datetime:
    # unparseable dates sort last
    return event_start(event.date, event.time) or datetime.max


def is_upcoming(event: Event, now: datetime | None = None) -> bool:
    """True when the event starts strictly after `now`."""
    start = event_start(event.date, event.time)
    if start is None:
        return False
    return start > (now or datetime.now())
