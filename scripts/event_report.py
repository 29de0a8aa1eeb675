#!/usr/bin/env python3
"""
Print aggregate event stats and how many events are already in the past.

Usage:
  python scripts/event_report.py [--data-dir ./data] [--popular 5]
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

import anyio

from eventhub.core.config import get_settings
from eventhub.repositories.event_store import EventStore
from eventhub.repositories.json_storage import JsonCollectionFile


async def report(events_path: Path, popular: int) -> None:
    store = EventStore(JsonCollectionFile(events_path))
    await store.load()
    stats = await store.get_event_stats()
    print(f"Events file: {events_path}")
    print(f"  Total:         {stats['totalEvents']}")
    print(f"  Upcoming:      {stats['upcomingEvents']}")
    print(f"  Past:          {stats['pastEvents']}")
    print(f"  Registrations: {stats['totalRegistrations']}")
    for category, count in sorted(stats["categoryStats"].items()):
        print(f"    {category}: {count}")
    if popular:
        print("Most popular:")
        for event in await store.get_popular_events(popular):
            print(f"  #{event.id} {event.title} ({event.registrations}/{event.capacity})")
    past = await store.cleanup_past_events()
    print(f"Past events pending cleanup: {past}")


def main() -> None:
    ap = argparse.ArgumentParser(description="Event statistics report")
    ap.add_argument("--data-dir", help="Directory holding the JSON files (default: DATA_DIR)")
    ap.add_argument("--popular", type=int, default=5, help="How many popular events to list (0 to skip)")
    args = ap.parse_args()

    settings = get_settings()
    events_path = Path(args.data_dir) / settings.events_file if args.data_dir else settings.events_path
    anyio.run(report, events_path, max(0, args.popular))


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
