"""
Utility helpers shared across repositories/services.
"""

from datetime import datetime, timezone
import logging


def utc_now_iso() -> str:
    """
    ISO-8601 timestamp in UTC with millisecond precision and a trailing "Z".
    """
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
