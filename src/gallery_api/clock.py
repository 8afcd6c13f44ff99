import threading
import time
from datetime import datetime, timedelta, timezone
from typing import Optional

_lock = threading.Lock()
_last_ms = 0


def now_ms() -> int:
    return time.time_ns() // 1_000_000


def next_timestamp_ms() -> int:
    """Millisecond epoch timestamp, strictly increasing across calls in this process."""
    global _last_ms
    with _lock:
        ts = max(now_ms(), _last_ms + 1)
        _last_ms = ts
        return ts


def iso_utc(ts_ms: int) -> str:
    """Format a millisecond timestamp as e.g. 2024-06-01T12:00:00.000Z."""
    dt = datetime.fromtimestamp(ts_ms // 1000, tz=timezone.utc) + timedelta(milliseconds=ts_ms % 1000)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(value) -> Optional[datetime]:
    """Parse an ISO-8601 date or timestamp; naive values are read as UTC."""
    if not isinstance(value, str) or not value:
        return None
    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt
