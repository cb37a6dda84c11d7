"""Unix timestamps as used in events and filters."""

from __future__ import annotations

import time
from datetime import datetime, timezone

Timestamp = int


def now() -> Timestamp:
    """Return the current time in whole seconds since the epoch."""
    return int(time.time())


def timestamp_to_time(t: Timestamp) -> datetime:
    """Convert a timestamp to an aware UTC datetime."""
    return datetime.fromtimestamp(t, tz=timezone.utc)