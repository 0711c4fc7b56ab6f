"""UTC time helpers."""

from __future__ import annotations

from datetime import datetime, timezone
import time


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_ms() -> int:
    return int(time.time() * 1000)
