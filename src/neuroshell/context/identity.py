"""Injectable clocks and id generators.

Production code uses wall-clock time and random UUIDs.  Test mode swaps in a
fixed clock and a per-context sequential generator so ids and timestamps in
golden output are reproducible without any process-global counters.
"""

from __future__ import annotations

import threading
import uuid
from datetime import datetime, timezone
from typing import Protocol

TEST_EPOCH = datetime(2025, 1, 1, tzinfo=timezone.utc)


class Clock(Protocol):
    def now(self) -> datetime: ...


class IdGenerator(Protocol):
    def new_id(self) -> str: ...


class SystemClock:
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """Always returns the same instant."""

    def __init__(self, instant: datetime = TEST_EPOCH):
        self.instant = instant

    def now(self) -> datetime:
        return self.instant


class RandomIdGenerator:
    """Random version-4 UUID strings."""

    def new_id(self) -> str:
        return str(uuid.uuid4())


class SequentialIdGenerator:
    """UUID-shaped ids from a counter: ``00000001-0000-4000-8000-000000000001``."""

    def __init__(self) -> None:
        self._counter = 0
        self._lock = threading.Lock()

    def new_id(self) -> str:
        with self._lock:
            self._counter += 1
            value = self._counter
        return f"{value:08x}-0000-4000-8000-{value:012x}"

    def reset(self) -> None:
        with self._lock:
            self._counter = 0
