"""Suppression strategies for high-frequency, low-information signals.

Three independent policies, each keyed per logical unit (form,
canvas, audio context, ...):

- :class:`TrailingDebounce`: time-based; only the last event of a
  burst is emitted, once, after a quiet window.
- :class:`CountThreshold`: count-based; either the first *N* reports
  pass, or a single report passes once the count exceeds *N*.
- :class:`OneShotLatch`: pattern-based; a single report passes the
  first time every required signal has been seen.

Count and latch strategies answer synchronously through ``report``.
The debounce emits later through its callback on the asyncio loop.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Collection, Hashable
from typing import Generic, Literal, TypeVar

from privacy_monitor.utils import logger

log = logger.create_logger("Suppression")

T = TypeVar("T")


class TrailingDebounce(Generic[T]):
    """Emit the last event of each burst once the key has gone quiet."""

    def __init__(
        self,
        window_s: float,
        emit: Callable[[T], None],
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        if window_s <= 0:
            raise ValueError("window_s must be positive")
        self._window_s = window_s
        self._emit = emit
        self._loop = loop
        self._handles: dict[Hashable, asyncio.TimerHandle] = {}

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def report(self, key: Hashable, event: T) -> None:
        """Restart the quiet window for *key* with *event* as the pending value."""
        handle = self._handles.pop(key, None)
        if handle is not None:
            handle.cancel()
        self._handles[key] = self._get_loop().call_later(self._window_s, self._fire, key, event)

    def _fire(self, key: Hashable, event: T) -> None:
        self._handles.pop(key, None)
        self._emit(event)

    def pending(self, key: Hashable) -> bool:
        return key in self._handles

    def cancel(self, key: Hashable) -> bool:
        """Drop the pending event for *key* without emitting it."""
        handle = self._handles.pop(key, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def cancel_all(self) -> int:
        """Cancel every pending timer.  Returns how many were cancelled."""
        handles = list(self._handles.values())
        self._handles.clear()
        for handle in handles:
            handle.cancel()
        return len(handles)


ThresholdMode = Literal["first", "exceed_once"]


class CountThreshold:
    """Count reports per key and let a bounded number through.

    ``"first"`` passes the first *limit* reports of each key.
    ``"exceed_once"`` passes exactly one report per key: the first
    one whose running count is greater than *limit*.
    """

    def __init__(self, limit: int, mode: ThresholdMode = "first") -> None:
        if limit < 0:
            raise ValueError("limit must be non-negative")
        self._limit = limit
        self._mode = mode
        self._counts: dict[Hashable, int] = {}
        self._fired: set[Hashable] = set()

    def report(self, key: Hashable) -> bool:
        """Count one occurrence; return True if it should be reported."""
        count = self._counts.get(key, 0) + 1
        self._counts[key] = count

        if self._mode == "first":
            return count <= self._limit

        if count > self._limit and key not in self._fired:
            self._fired.add(key)
            return True
        return False

    def count(self, key: Hashable) -> int:
        return self._counts.get(key, 0)


class OneShotLatch:
    """Report once per key when all *required* signals have been seen."""

    def __init__(self, required: Collection[str]) -> None:
        if not required:
            raise ValueError("required must name at least one signal")
        self._required = frozenset(required)
        self._seen: dict[Hashable, set[str]] = {}
        self._tripped: set[Hashable] = set()

    def report(self, key: Hashable, signal: str) -> bool:
        """Record *signal*; return True the first time the pattern completes."""
        if key in self._tripped:
            return False
        seen = self._seen.setdefault(key, set())
        if signal in self._required:
            seen.add(signal)
        if seen >= self._required:
            self._tripped.add(key)
            self._seen.pop(key, None)
            log.debug("Latch tripped", {"key": str(key), "signals": sorted(self._required)})
            return True
        return False

    def tripped(self, key: Hashable) -> bool:
        return key in self._tripped
