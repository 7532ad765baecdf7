"""Per-category, capacity-capped logs of classified events.

Each category is a ``deque`` with ``maxlen`` set to the cap, so an
append beyond capacity drops the oldest entry.  Cookie sightings
are deduplicated per tab on (url, cookie value) before insertion.
"""

from __future__ import annotations

import collections
from collections.abc import Iterable
from typing import Any

import pydantic

from privacy_monitor.models import events
from privacy_monitor.utils import logger
from privacy_monitor.utils.serialization import to_record

log = logger.create_logger("EventLog")

DEFAULT_CAP = 2000


def _cookie_key(event: events.ClassifiedEvent) -> tuple[str, str, int] | None:
    payload = event.payload
    if isinstance(payload, events.CookiePayload):
        return (payload.url, payload.cookie, event.tab_id)
    return None


class BoundedEventLog:
    """Insertion-ordered, capped event sequences keyed by category."""

    def __init__(self, cap: int = DEFAULT_CAP) -> None:
        if cap < 1:
            raise ValueError("cap must be at least 1")
        self._cap = cap
        self._logs: dict[events.Category, collections.deque[events.ClassifiedEvent]] = {
            category: collections.deque(maxlen=cap) for category in events.Category
        }

    @property
    def cap(self) -> int:
        return self._cap

    def append(self, category: events.Category, event: events.ClassifiedEvent) -> bool:
        """Append *event*; return False when it was a duplicate cookie."""
        sequence = self._logs[category]
        if category is events.Category.COOKIE:
            key = _cookie_key(event)
            if key is not None and any(_cookie_key(existing) == key for existing in sequence):
                return False
        sequence.append(event)
        return True

    def evict_tab(self, tab_id: int) -> int:
        """Remove every entry for *tab_id* across all categories.

        Returns the number of entries removed.
        """
        removed = 0
        for category, sequence in self._logs.items():
            kept = [event for event in sequence if event.tab_id != tab_id]
            dropped = len(sequence) - len(kept)
            if dropped:
                self._logs[category] = collections.deque(kept, maxlen=self._cap)
                removed += dropped
        if removed:
            log.debug("Tab evicted", {"tabId": tab_id, "removed": removed})
        return removed

    def read(self, category: events.Category, tab_id: int | None = None) -> list[events.ClassifiedEvent]:
        """Return a copy of a category, optionally filtered to one tab."""
        sequence = self._logs[category]
        if tab_id is None:
            return list(sequence)
        return [event for event in sequence if event.tab_id == tab_id]

    def clear(self) -> None:
        """Drop every entry in every category."""
        for sequence in self._logs.values():
            sequence.clear()

    def __len__(self) -> int:
        return sum(len(sequence) for sequence in self._logs.values())

    # ── Persistence ─────────────────────────────────────────────

    def dump(self, category: events.Category) -> list[dict[str, Any]]:
        """Serialize one category to store records."""
        return [to_record(event) for event in self._logs[category]]

    def load(self, category: events.Category, records: Iterable[dict[str, Any]]) -> int:
        """Replace a category with records read from the store.

        Records that fail validation are skipped.  Returns the
        number of entries loaded.
        """
        sequence: collections.deque[events.ClassifiedEvent] = collections.deque(maxlen=self._cap)
        skipped = 0
        for record in records:
            try:
                sequence.append(events.ClassifiedEvent.model_validate(record))
            except pydantic.ValidationError:
                skipped += 1
        if skipped:
            log.warn("Skipped malformed stored events", {"category": category.value, "skipped": skipped})
        self._logs[category] = sequence
        return len(sequence)
