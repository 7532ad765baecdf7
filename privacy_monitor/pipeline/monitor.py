"""
The single aggregation authority.

:class:`PrivacyMonitor` owns the event logs and the tracker index.
Hosts push raw events and tab lifecycle signals in, and poll the
read views out:

- ``notify_raw_event``: classify, log, and update the tracker index
- ``notify_tab_navigation_start``: drop the tab's previous page
- ``notify_clear_request``: explicit per-tab or full log reset
- ``get_snapshot`` / ``get_histogram`` / ``get_global_report``

Capture code that cannot await uses :meth:`PrivacyMonitor.submit`, a
synchronous sink that queues raw events for one consumer task owned
by the monitor.  After :meth:`PrivacyMonitor.close` the sink raises
:class:`~privacy_monitor.utils.errors.RecipientGoneError`.

Every mutation happens synchronously, before the first ``await``, so
reads made from the same event loop always see a consistent state.
Persistence follows through a :class:`SerializedWriter`; a write that
fails is logged and dropped without blocking ingestion.
"""

from __future__ import annotations

import asyncio
import contextlib
import time
from collections.abc import Callable

import pydantic

from privacy_monitor.analysis import classifier, event_log, global_report, snapshot, tracker_index
from privacy_monitor.config import MonitorSettings, get_settings
from privacy_monitor.models import events, report, stats
from privacy_monitor.storage import store
from privacy_monitor.utils import errors, logger
from privacy_monitor.utils.serialization import to_record

log = logger.create_logger("Monitor")


def _now_ms() -> int:
    return int(time.time() * 1000)


class PrivacyMonitor:
    """Ingests classified browser events and serves per-tab and global views."""

    def __init__(
        self,
        state_store: store.StateStore | None = None,
        settings: MonitorSettings | None = None,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._settings = settings or get_settings()
        self._writer = store.SerializedWriter(state_store or store.MemoryStore())
        self._clock = clock
        self._log = event_log.BoundedEventLog(self._settings.log_cap)
        self._index = tracker_index.TrackerIndex()
        self._page_urls: dict[int, str] = {}
        self._queue: asyncio.Queue[events.RawEvent] = asyncio.Queue()
        self._consumer: asyncio.Task[None] | None = None
        self._closed = False

    @property
    def log_store(self) -> event_log.BoundedEventLog:
        return self._log

    @property
    def index(self) -> tracker_index.TrackerIndex:
        return self._index

    # ── Lifecycle ───────────────────────────────────────────────

    async def load(self) -> None:
        """Restore logs and global stats from the store.

        A key that cannot be read or validated starts empty.
        """
        for category in events.Category:
            records = await self._writer.read(category.value)
            if isinstance(records, list):
                self._log.load(category, records)

        raw_stats = await self._writer.read(store.GLOBAL_STATS_KEY)
        if raw_stats is not None:
            try:
                self._index = tracker_index.TrackerIndex.from_global_stats(stats.GlobalStats.model_validate(raw_stats))
            except pydantic.ValidationError as exc:
                log.warn("Stored global stats invalid, starting empty", {"error": errors.get_error_message(exc)})

        log.info(
            "State loaded",
            {"events": len(self._log), "trackers": len(self._index), "sites": len(self._index.websites_visited)},
        )

    # ── Inbound ─────────────────────────────────────────────────

    async def notify_raw_event(self, raw: events.RawEvent) -> events.ClassifiedEvent | None:
        """Ingest one event.

        Returns the stored event, or ``None`` when it was ignored
        (background request) or kept out of the log as a duplicate
        cookie.  A duplicate third-party cookie still counts as a
        tracker contact.
        """
        if raw.tab_id < 0:
            return None

        event = classifier.classify(raw)
        category = event.category
        stored = self._log.append(category, event)
        contacted = event.is_third_party and self._index.record_contact(event.domain, event.initiator_domain)

        if stored:
            await self._persist_category(category)
        if contacted:
            await self._persist_global_stats()
        return event if stored else None

    def submit(self, raw: events.RawEvent) -> None:
        """Queue *raw* for ingestion.  Must be called from a running loop.

        Raises:
            RecipientGoneError: The monitor has been closed.
        """
        if self._closed:
            raise errors.RecipientGoneError("Monitor closed")
        loop = asyncio.get_running_loop()
        self._queue.put_nowait(raw)
        if self._consumer is None or self._consumer.done():
            self._consumer = loop.create_task(self._consume())

    async def drain(self) -> None:
        """Wait until every submitted event has been ingested."""
        await self._queue.join()

    async def close(self) -> None:
        """Stop accepting events, ingest what is queued, then stop the consumer."""
        if self._closed:
            return
        self._closed = True
        await self._queue.join()
        if self._consumer is not None:
            self._consumer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._consumer
            self._consumer = None
        log.info("Monitor closed", {"events": len(self._log), "trackers": len(self._index)})

    async def _consume(self) -> None:
        while True:
            raw = await self._queue.get()
            try:
                await self.notify_raw_event(raw)
            except Exception as exc:
                log.error(
                    "Event ingestion failed",
                    {"kind": raw.kind.value, "tabId": raw.tab_id, "error": errors.get_error_message(exc)},
                )
            finally:
                self._queue.task_done()

    async def notify_tab_navigation_start(self, tab_id: int, url: str | None = None) -> int:
        """Forget the tab's previous page.  Returns entries removed."""
        if url:
            self._page_urls[tab_id] = url
        else:
            self._page_urls.pop(tab_id, None)
        removed = self._log.evict_tab(tab_id)
        if removed:
            await self._persist_all_categories()
        return removed

    async def notify_clear_request(self, tab_id: int | None = None) -> int:
        """Clear one tab's events, or every event when *tab_id* is ``None``.

        The tracker index is never affected.
        """
        if tab_id is None:
            removed = len(self._log)
            self._log.clear()
            log.info("All event logs cleared", {"removed": removed})
        else:
            removed = self._log.evict_tab(tab_id)
            log.info("Tab event log cleared", {"tabId": tab_id, "removed": removed})
        await self._persist_all_categories()
        return removed

    # ── Outbound ────────────────────────────────────────────────

    def get_snapshot(self, tab_id: int) -> report.TabSnapshot:
        return snapshot.build_snapshot(
            self._log,
            tab_id,
            self._clock(),
            page_url=self._page_urls.get(tab_id),
            third_party_cookie_tip=self._settings.third_party_cookie_tip,
            third_party_request_tip=self._settings.third_party_request_tip,
            tz=self._settings.label_tz,
        )

    def get_histogram(self, tab_id: int) -> report.Histogram | None:
        requests = self._log.read(events.Category.NETWORK, tab_id)
        return snapshot.histogram_or_none(requests, self._clock(), self._settings.label_tz)

    def get_global_report(self) -> report.GlobalReport:
        return global_report.build_global_report(self._index, self._settings.ranked_tracker_limit)

    # ── Persistence ─────────────────────────────────────────────

    async def _persist_category(self, category: events.Category) -> None:
        await self._writer.write(category.value, lambda: self._log.dump(category))

    async def _persist_all_categories(self) -> None:
        for category in events.Category:
            await self._persist_category(category)

    async def _persist_global_stats(self) -> None:
        await self._writer.write(store.GLOBAL_STATS_KEY, lambda: to_record(self._index.to_global_stats()))


def create_monitor(settings: MonitorSettings | None = None) -> PrivacyMonitor:
    """Build a monitor from settings, backed by JSON files when configured."""
    settings = settings or get_settings()
    state_store: store.StateStore
    if settings.state_dir:
        state_store = store.JsonFileStore(settings.state_dir)
    else:
        state_store = store.MemoryStore()
    log.info("Monitor created", {"stateDir": settings.state_dir, "logCap": settings.log_cap})
    return PrivacyMonitor(state_store, settings)
