"""
Per-page signal adapter.

Capture hooks call the ``on_*`` methods with low-level signals
(keystrokes, canvas reads, font checks, audio node creation, ...).
The adapter applies the matching suppression strategy, builds a
:class:`~privacy_monitor.models.events.RawEvent`, and hands it to the
sink.  One instance lives exactly as long as its page; ``close()``
cancels any debounce still pending.

Form input must be reported from a running asyncio event loop, which
holds its debounce timers.  When the sink is
:meth:`PrivacyMonitor.submit` every hook needs that loop.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Hashable

from privacy_monitor.analysis import classifier
from privacy_monitor.capture import messaging, suppression
from privacy_monitor.config import MonitorSettings, get_settings
from privacy_monitor.models import events
from privacy_monitor.utils import logger

log = logger.create_logger("PageMonitor")

# WebGL UNMASKED_VENDOR_WEBGL / UNMASKED_RENDERER_WEBGL.
GPU_INFO_PARAMETERS = frozenset({37445, 37446})

_AUDIO_SIGNALS = ("oscillator", "compressor")
_PAGE_KEY = "page"


def _now_ms() -> int:
    return int(time.time() * 1000)


class PageMonitor:
    """Turns hook signals for one page into coalesced raw events."""

    def __init__(
        self,
        tab_id: int,
        page_url: str,
        sink: messaging.EventSink,
        settings: MonitorSettings | None = None,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        settings = settings or get_settings()
        self.tab_id = tab_id
        self.page_url = page_url
        self._sink = sink
        self._clock = clock
        self._closed = False

        self._form_input: suppression.TrailingDebounce[events.RawEvent] = suppression.TrailingDebounce(
            settings.form_debounce_seconds, self._send
        )
        self._canvas = suppression.CountThreshold(settings.canvas_report_limit, mode="first")
        self._fonts = suppression.CountThreshold(settings.font_check_threshold, mode="exceed_once")
        self._audio = suppression.OneShotLatch(_AUDIO_SIGNALS)
        self._gpu = suppression.OneShotLatch(("gpu_query",))

    # ── Helpers ─────────────────────────────────────────────────

    def _event(self, kind: events.EventKind, payload: events.Payload) -> events.RawEvent:
        return events.RawEvent(
            kind=kind,
            tab_id=self.tab_id,
            timestamp=self._clock(),
            origin_url=self.page_url,
            payload=payload,
        )

    def _send(self, event: events.RawEvent) -> None:
        if self._closed:
            return
        messaging.safely_send(self._sink, event)

    def _fingerprint(self, method: str, detail: str | None = None, canvas_size: str | None = None) -> None:
        payload = events.FingerprintPayload(method=method, detail=detail, canvas_size=canvas_size)
        self._send(self._event(events.EventKind.FINGERPRINT_ATTEMPT, payload))

    # ── Forms ───────────────────────────────────────────────────

    def on_form_input(
        self,
        form_key: Hashable,
        field_type: str | None = None,
        name: str | None = None,
        autocomplete: str | None = None,
    ) -> None:
        """Typing in a form field; coalesced per form.

        Raises:
            RuntimeError: No event loop is running.
        """
        category = classifier.classify_form_field(field_type, name, autocomplete)
        payload = events.FormPayload(action="input", field_type=category)
        self._form_input.report(form_key, self._event(events.EventKind.FORM_ACTION, payload))

    def on_form_submit(self, field_count: int) -> None:
        payload = events.FormPayload(action="submit", field_count=field_count)
        self._send(self._event(events.EventKind.FORM_ACTION, payload))

    # ── Geolocation ─────────────────────────────────────────────

    def on_geolocation(self, method: str = "getCurrentPosition") -> None:
        self._send(self._event(events.EventKind.GEO_ATTEMPT, events.GeoPayload(method=method)))

    # ── Fingerprinting ──────────────────────────────────────────

    def on_canvas_read(self, canvas_key: Hashable, method: str, width: int, height: int) -> None:
        """A pixel read from a canvas; empty canvases are ignored."""
        if width <= 0 or height <= 0:
            return
        if self._canvas.report(canvas_key):
            self._fingerprint(method, canvas_size=f"{width}x{height}")

    def on_webgl_parameter(self, parameter: int) -> None:
        """A WebGL ``getParameter`` call; only GPU vendor/renderer matter."""
        if parameter not in GPU_INFO_PARAMETERS:
            return
        if self._gpu.report(_PAGE_KEY, "gpu_query"):
            self._fingerprint("webgl.getParameter", detail="GPU info requested")

    def on_audio_node(self, context_key: Hashable, node: str) -> None:
        """An audio node was created; *node* is ``oscillator`` or ``compressor``."""
        if self._audio.report(context_key, node):
            self._fingerprint("audioContext", detail="Audio fingerprinting pattern detected")

    def on_font_check(self) -> None:
        if self._fonts.report(_PAGE_KEY):
            self._fingerprint("fontEnumeration", detail=f"Checked {self._fonts.count(_PAGE_KEY)}+ fonts")

    def on_battery_query(self) -> None:
        self._fingerprint("battery", detail="Battery status requested")

    # ── Lifecycle ───────────────────────────────────────────────

    def close(self) -> None:
        """Tear down the page: pending debounced events are discarded."""
        if self._closed:
            return
        self._closed = True
        cancelled = self._form_input.cancel_all()
        log.debug("Page closed", {"tabId": self.tab_id, "cancelledTimers": cancelled})
