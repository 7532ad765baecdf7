"""Tests for privacy_monitor.capture.page."""

from __future__ import annotations

import asyncio
from unittest import mock

import pytest

from privacy_monitor.capture import page as page_module
from privacy_monitor.capture.page import PageMonitor
from privacy_monitor.config import MonitorSettings
from privacy_monitor.models import events
from privacy_monitor.utils import errors

PAGE_URL = "https://shop.example/checkout"


@pytest.fixture()
def fast_settings(settings: MonitorSettings) -> MonitorSettings:
    return settings.model_copy(update={"form_debounce_seconds": 0.02})


@pytest.fixture()
def sent() -> list[events.RawEvent]:
    return []


@pytest.fixture()
def page(sent: list[events.RawEvent], fast_settings: MonitorSettings) -> PageMonitor:
    return PageMonitor(7, PAGE_URL, sent.append, fast_settings, clock=lambda: 42)


def _fingerprints(sent: list[events.RawEvent]) -> list[events.FingerprintPayload]:
    return [e.payload for e in sent if isinstance(e.payload, events.FingerprintPayload)]


class TestEventShape:
    def test_events_carry_tab_page_and_clock(self, page: PageMonitor, sent: list[events.RawEvent]) -> None:
        page.on_geolocation("watchPosition")
        assert len(sent) == 1
        event = sent[0]
        assert event.kind == events.EventKind.GEO_ATTEMPT
        assert event.tab_id == 7
        assert event.origin_url == PAGE_URL
        assert event.timestamp == 42
        assert event.payload == events.GeoPayload(method="watchPosition")


class TestForms:
    """Form submission and debounced input."""

    def test_submit_is_sent_immediately(self, page: PageMonitor, sent: list[events.RawEvent]) -> None:
        page.on_form_submit(field_count=4)
        assert sent[0].payload == events.FormPayload(action="submit", field_count=4)

    def test_typing_burst_yields_one_event(
        self, page: PageMonitor, sent: list[events.RawEvent]
    ) -> None:
        async def run() -> None:
            for _ in range(20):
                page.on_form_input("login", field_type="password", name="pw")
            assert sent == []
            await asyncio.sleep(0.15)

        asyncio.run(run())
        assert len(sent) == 1
        assert sent[0].payload == events.FormPayload(action="input", field_type="password")

    def test_field_category_from_autocomplete(
        self, page: PageMonitor, sent: list[events.RawEvent]
    ) -> None:
        async def run() -> None:
            page.on_form_input("billing", field_type="text", name="x", autocomplete="cc-number")
            await asyncio.sleep(0.15)

        asyncio.run(run())
        assert sent[0].payload.field_type == "credit-card"

    def test_close_discards_pending_input(self, page: PageMonitor, sent: list[events.RawEvent]) -> None:
        async def run() -> None:
            page.on_form_input("login", field_type="email")
            page.close()
            await asyncio.sleep(0.15)

        asyncio.run(run())
        assert sent == []

    def test_nothing_sent_after_close(self, page: PageMonitor, sent: list[events.RawEvent]) -> None:
        page.close()
        page.close()
        page.on_geolocation()
        page.on_battery_query()
        assert sent == []


class TestFingerprinting:
    """Suppression of noisy fingerprinting signals."""

    def test_canvas_reads_limited_per_canvas(self, page: PageMonitor, sent: list[events.RawEvent]) -> None:
        for _ in range(10):
            page.on_canvas_read("c1", "canvas.toDataURL", 300, 150)
        page.on_canvas_read("c2", "canvas.getImageData", 16, 16)

        payloads = _fingerprints(sent)
        assert len(payloads) == 4
        assert payloads[0].canvas_size == "300x150"
        assert payloads[-1].method == "canvas.getImageData"

    def test_empty_canvas_ignored(self, page: PageMonitor, sent: list[events.RawEvent]) -> None:
        page.on_canvas_read("c1", "canvas.toDataURL", 0, 150)
        page.on_canvas_read("c1", "canvas.toDataURL", 300, 0)
        assert sent == []

    def test_font_enumeration_reported_once(self, page: PageMonitor, sent: list[events.RawEvent]) -> None:
        for _ in range(50):
            page.on_font_check()
        assert sent == []
        for _ in range(100):
            page.on_font_check()

        payloads = _fingerprints(sent)
        assert len(payloads) == 1
        assert payloads[0].method == "fontEnumeration"
        assert payloads[0].detail == "Checked 51+ fonts"

    def test_audio_pattern_reported_once_per_context(
        self, page: PageMonitor, sent: list[events.RawEvent]
    ) -> None:
        page.on_audio_node("ctx", "oscillator")
        assert sent == []
        page.on_audio_node("ctx", "compressor")
        page.on_audio_node("ctx", "oscillator")
        page.on_audio_node("ctx", "compressor")

        payloads = _fingerprints(sent)
        assert len(payloads) == 1
        assert payloads[0].method == "audioContext"

    def test_gpu_info_reported_once(self, page: PageMonitor, sent: list[events.RawEvent]) -> None:
        page.on_webgl_parameter(7936)
        assert sent == []
        page.on_webgl_parameter(37445)
        page.on_webgl_parameter(37446)

        payloads = _fingerprints(sent)
        assert len(payloads) == 1
        assert payloads[0].detail == "GPU info requested"

    def test_battery_query(self, page: PageMonitor, sent: list[events.RawEvent]) -> None:
        page.on_battery_query()
        page.on_battery_query()
        assert [p.method for p in _fingerprints(sent)] == ["battery", "battery"]


class TestDelivery:
    def test_gone_recipient_is_tolerated(self, fast_settings: MonitorSettings) -> None:
        def sink(_: events.RawEvent) -> None:
            raise errors.RecipientGoneError("tab closed")

        page = PageMonitor(1, PAGE_URL, sink, fast_settings)
        page.on_geolocation()


class TestEventLoop:
    def test_form_input_needs_running_loop(self, page: PageMonitor, sent: list[events.RawEvent]) -> None:
        with pytest.raises(RuntimeError):
            page.on_form_input("login", field_type="email")
        assert sent == []

    def test_immediate_hooks_work_without_loop(self, page: PageMonitor, sent: list[events.RawEvent]) -> None:
        page.on_form_submit(1)
        assert len(sent) == 1


class TestDefaultSettings:
    def test_uses_loaded_settings(self, settings: MonitorSettings, sent: list[events.RawEvent]) -> None:
        configured = settings.model_copy(update={"canvas_report_limit": 1})
        with mock.patch.object(page_module, "get_settings", return_value=configured):
            page = PageMonitor(1, PAGE_URL, sent.append)
        page.on_canvas_read("c1", "canvas.toDataURL", 10, 10)
        page.on_canvas_read("c1", "canvas.toDataURL", 10, 10)
        assert len(sent) == 1
