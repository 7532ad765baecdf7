"""Shared fixtures and event factories for the test suite."""

from __future__ import annotations

import pytest

from privacy_monitor.config import MonitorSettings
from privacy_monitor.models import events

# ── Raw Event Factories ─────────────────────────────────────────


def network_event(
    url: str,
    initiator: str = "https://a.com/",
    *,
    tab_id: int = 1,
    timestamp: int = 1_000,
    resource_type: str = "script",
) -> events.RawEvent:
    """A network request from *initiator* to *url*."""
    return events.RawEvent(
        kind=events.EventKind.NETWORK_REQUEST,
        tab_id=tab_id,
        timestamp=timestamp,
        origin_url=initiator,
        payload=events.NetworkPayload(url=url, resource_type=resource_type),
    )


def cookie_event(
    url: str,
    cookie: str = "id=1",
    initiator: str = "https://a.com/",
    *,
    tab_id: int = 1,
    timestamp: int = 1_000,
) -> events.RawEvent:
    """A ``Set-Cookie`` seen on a response from *url*."""
    return events.RawEvent(
        kind=events.EventKind.COOKIE_SET,
        tab_id=tab_id,
        timestamp=timestamp,
        origin_url=initiator,
        payload=events.CookiePayload(url=url, cookie=cookie),
    )


def geo_event(page_url: str = "https://a.com/", *, tab_id: int = 1, timestamp: int = 1_000) -> events.RawEvent:
    return events.RawEvent(
        kind=events.EventKind.GEO_ATTEMPT,
        tab_id=tab_id,
        timestamp=timestamp,
        origin_url=page_url,
        payload=events.GeoPayload(method="getCurrentPosition"),
    )


def fingerprint_event(
    method: str = "canvas.toDataURL",
    page_url: str = "https://a.com/",
    *,
    tab_id: int = 1,
    timestamp: int = 1_000,
) -> events.RawEvent:
    return events.RawEvent(
        kind=events.EventKind.FINGERPRINT_ATTEMPT,
        tab_id=tab_id,
        timestamp=timestamp,
        origin_url=page_url,
        payload=events.FingerprintPayload(method=method),
    )


def form_event(
    action: str = "submit",
    page_url: str = "https://a.com/",
    *,
    tab_id: int = 1,
    timestamp: int = 1_000,
) -> events.RawEvent:
    return events.RawEvent(
        kind=events.EventKind.FORM_ACTION,
        tab_id=tab_id,
        timestamp=timestamp,
        origin_url=page_url,
        payload=events.FormPayload(action=action),
    )


# ── Fixtures ────────────────────────────────────────────────────


@pytest.fixture()
def settings() -> MonitorSettings:
    """Default settings, independent of the process environment."""
    return MonitorSettings(
        log_cap=2000,
        form_debounce_seconds=2.0,
        canvas_report_limit=3,
        font_check_threshold=50,
        third_party_cookie_tip=5,
        third_party_request_tip=50,
        ranked_tracker_limit=20,
        label_timezone="UTC",
        state_dir=None,
    )


@pytest.fixture()
def third_party_request() -> events.RawEvent:
    """A request from a.com to an ad network."""
    return network_event("https://stats.doubleclick.net/pixel", "https://a.com/")


@pytest.fixture()
def first_party_request() -> events.RawEvent:
    """A request from a.com to its own CDN subdomain."""
    return network_event("https://cdn.a.com/app.js", "https://a.com/")
