"""
Per-tab snapshot: counts, third-party subsets, known trackers,
tips, and the network activity histogram.
"""

from __future__ import annotations

from datetime import UTC, tzinfo

from privacy_monitor.analysis import bucketing, event_log, tips
from privacy_monitor.data import loader
from privacy_monitor.models import events, report
from privacy_monitor.utils import errors, logger

log = logger.create_logger("Snapshot")

# (warning, alert) display thresholds per count.
COUNT_THRESHOLDS: dict[str, tuple[int, int]] = {
    "network": (100, 200),
    "cookies": (10, 30),
    "thirdPartyCookies": (3, 10),
    "geolocation": (1, 1),
    "forms": (5, 10),
    "fingerprinting": (1, 3),
}


def count_level(count: int, warning: int, alert: int) -> report.CountLevel:
    """Map a count onto its display severity."""
    if count >= alert:
        return "alert"
    if count >= warning:
        return "warning"
    if count == 0:
        return "safe"
    return "normal"


def detect_known_trackers(requests: list[events.ClassifiedEvent]) -> list[report.KnownTracker]:
    """Match third-party request hosts against the known-tracker table.

    Deduplicated by display name, in first-detection order.
    """
    detected: dict[str, report.KnownTracker] = {}
    for request in requests:
        if not request.domain:
            continue
        tracker = loader.find_known_tracker(request.domain)
        if tracker is not None and tracker.name not in detected:
            detected[tracker.name] = tracker
    return list(detected.values())


def histogram_or_none(
    requests: list[events.ClassifiedEvent],
    now: int,
    tz: tzinfo = UTC,
) -> report.Histogram | None:
    """Bucket request timestamps, hiding the graph if that fails."""
    try:
        return bucketing.bucket([r.timestamp for r in requests], now, tz)
    except (ValueError, TypeError, OverflowError) as exc:
        log.warn("Histogram unavailable", {"error": errors.get_error_message(exc)})
        return None


def build_snapshot(
    log_store: event_log.BoundedEventLog,
    tab_id: int,
    now: int,
    *,
    page_url: str | None = None,
    third_party_cookie_tip: int = 5,
    third_party_request_tip: int = 50,
    tz: tzinfo = UTC,
) -> report.TabSnapshot:
    """Assemble the live view for one tab from the event logs."""
    requests = log_store.read(events.Category.NETWORK, tab_id)
    cookies = log_store.read(events.Category.COOKIE, tab_id)
    geo = log_store.read(events.Category.GEO, tab_id)
    fingerprinting = log_store.read(events.Category.FINGERPRINT, tab_id)
    forms = log_store.read(events.Category.FORM, tab_id)

    third_party_requests = [r for r in requests if r.is_third_party]
    third_party_cookies = [c for c in cookies if c.is_third_party]
    trackers = detect_known_trackers(third_party_requests)

    raw_counts = {
        "network": len(requests),
        "cookies": len(cookies),
        "thirdPartyCookies": len(third_party_cookies),
        "geolocation": len(geo),
        "forms": len(forms),
        "fingerprinting": len(fingerprinting),
    }
    counts = {
        name: report.CategoryCount(count=value, level=count_level(value, *COUNT_THRESHOLDS[name]))
        for name, value in raw_counts.items()
    }

    tip_list = tips.build_tips(
        tips.TipInputs(
            page_url=page_url,
            third_party_requests=third_party_requests,
            third_party_cookies=third_party_cookies,
            geolocation_attempts=geo,
            fingerprinting_attempts=fingerprinting,
            form_data=forms,
            detected_trackers=trackers,
            third_party_cookie_threshold=third_party_cookie_tip,
            third_party_request_threshold=third_party_request_tip,
        )
    )

    return report.TabSnapshot(
        tab_id=tab_id,
        page_url=page_url,
        counts=counts,
        network_requests=requests,
        third_party_requests=third_party_requests,
        cookies=cookies,
        third_party_cookies=third_party_cookies,
        geolocation_attempts=geo,
        fingerprinting_attempts=fingerprinting,
        form_data=forms,
        detected_trackers=trackers,
        tips=tip_list,
        histogram=histogram_or_none(requests, now, tz),
    )
