"""
Privacy tips derived from a tab's aggregate counts.

Each rule is evaluated independently, in a fixed order, and every
rule that applies contributes one tip.  When nothing applies the
result is a single reassurance tip.
"""

from __future__ import annotations

import dataclasses

from privacy_monitor.models import events, report
from privacy_monitor.utils import url

NO_CONCERNS_TIP = report.Tip(
    icon="✓",
    level="success",
    text="No major privacy concerns detected on this page so far.",
)


@dataclasses.dataclass(frozen=True)
class TipInputs:
    """The slice of a tab snapshot the tip rules look at."""

    page_url: str | None
    third_party_requests: list[events.ClassifiedEvent]
    third_party_cookies: list[events.ClassifiedEvent]
    geolocation_attempts: list[events.ClassifiedEvent]
    fingerprinting_attempts: list[events.ClassifiedEvent]
    form_data: list[events.ClassifiedEvent]
    detected_trackers: list[report.KnownTracker]
    third_party_cookie_threshold: int = 5
    third_party_request_threshold: int = 50


def _fingerprint_methods(attempts: list[events.ClassifiedEvent]) -> list[str]:
    methods: dict[str, None] = {}
    for attempt in attempts:
        if isinstance(attempt.payload, events.FingerprintPayload):
            methods.setdefault(attempt.payload.method, None)
    return list(methods)


def _category_summary(trackers: list[report.KnownTracker]) -> str:
    counts: dict[str, int] = {}
    for tracker in trackers:
        counts[tracker.category] = counts.get(tracker.category, 0) + 1
    return ", ".join(f"{count} {category}" for category, count in counts.items())


def build_tips(data: TipInputs) -> list[report.Tip]:
    """Evaluate every tip rule against *data*."""
    tips: list[report.Tip] = []

    if data.fingerprinting_attempts:
        methods = ", ".join(_fingerprint_methods(data.fingerprinting_attempts))
        tips.append(
            report.Tip(
                icon="⚠️",
                level="danger",
                text=(
                    f"Fingerprinting detected ({methods}). This site may be creating "
                    "a unique identifier for your device without cookies."
                ),
            )
        )

    if url.is_insecure(data.page_url):
        tips.append(
            report.Tip(
                icon="🔓",
                level="danger",
                text="Insecure connection (HTTP). Your data is not encrypted and could be intercepted.",
            )
        )

    if data.geolocation_attempts:
        tips.append(
            report.Tip(
                icon="📍",
                level="warning",
                text="This site requested your location. It now knows your approximate physical address.",
            )
        )

    if len(data.third_party_cookies) > data.third_party_cookie_threshold:
        tips.append(
            report.Tip(
                icon="🍪",
                level="warning",
                text=(
                    f"{len(data.third_party_cookies)} third-party cookies detected. "
                    "These can track you across different websites."
                ),
            )
        )

    if data.detected_trackers:
        tips.append(
            report.Tip(
                icon="👁️",
                level="info",
                text=(
                    f"Detected trackers: {_category_summary(data.detected_trackers)}. "
                    "These companies may share data about your browsing habits."
                ),
            )
        )

    if len(data.third_party_requests) > data.third_party_request_threshold:
        tips.append(
            report.Tip(
                icon="📊",
                level="info",
                text=(
                    f"{len(data.third_party_requests)} third-party requests. High background "
                    "activity often indicates extensive analytics or ad networks."
                ),
            )
        )

    typed = any(
        isinstance(entry.payload, events.FormPayload) and entry.payload.action == "input" for entry in data.form_data
    )
    if typed:
        tips.append(
            report.Tip(
                icon="✏️",
                level="info",
                text=(
                    "Form input monitoring detected. The site may be tracking what you type, "
                    "even before submitting."
                ),
            )
        )

    return tips or [NO_CONCERNS_TIP]
