"""Pydantic models for the read views: tab snapshot, histogram, global report."""

from __future__ import annotations

from typing import Literal

import pydantic

from privacy_monitor.models import events
from privacy_monitor.utils.serialization import CAMEL_CONFIG

_DAY_MS = 24 * 3_600_000

CountLevel = Literal["safe", "normal", "warning", "alert"]
TipLevel = Literal["danger", "warning", "info", "success"]


class Histogram(pydantic.BaseModel):
    """Time-bucketed event counts for one tab."""

    model_config = CAMEL_CONFIG

    bucket_size_ms: int
    buckets: list[int]
    labels: list[str]
    aligned_start: int

    @property
    def total(self) -> int:
        """Number of events placed in any bucket."""
        return sum(self.buckets)

    @property
    def average_per_bucket(self) -> float:
        """Mean bucket count, rounded to one decimal."""
        if not self.buckets:
            return 0.0
        return round(self.total / len(self.buckets), 1)

    @property
    def unit_label(self) -> str:
        """Legend unit, e.g. ``per 4h`` or ``per day``."""
        if self.bucket_size_ms < _DAY_MS:
            return f"per {self.bucket_size_ms // 3_600_000}h"
        return "per day"


class CategoryCount(pydantic.BaseModel):
    """An event count with its display severity."""

    count: int
    level: CountLevel


class KnownTracker(pydantic.BaseModel):
    """An entry in the known-tracker table."""

    domain: str
    name: str
    category: str


class Tip(pydantic.BaseModel):
    """A single privacy tip shown for a tab."""

    icon: str
    level: TipLevel
    text: str


class TabSnapshot(pydantic.BaseModel):
    """Everything the live per-tab view needs."""

    model_config = CAMEL_CONFIG

    tab_id: int
    page_url: str | None = None
    counts: dict[str, CategoryCount]
    network_requests: list[events.ClassifiedEvent]
    third_party_requests: list[events.ClassifiedEvent]
    cookies: list[events.ClassifiedEvent]
    third_party_cookies: list[events.ClassifiedEvent]
    geolocation_attempts: list[events.ClassifiedEvent]
    fingerprinting_attempts: list[events.ClassifiedEvent]
    form_data: list[events.ClassifiedEvent]
    detected_trackers: list[KnownTracker]
    tips: list[Tip]
    histogram: Histogram | None = None


class RankedTracker(pydantic.BaseModel):
    """A tracker domain with its contact count and breadth."""

    model_config = CAMEL_CONFIG

    domain: str
    count: int
    site_count: int


class GlobalReport(pydantic.BaseModel):
    """Cross-site tracker summary."""

    model_config = CAMEL_CONFIG

    total_tracker_domains: int
    percent_of_visited_sites_with_any_tracker: int
    top_tracker: str | None
    top_tracker_site_count: int
    ranked_trackers: list[RankedTracker]
