"""
Adaptive time bucketing for the network activity graph.

The bucket width is chosen from the age of the oldest event:

- up to 4 hours → 1-hour buckets
- up to 24 hours → 4-hour buckets
- up to 7 days → 1-day buckets
- older → only the most recent 7 days, one bucket per day; older
  events fold into the first bucket

Bucket boundaries are snapped to multiples of the width since the
epoch so repeated reads over the same window render identically.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from datetime import UTC, datetime, tzinfo

from privacy_monitor.models import report

HOUR_MS = 3_600_000
DAY_MS = 24 * HOUR_MS

# Span assumed when there is nothing to bucket.
_EMPTY_SPAN_MS = HOUR_MS
_MAX_SPAN_MS = 7 * DAY_MS


def choose_bucket_config(span_ms: int) -> tuple[int, int]:
    """Return ``(bucket_size_ms, num_buckets)`` for a span."""
    if span_ms > _MAX_SPAN_MS:
        return DAY_MS, 7

    if span_ms <= 4 * HOUR_MS:
        width = HOUR_MS
    elif span_ms <= DAY_MS:
        width = 4 * HOUR_MS
    else:
        width = DAY_MS
    return width, max(1, math.ceil(span_ms / width))


def _label(bucket_start_ms: int, bucket_size_ms: int, tz: tzinfo) -> str:
    moment = datetime.fromtimestamp(bucket_start_ms / 1000, tz=tz)
    if bucket_size_ms < DAY_MS:
        return moment.strftime("%H:%M")
    return f"{moment.strftime('%b')} {moment.day}"


def bucket(timestamps: Iterable[int], now: int, tz: tzinfo = UTC) -> report.Histogram:
    """Build a fixed-length histogram of *timestamps* relative to *now*.

    Every timestamp lands in exactly one bucket: values before the
    aligned start go to the first bucket and values past the last
    boundary go to the last.
    """
    stamps = list(timestamps)

    start = min(stamps) if stamps else now - _EMPTY_SPAN_MS
    span = max(1, now - start)
    bucket_size, num_buckets = choose_bucket_config(span)
    if span > _MAX_SPAN_MS:
        # Draw only the last week, ending with the bucket holding *now*.
        start = now - (num_buckets - 1) * bucket_size

    aligned_start = (start // bucket_size) * bucket_size
    counts = [0] * num_buckets
    for ts in stamps:
        index = (ts - aligned_start) // bucket_size
        counts[min(max(index, 0), num_buckets - 1)] += 1

    labels = [_label(aligned_start + i * bucket_size, bucket_size, tz) for i in range(num_buckets)]

    return report.Histogram(
        bucket_size_ms=bucket_size,
        buckets=counts,
        labels=labels,
        aligned_start=aligned_start,
    )
