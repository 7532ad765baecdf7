"""Cross-site tracker report built from the tracker index.

Trackers are ranked by breadth (distinct first-party sites that
contacted them), not by raw contact count.
"""

from __future__ import annotations

from privacy_monitor.analysis import tracker_index
from privacy_monitor.models import report


def _percent(part: int, whole: int) -> int:
    """Percentage rounded half-up; 0 when *whole* is empty."""
    if whole <= 0:
        return 0
    return (part * 200 + whole) // (2 * whole)


def rank_trackers(index: tracker_index.TrackerIndex) -> list[report.RankedTracker]:
    """All trackers, widest first.  Ties keep first-seen order."""
    ranked = [
        report.RankedTracker(domain=domain, count=index.count(domain), site_count=len(index.sites(domain)))
        for domain in index.domains
    ]
    ranked.sort(key=lambda t: t.site_count, reverse=True)
    return ranked


def build_global_report(index: tracker_index.TrackerIndex, limit: int = 20) -> report.GlobalReport:
    """Summarise the tracker index."""
    ranked = rank_trackers(index)

    sites_with_trackers: set[str] = set()
    for domain in index.domains:
        sites_with_trackers |= index.sites(domain)

    top = ranked[0] if ranked else None
    return report.GlobalReport(
        total_tracker_domains=len(index),
        percent_of_visited_sites_with_any_tracker=_percent(len(sites_with_trackers), len(index.websites_visited)),
        top_tracker=top.domain if top else None,
        top_tracker_site_count=top.site_count if top else 0,
        ranked_trackers=ranked[:limit],
    )
