"""Cross-site tracker index.

Maps each third-party domain to the number of times it was contacted
and the first-party sites that contacted it.  The index only grows:
tab navigation and per-tab clears never touch it.
"""

from __future__ import annotations

from privacy_monitor.models import stats
from privacy_monitor.utils import logger

log = logger.create_logger("TrackerIndex")


class TrackerIndex:
    """Monotonic ``domain -> {count, sites}`` mapping plus visited sites.

    Site sets are kept as insertion-ordered dicts so that the
    persisted ``sites`` lists keep first-seen order.
    """

    def __init__(self) -> None:
        self._counts: dict[str, int] = {}
        self._sites: dict[str, dict[str, None]] = {}
        self._visited: dict[str, None] = {}

    def record_contact(self, domain: str | None, site: str | None) -> bool:
        """Record that *site* contacted the third-party *domain*.

        No-op when either value is empty or the site contacted
        itself.  Returns whether the index changed.
        """
        if not domain or not site or domain == site:
            return False

        if domain not in self._counts:
            log.debug("New tracker domain", {"domain": domain, "site": site})
            self._counts[domain] = 0
            self._sites[domain] = {}
        self._counts[domain] += 1
        self._sites[domain].setdefault(site, None)
        self._visited.setdefault(site, None)
        return True

    def count(self, domain: str) -> int:
        return self._counts.get(domain, 0)

    def sites(self, domain: str) -> set[str]:
        return set(self._sites.get(domain, {}))

    @property
    def domains(self) -> list[str]:
        """Tracker domains in first-seen order."""
        return list(self._counts)

    @property
    def websites_visited(self) -> set[str]:
        return set(self._visited)

    def __len__(self) -> int:
        return len(self._counts)

    def __contains__(self, domain: object) -> bool:
        return domain in self._counts

    # ── Persistence ─────────────────────────────────────────────

    def to_global_stats(self) -> stats.GlobalStats:
        """Snapshot the index as the persisted ``globalStats`` model."""
        return stats.GlobalStats(
            trackers={
                domain: stats.TrackerStats(count=count, sites=list(self._sites[domain]))
                for domain, count in self._counts.items()
            },
            websites_visited=list(self._visited),
        )

    @classmethod
    def from_global_stats(cls, global_stats: stats.GlobalStats) -> TrackerIndex:
        """Rebuild an index from a stored ``globalStats`` model."""
        index = cls()
        for domain, tracker in global_stats.trackers.items():
            index._counts[domain] = tracker.count
            index._sites[domain] = dict.fromkeys(tracker.sites)
        index._visited = dict.fromkeys(global_stats.websites_visited)
        return index
