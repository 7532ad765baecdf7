"""Pydantic models for the persisted cross-site statistics."""

from __future__ import annotations

import pydantic

from privacy_monitor.utils.serialization import CAMEL_CONFIG


class TrackerStats(pydantic.BaseModel):
    """Contacts observed for one third-party domain."""

    model_config = CAMEL_CONFIG

    count: int = pydantic.Field(default=0, ge=0)
    sites: list[str] = pydantic.Field(default_factory=list)


class GlobalStats(pydantic.BaseModel):
    """Cross-site tracker index and the sites that contacted trackers.

    Stored under the ``globalStats`` key as
    ``{"trackers": {domain: {"count", "sites"}}, "websitesVisited": [...]}``.
    """

    model_config = CAMEL_CONFIG

    trackers: dict[str, TrackerStats] = pydantic.Field(default_factory=dict)
    websites_visited: list[str] = pydantic.Field(default_factory=list)
