"""
Data loader for the known-tracker reference table.

The JSON data files live alongside this module in the
``trackers/`` subdirectory.  Order in the file is significant:
lookups stop at the first matching entry.
"""

from __future__ import annotations

import json
import pathlib
from typing import Any

from privacy_monitor.models import report

# Resolve path to the data directory (same directory as this module)
_DATA_DIR = pathlib.Path(__file__).resolve().parent

# ============================================================================
# JSON File Loading
# ============================================================================


def _load_json(relative_path: str) -> Any:
    """Load and parse a JSON file relative to the data directory.

    Raises:
        FileNotFoundError: If the JSON file does not exist.
        json.JSONDecodeError: If the file contains invalid JSON.
    """
    full_path = _DATA_DIR / relative_path
    if not full_path.exists():
        raise FileNotFoundError(f"Data file not found: {relative_path}")
    with open(full_path, encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as exc:
            raise json.JSONDecodeError(
                f"Invalid JSON in {relative_path}: {exc.msg}",
                exc.doc,
                exc.pos,
            ) from exc


# ============================================================================
# Known Tracker Loading
# ============================================================================

_known_trackers: list[report.KnownTracker] | None = None


def get_known_trackers() -> list[report.KnownTracker]:
    """Get the known-tracker table (lazy loaded and cached)."""
    global _known_trackers
    if _known_trackers is None:
        raw: list[dict[str, str]] = _load_json("trackers/known-trackers.json")
        _known_trackers = [report.KnownTracker.model_validate(entry) for entry in raw]
    return _known_trackers


def find_known_tracker(hostname: str) -> report.KnownTracker | None:
    """Return the first known tracker whose domain occurs in *hostname*."""
    for tracker in get_known_trackers():
        if tracker.domain in hostname:
            return tracker
    return None
