"""Browser privacy event capture and aggregation.

Classifies raw browser events, keeps bounded per-tab logs, maintains
a cross-site tracker index, and serves per-tab and global views.
The public entry point is :class:`PrivacyMonitor`.
"""

from __future__ import annotations

from privacy_monitor.pipeline.monitor import PrivacyMonitor, create_monitor

__all__ = ["PrivacyMonitor", "create_monitor"]
