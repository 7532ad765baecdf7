"""
Runtime configuration for the privacy monitor.

Centralises capacity limits, coalescing windows, tip thresholds,
and storage location.  Uses ``pydantic_settings.BaseSettings`` for
environment variable binding, type coercion, and validation; a
``.env`` file in the working directory is loaded first.
"""

from __future__ import annotations

import functools
import zoneinfo
from datetime import UTC, tzinfo

import dotenv
import pydantic
import pydantic_settings

from privacy_monitor.utils import logger

log = logger.create_logger("Config")


class MonitorSettings(pydantic_settings.BaseSettings):
    """Tunable limits for capture, aggregation, and reporting.

    Attributes:
        log_cap: Maximum entries retained per event category.
        form_debounce_seconds: Quiet period before a burst of form
            input is reported.
        canvas_report_limit: Reads reported per canvas before the
            rest are suppressed.
        font_check_threshold: Font checks tolerated before a single
            enumeration report.
        third_party_cookie_tip: Third-party cookie count above which
            the cookie tip fires.
        third_party_request_tip: Third-party request count above which
            the high-activity tip fires.
        ranked_tracker_limit: Length of the global ranked tracker list.
        label_timezone: IANA zone used for histogram labels.
        state_dir: Optional directory for the JSON state store.
    """

    model_config = pydantic_settings.SettingsConfigDict(populate_by_name=True)

    log_cap: int = pydantic.Field(default=2000, ge=1, validation_alias="PRIVACY_MONITOR_LOG_CAP")
    form_debounce_seconds: float = pydantic.Field(
        default=2.0, gt=0, validation_alias="PRIVACY_MONITOR_FORM_DEBOUNCE_SECONDS"
    )
    canvas_report_limit: int = pydantic.Field(default=3, ge=0, validation_alias="PRIVACY_MONITOR_CANVAS_REPORT_LIMIT")
    font_check_threshold: int = pydantic.Field(
        default=50, ge=0, validation_alias="PRIVACY_MONITOR_FONT_CHECK_THRESHOLD"
    )
    third_party_cookie_tip: int = pydantic.Field(
        default=5, ge=0, validation_alias="PRIVACY_MONITOR_THIRD_PARTY_COOKIE_TIP"
    )
    third_party_request_tip: int = pydantic.Field(
        default=50, ge=0, validation_alias="PRIVACY_MONITOR_THIRD_PARTY_REQUEST_TIP"
    )
    ranked_tracker_limit: int = pydantic.Field(
        default=20, ge=1, validation_alias="PRIVACY_MONITOR_RANKED_TRACKER_LIMIT"
    )
    label_timezone: str = pydantic.Field(default="UTC", validation_alias="PRIVACY_MONITOR_LABEL_TIMEZONE")
    state_dir: str | None = pydantic.Field(default=None, validation_alias="PRIVACY_MONITOR_STATE_DIR")

    @pydantic.field_validator("label_timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        """Reject zone names the interpreter cannot resolve."""
        if value == "UTC":
            return value
        try:
            zoneinfo.ZoneInfo(value)
        except (zoneinfo.ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @property
    def label_tz(self) -> tzinfo:
        """Resolved zone for histogram labels."""
        if self.label_timezone == "UTC":
            return UTC
        return zoneinfo.ZoneInfo(self.label_timezone)


@functools.cache
def get_settings() -> MonitorSettings:
    """Load settings from ``.env`` and the environment (cached)."""
    dotenv.load_dotenv()
    settings = MonitorSettings()
    log.debug(
        "Settings loaded",
        {
            "logCap": settings.log_cap,
            "formDebounceSeconds": settings.form_debounce_seconds,
            "labelTimezone": settings.label_timezone,
            "stateDir": settings.state_dir,
        },
    )
    return settings
