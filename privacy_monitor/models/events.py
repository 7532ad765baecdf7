"""Pydantic models for raw and classified browser events."""

from __future__ import annotations

import enum
from typing import Annotated, Literal

import pydantic

from privacy_monitor.utils.serialization import CAMEL_CONFIG


class EventKind(enum.StrEnum):
    """Semantic kind of a captured browser event."""

    NETWORK_REQUEST = "network_request"
    COOKIE_SET = "cookie_set"
    GEO_ATTEMPT = "geo_attempt"
    FINGERPRINT_ATTEMPT = "fingerprint_attempt"
    FORM_ACTION = "form_action"


class Category(enum.StrEnum):
    """Event log category.  Values double as persisted store keys."""

    NETWORK = "networkRequests"
    COOKIE = "cookies"
    GEO = "geolocationAttempts"
    FINGERPRINT = "fingerprintingAttempts"
    FORM = "formData"


CATEGORY_BY_KIND: dict[EventKind, Category] = {
    EventKind.NETWORK_REQUEST: Category.NETWORK,
    EventKind.COOKIE_SET: Category.COOKIE,
    EventKind.GEO_ATTEMPT: Category.GEO,
    EventKind.FINGERPRINT_ATTEMPT: Category.FINGERPRINT,
    EventKind.FORM_ACTION: Category.FORM,
}


# ── Payloads ────────────────────────────────────────────────────


class _Payload(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(**CAMEL_CONFIG, frozen=True)


class NetworkPayload(_Payload):
    """A request leaving the page."""

    type: Literal["network"] = "network"
    url: str
    resource_type: str = "other"


class CookiePayload(_Payload):
    """A ``Set-Cookie`` response header."""

    type: Literal["cookie"] = "cookie"
    url: str
    cookie: str


class GeoPayload(_Payload):
    """A geolocation API call."""

    type: Literal["geo"] = "geo"
    method: str = "getCurrentPosition"


class FingerprintPayload(_Payload):
    """A fingerprinting-capable API call."""

    type: Literal["fingerprint"] = "fingerprint"
    method: str
    detail: str | None = None
    canvas_size: str | None = None


class FormPayload(_Payload):
    """A form submission or a coalesced burst of typing."""

    type: Literal["form"] = "form"
    action: Literal["submit", "input"]
    field_type: str | None = None
    field_count: int | None = None


Payload = Annotated[
    NetworkPayload | CookiePayload | GeoPayload | FingerprintPayload | FormPayload,
    pydantic.Field(discriminator="type"),
]

_PAYLOAD_FOR_KIND: dict[EventKind, type[_Payload]] = {
    EventKind.NETWORK_REQUEST: NetworkPayload,
    EventKind.COOKIE_SET: CookiePayload,
    EventKind.GEO_ATTEMPT: GeoPayload,
    EventKind.FINGERPRINT_ATTEMPT: FingerprintPayload,
    EventKind.FORM_ACTION: FormPayload,
}


# ── Events ──────────────────────────────────────────────────────


class RawEvent(pydantic.BaseModel):
    """An event as delivered by a capture hook.

    ``origin_url`` is the request initiator for network and cookie
    events and the page URL for everything else.  It may be empty
    when the browser does not report one.
    """

    model_config = pydantic.ConfigDict(**CAMEL_CONFIG, frozen=True)

    kind: EventKind
    tab_id: int
    timestamp: int
    origin_url: str = ""
    payload: Payload

    @pydantic.model_validator(mode="after")
    def _payload_matches_kind(self) -> RawEvent:
        expected = _PAYLOAD_FOR_KIND[self.kind]
        if not isinstance(self.payload, expected):
            raise ValueError(f"{self.kind} events need a {expected.__name__}, got {type(self.payload).__name__}")
        return self

    @property
    def category(self) -> Category:
        """Event log category this event belongs to."""
        return CATEGORY_BY_KIND[self.kind]


class ClassifiedEvent(RawEvent):
    """A raw event with derived domain information.

    ``domain`` is the contacted host for network and cookie events
    and the page host otherwise; it is ``None`` when the URL could
    not be parsed.
    """

    is_third_party: bool = False
    domain: str | None = None
    initiator_domain: str | None = None

    @property
    def target_url(self) -> str:
        """URL the event is about (request target or page URL)."""
        if isinstance(self.payload, (NetworkPayload, CookiePayload)):
            return self.payload.url
        return self.origin_url
