"""
Event classification: hostnames, first/third-party verdicts, and
sensitive form-field categories.

Everything here is pure.  URL parse failures degrade to an unknown
domain that is never reported as third-party.
"""

from __future__ import annotations

from privacy_monitor.models import events
from privacy_monitor.utils import url

# ============================================================================
# Sensitive Form Fields
# ============================================================================

# Ordered: the first category with a matching token wins.  Tokens are
# matched against the autocomplete attribute as-is and against the
# field name with hyphens removed.
SENSITIVE_FIELD_CATEGORIES: list[tuple[str, tuple[str, ...]]] = [
    ("password", ("password",)),
    ("email", ("email",)),
    ("phone", ("tel", "phone")),
    ("ssn", ("ssn",)),
    ("credit-card", ("credit-card", "cc-number", "cc-exp", "cc-csc")),
    ("address", ("address",)),
    ("postal-code", ("postal-code",)),
]


def classify_form_field(field_type: str | None, name: str | None, autocomplete: str | None) -> str:
    """Return the sensitive category of a form field.

    Falls back to the declared input type (``"text"`` when absent)
    if no sensitive category matches.
    """
    declared = (field_type or "").lower() or "text"
    lowered_name = (name or "").lower()
    lowered_autocomplete = (autocomplete or "").lower()

    for category, tokens in SENSITIVE_FIELD_CATEGORIES:
        for token in tokens:
            if token in lowered_autocomplete or token.replace("-", "") in lowered_name:
                return category

    return declared


# ============================================================================
# Event Classification
# ============================================================================


def classify(raw: events.RawEvent) -> events.ClassifiedEvent:
    """Attach domain and first/third-party information to *raw*."""
    initiator = url.extract_hostname(raw.origin_url)

    if isinstance(raw.payload, (events.NetworkPayload, events.CookiePayload)):
        domain = url.extract_hostname(raw.payload.url)
        third_party = url.is_third_party_host(domain, initiator)
    else:
        domain = initiator
        third_party = False

    return events.ClassifiedEvent(
        kind=raw.kind,
        tab_id=raw.tab_id,
        timestamp=raw.timestamp,
        origin_url=raw.origin_url,
        payload=raw.payload,
        is_third_party=third_party,
        domain=domain,
        initiator_domain=initiator,
    )
