"""
URL and hostname helpers for event classification.
"""

from __future__ import annotations

from urllib import parse


def extract_hostname(url: str | None) -> str | None:
    """Extract the lowercased hostname from a URL string.

    Returns ``None`` when the URL is empty, has no network
    location, or cannot be parsed.
    """
    if not url:
        return None
    try:
        hostname = parse.urlparse(url).hostname
    except ValueError:
        return None
    return hostname or None


def is_third_party_host(target: str | None, initiator: str | None) -> bool:
    """Decide whether *target* is third-party relative to *initiator*.

    A host is third-party when both hostnames are present and the
    target does not contain the initiator as a substring.  This
    keeps ``cdn.example.com`` first-party for ``example.com`` without
    a public-suffix lookup.  Overlapping names such as
    ``evil-a.com`` against ``a.com`` are treated as first-party;
    this is a known limitation and downstream counts rely on it.
    """
    if not target or not initiator:
        return False
    return initiator not in target


def is_insecure(url: str | None) -> bool:
    """Return True for pages served over plain ``http:``."""
    return bool(url) and url.lower().startswith("http:")
