"""Shared serialization helpers for the persisted record shape.

Persisted records use camelCase keys (``tabId``, ``isThirdParty``)
so the store stays compatible with the extension's layout.  Models
opt in through :data:`CAMEL_CONFIG`.
"""

from __future__ import annotations

from typing import Any

import pydantic


def snake_to_camel(name: str) -> str:
    """Convert a snake_case string to camelCase.

    Args:
        name: A snake_case identifier such as
            ``"tab_id"``.

    Returns:
        The camelCase equivalent, e.g. ``"tabId"``.
    """
    parts = name.split("_")
    return parts[0] + "".join(w.capitalize() for w in parts[1:])


CAMEL_CONFIG = pydantic.ConfigDict(alias_generator=snake_to_camel, populate_by_name=True)


def to_record(model: pydantic.BaseModel) -> dict[str, Any]:
    """Dump *model* to a JSON-safe dict with camelCase keys."""
    return model.model_dump(mode="json", by_alias=True)
