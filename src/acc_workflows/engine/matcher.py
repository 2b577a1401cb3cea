"""Trigger condition matching.

A trigger's configured filters are compared against the incoming event. Every
filter that is present and non-empty must hold; an absent or empty filter is a
wildcard.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable

    from acc_workflows.core.events import TriggerEvent

__all__ = ["file_extension", "matches", "normalize_file_types"]

WILDCARD = "*"


def file_extension(filename: str) -> str:
    """Return the lower-cased text after the final dot.

    A filename without a dot yields the whole (lower-cased) filename.
    """
    return filename.rsplit(".", 1)[-1].lower()


def normalize_file_types(file_types: Any) -> list[str]:
    """Normalize a ``fileTypes`` filter into bare lower-cased extensions.

    Accepts a sequence such as ``["*.pdf", "DWG"]`` or a comma-separated string.

    Args:
        file_types: The raw configured filter.

    Returns:
        Extensions with any leading ``*.`` stripped; empty when the filter is a wildcard.
    """
    if not file_types:
        return []
    if isinstance(file_types, str):
        file_types = file_types.split(",")
    entries: Iterable[str] = (str(entry).strip() for entry in file_types)
    cleaned = [entry for entry in entries if entry]
    if not cleaned or cleaned[0] == WILDCARD:
        return []
    return [entry.removeprefix("*.").lower() for entry in cleaned]


def _is_set(value: Any) -> bool:
    return value is not None and value != ""


def matches(trigger_config: Mapping[str, Any], event: TriggerEvent) -> bool:
    """Decide whether an event satisfies a trigger's filters.

    Args:
        trigger_config: The trigger node's configuration.
        event: The incoming event.

    Returns:
        True if every configured filter holds.

    Example:
        >>> event = TriggerEvent.file_upload(filename="plan.PDF", projectId="p1")
        >>> matches({"fileTypes": ["*.pdf"]}, event)
        True
        >>> matches({"projectId": "p2"}, event)
        False
    """
    for key in ("projectId", "folderId"):
        expected = trigger_config.get(key)
        if _is_set(expected) and expected != event.get(key):
            return False

    allowed = normalize_file_types(trigger_config.get("fileTypes"))
    return not allowed or file_extension(event.filename) in allowed
