"""Placeholder substitution for action text fields."""

from __future__ import annotations

import re
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from acc_workflows.core.events import TriggerEvent

__all__ = ["PLACEHOLDERS", "render"]

_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")

PLACEHOLDERS: dict[str, tuple[str, str]] = {
    "filename": ("filename", "Unknown file"),
    "project": ("projectName", "Unknown project"),
    "folder": ("folderName", "Unknown folder"),
    "uploader": ("uploader", "Unknown user"),
    "filesize": ("fileSize", "Unknown size"),
}
"""Placeholder name mapped to the event field it reads and its fallback."""


def _timestamp() -> str:
    return datetime.now().astimezone().strftime("%c")


def render(template: str, event: TriggerEvent) -> str:
    """Substitute the known ``{{placeholder}}`` tokens in ``template``.

    Substitution is a single pass: values taken from the event are never
    re-scanned, and unknown placeholders are left as written. ``{{timestamp}}``
    always renders the current local time, not a timestamp from the event.

    Args:
        template: Text containing placeholders.
        event: The triggering event.

    Returns:
        The rendered text.

    Example:
        >>> render("Hello {{filename}} from {{uploader}}", TriggerEvent.file_upload(filename="a.txt"))
        'Hello a.txt from Unknown user'
    """

    def substitute(match: re.Match[str]) -> str:
        name = match.group(1)
        if name == "timestamp":
            return _timestamp()
        if name not in PLACEHOLDERS:
            return match.group(0)
        field_name, fallback = PLACEHOLDERS[name]
        value = event.get(field_name)
        if value is None or value == "":
            return fallback
        return str(value)

    return _PLACEHOLDER.sub(substitute, template)
