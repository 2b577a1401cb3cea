"""Trigger events fed into the interpreter.

A :class:`TriggerEvent` is built once per external occurrence (for example a
file upload to the document cloud) and passed unchanged through matching,
template rendering and action dispatch.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

__all__ = ["FILE_UPLOAD", "TriggerEvent"]

FILE_UPLOAD = "file-upload"
"""Event kind emitted when a file is uploaded to a project folder."""


@dataclass(frozen=True)
class TriggerEvent:
    """Immutable record of an external event.

    Attributes:
        kind: Event category, e.g. ``file-upload``.
        fields: Read-only event payload. File uploads carry ``filename``,
            ``projectId``, ``projectName``, ``folderId``, ``folderName``,
            ``fileSize``, ``uploader`` and ``timestamp``; other keys are kept as-is.

    Example:
        >>> event = TriggerEvent.file_upload(filename="plan.pdf", projectId="p1")
        >>> event.get("filename")
        'plan.pdf'
    """

    kind: str
    fields: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    @classmethod
    def file_upload(cls, **fields: Any) -> TriggerEvent:
        """Build a ``file-upload`` event from keyword fields."""
        return cls(kind=FILE_UPLOAD, fields=fields)

    def get(self, key: str, default: Any = None) -> Any:
        """Retrieve a field, returning ``default`` when it is missing.

        Args:
            key: Field name.
            default: Value returned when the field is absent.

        Returns:
            The field value or the default.
        """
        return self.fields.get(key, default)

    @property
    def filename(self) -> str:
        return str(self.fields.get("filename") or "")

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict copy suitable for JSON columns and API responses."""
        return {"kind": self.kind, "fields": dict(self.fields)}
