"""Core data models used across the acquisition pipeline, service, and CLI."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

AVAILABLE = "available"
AVAILABLE_TYPE_FIELD = "availableType"
DEFAULT_BLOCK_KEYS: tuple[str, ...] = ("block",)


@dataclass(frozen=True)
class ModuleRequest:
    name: str
    version: str


@dataclass
class HardwareConfig:
    """Module descriptor as shipped in ``<modules>/<name>.json``.

    Module-defined fields are kept verbatim in ``fields``; ``available_type``
    is the one field the acquisition pipeline owns.
    """

    name: str
    fields: dict[str, Any] = field(default_factory=dict)
    available_type: str | None = None

    @classmethod
    def from_document(cls, name: str, doc: dict[str, Any]) -> HardwareConfig:
        fields = dict(doc)
        available_type = fields.pop(AVAILABLE_TYPE_FIELD, None)
        return cls(name=name, fields=fields, available_type=available_type)

    def mark_available(self) -> None:
        self.available_type = AVAILABLE

    @property
    def is_available(self) -> bool:
        return self.available_type == AVAILABLE

    def to_dict(self) -> dict[str, Any]:
        doc = dict(self.fields)
        if self.available_type is not None:
            doc[AVAILABLE_TYPE_FIELD] = self.available_type
        return doc


@dataclass(frozen=True)
class RelocationPair:
    name: str
    source: Path
    destination: Path
