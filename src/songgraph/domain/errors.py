"""Error taxonomy for the import pipeline.

Only ``DecodeError`` is fatal to a whole import run. Every other error fails the
record it was raised for; lookups that find nothing return ``None`` instead of
raising.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from songgraph.domain.model import EntityKind


class SonggraphError(Exception):
    """Base class for domain errors."""


class DecodeError(SonggraphError):
    """Raised when the source file cannot be decoded as a tabular export."""

    def __init__(self, message: str, *, line: int | None = None) -> None:
        self.line = line
        prefix = f"line {line}: " if line is not None else ""
        super().__init__(f"{prefix}{message}")


class RecordValidationError(SonggraphError):
    """Raised when a single decoded record holds unusable values."""


class ConflictError(SonggraphError):
    """Raised by repositories when a create violates a uniqueness constraint."""

    def __init__(self, kind: EntityKind, key: object) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} already exists for {key!r}")


class ResolutionError(SonggraphError):
    """Raised when find-or-create could not produce an entity."""

    def __init__(self, kind: EntityKind, key: object, reason: str) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"Could not resolve {kind} {key!r}: {reason}")


class LinkingPersistError(SonggraphError):
    """Raised when a song could not be added to an album's song list."""
