"""Ports for reading catalog exports."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Mapping


@dataclass(frozen=True, slots=True)
class SourceRecord:
    """One decoded row of the export, keyed by header name."""

    line: int
    fields: Mapping[str, str]


@dataclass(frozen=True, slots=True)
class ImportRecord:
    """Validated view of the fixed columns of a source row."""

    song_title: str
    artist_field: str
    writer_field: str
    album_title: str
    year: int


@runtime_checkable
class RecordSource(Protocol):
    """Streaming source of export rows.

    ``records`` raises ``DecodeError`` when the underlying file is malformed;
    ``parse`` raises ``RecordValidationError`` for a single unusable row.
    """

    def records(self) -> AsyncIterator[SourceRecord]: ...

    def parse(self, record: SourceRecord) -> ImportRecord: ...


__all__ = ["ImportRecord", "RecordSource", "SourceRecord"]
