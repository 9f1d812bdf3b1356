"""Translate CSV export rows into domain import records."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from songgraph.domain.errors import RecordValidationError
from songgraph.domain.ports import ImportRecord

from .schema import ExportRowPayload

if TYPE_CHECKING:
    from songgraph.domain.ports import SourceRecord


log = getLogger(__name__)


def _describe(exc: ValidationError) -> str:
    problems = [
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    ]
    return "; ".join(problems)


def parse_import_record(record: SourceRecord) -> ImportRecord:
    """Validate the fixed columns of ``record``.

    Raises ``RecordValidationError`` when the row cannot be used.
    """

    try:
        payload = ExportRowPayload.model_validate(dict(record.fields))
    except ValidationError as exc:
        raise RecordValidationError(f"line {record.line}: {_describe(exc)}") from exc

    if not payload.album:
        log.debug("No album title given for %r on line %d", payload.song, record.line)

    return ImportRecord(
        song_title=payload.song,
        artist_field=payload.artist,
        writer_field=payload.writer,
        album_title=payload.album,
        year=payload.year,
    )
