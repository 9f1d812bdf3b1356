"""Streaming reader for catalog CSV exports."""

from __future__ import annotations

import asyncio
import csv
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, Final

from songgraph.domain.errors import DecodeError
from songgraph.domain.ports import SourceRecord

from .schema import REQUIRED_COLUMNS
from .translator import parse_import_record

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from io import TextIOWrapper

    from songgraph.domain.ports import ImportRecord


log = getLogger(__name__)

DEFAULT_READ_BATCH_SIZE: Final[int] = 100


class _RowReader:
    """Blocking row decoding; every method runs in a worker thread."""

    def __init__(self, handle: TextIOWrapper) -> None:
        self._reader = csv.reader(
            handle, delimiter=",", quotechar='"', doublequote=True, strict=True
        )
        self.header: tuple[str, ...] = ()

    def read_header(self) -> tuple[str, ...]:
        row = self._next_row()
        while row is not None and _is_blank(row):
            row = self._next_row()
        if row is None:
            raise DecodeError("export has no header row", line=1)

        header = tuple(name.strip() for name in row)
        missing = [column for column in REQUIRED_COLUMNS if column not in header]
        if missing:
            raise DecodeError(
                f"header is missing required columns: {', '.join(missing)}",
                line=self._reader.line_num,
            )
        duplicated = sorted({name for name in header if name and header.count(name) > 1})
        if duplicated:
            raise DecodeError(
                f"header repeats columns: {', '.join(duplicated)}", line=self._reader.line_num
            )
        self.header = header
        return header

    def read_batch(self, size: int) -> list[SourceRecord]:
        batch: list[SourceRecord] = []
        while len(batch) < size:
            start_line = self._reader.line_num + 1
            row = self._next_row()
            if row is None:
                break
            if _is_blank(row):
                continue
            if len(row) != len(self.header):
                raise DecodeError(
                    f"expected {len(self.header)} fields, found {len(row)}", line=start_line
                )
            fields = {
                name: value.strip() for name, value in zip(self.header, row, strict=True) if name
            }
            batch.append(SourceRecord(line=start_line, fields=fields))
        return batch

    def _next_row(self) -> list[str] | None:
        try:
            return next(self._reader)
        except StopIteration:
            return None
        except csv.Error as exc:
            raise DecodeError(str(exc), line=self._reader.line_num) from exc
        except UnicodeDecodeError as exc:
            raise DecodeError(f"invalid text encoding: {exc}", line=self._reader.line_num) from exc


def _is_blank(row: list[str]) -> bool:
    return not any(value.strip() for value in row)


class CsvExportSource:
    """Record source over a comma separated export file.

    The header row names the columns; ``Song``, ``Artist``, ``Writer``, ``Album``
    and ``Year`` are required and any ``Plays - <Month>`` columns are passed through.
    Blank rows are skipped. File access happens in worker threads, ``read_batch_size``
    rows at a time.
    """

    def __init__(
        self,
        path: Path | str,
        *,
        read_batch_size: int = DEFAULT_READ_BATCH_SIZE,
        encoding: str = "utf-8-sig",
    ) -> None:
        if read_batch_size < 1:
            raise ValueError("read_batch_size must be at least 1")
        self.path = Path(path)
        self.read_batch_size = read_batch_size
        self.encoding = encoding

    async def records(self) -> AsyncIterator[SourceRecord]:
        try:
            handle = await asyncio.to_thread(self.path.open, encoding=self.encoding, newline="")
        except OSError as exc:
            raise DecodeError(f"cannot open {self.path}: {exc.strerror or exc}") from exc

        try:
            rows = _RowReader(handle)
            header = await asyncio.to_thread(rows.read_header)
            log.debug("Reading %s with columns %s", self.path, header)
            while batch := await asyncio.to_thread(rows.read_batch, self.read_batch_size):
                for record in batch:
                    yield record
        finally:
            await asyncio.to_thread(handle.close)

    def parse(self, record: SourceRecord) -> ImportRecord:
        return parse_import_record(record)


if TYPE_CHECKING:
    from songgraph.domain.ports import RecordSource

    _source_check: RecordSource = CsvExportSource("export.csv")
