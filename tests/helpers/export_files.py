from __future__ import annotations

import csv
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from pathlib import Path

EXPORT_HEADER: tuple[str, ...] = (
    "Song",
    "Artist",
    "Writer",
    "Album",
    "Year",
    "Plays - June",
    "Plays - July",
)


def write_export(
    path: Path,
    rows: Iterable[Sequence[str]],
    *,
    header: Sequence[str] = EXPORT_HEADER,
) -> Path:
    """Write a well-formed export with quoted fields."""

    with path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.writer(handle, quoting=csv.QUOTE_MINIMAL)
        writer.writerow(header)
        writer.writerows(rows)
    return path


def write_raw_export(path: Path, text: str) -> Path:
    """Write ``text`` verbatim, for malformed-file cases."""

    path.write_text(text, encoding="utf-8", newline="")
    return path
