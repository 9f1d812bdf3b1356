from __future__ import annotations

import pytest

from songgraph.adapters.csv_export import parse_import_record
from songgraph.domain.errors import RecordValidationError
from songgraph.domain.ports import ImportRecord, SourceRecord


def _row(**overrides: str) -> SourceRecord:
    fields = {
        "Song": "All Too Well",
        "Artist": "Taylor Swift",
        "Writer": "Taylor Swift\nLiz Rose",
        "Album": "Red",
        "Year": "2012",
        "Plays - June": "10",
    }
    fields.update(overrides)
    return SourceRecord(line=7, fields=fields)


def test_parse_import_record_maps_fixed_columns() -> None:
    assert parse_import_record(_row()) == ImportRecord(
        song_title="All Too Well",
        artist_field="Taylor Swift",
        writer_field="Taylor Swift\nLiz Rose",
        album_title="Red",
        year=2012,
    )


def test_parse_import_record_allows_blank_optional_columns() -> None:
    parsed = parse_import_record(_row(Artist="", Writer="", Album=""))

    assert (parsed.artist_field, parsed.writer_field, parsed.album_title) == ("", "", "")


@pytest.mark.parametrize("year", ["", "20x2", "-2012", "0"])
def test_parse_import_record_rejects_bad_year(year: str) -> None:
    with pytest.raises(RecordValidationError, match=r"line 7: Year"):
        parse_import_record(_row(Year=year))


def test_parse_import_record_rejects_blank_song() -> None:
    with pytest.raises(RecordValidationError, match="Song"):
        parse_import_record(_row(Song="   "))
