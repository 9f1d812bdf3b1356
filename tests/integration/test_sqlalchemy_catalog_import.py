from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import func, select

from songgraph.adapters.sqlalchemy.mappings import (
    album_song_table,
    album_table,
    artist_table,
    play_table,
    song_artist_table,
    song_table,
    writer_table,
)
from songgraph.app import import_catalog_export, most_popular_songs
from songgraph.config import ImportConfig
from songgraph.domain.ingest_pipeline import RunState
from songgraph.domain.model import Play
from tests.helpers.export_files import write_export

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from songgraph.adapters.sqlalchemy.unit_of_work import SqlAlchemyCatalogUnitOfWork

    type UnitOfWorkFactory = Callable[[], SqlAlchemyCatalogUnitOfWork]


async def _table_counts(factory: UnitOfWorkFactory) -> dict[str, int]:
    tables = (
        artist_table,
        writer_table,
        album_table,
        album_song_table,
        song_table,
        song_artist_table,
        play_table,
    )
    counts: dict[str, int] = {}
    async with factory() as uow:
        for table in tables:
            total = await uow.session.scalar(select(func.count()).select_from(table))
            counts[table.name] = total or 0
    return counts


async def test_single_row_import_builds_catalog(
    tmp_path: Path,
    sqlite_unit_of_work: UnitOfWorkFactory,
    today: Callable[[], date],
) -> None:
    path = write_export(
        tmp_path / "export.csv",
        [["All Too Well", "Taylor Swift", "Liz Rose", "Red", "2012", "10", ""]],
    )

    result = await import_catalog_export(
        path,
        config=ImportConfig(concurrency=2),
        unit_of_work_factory=sqlite_unit_of_work,
        clock=today,
    )

    assert result.state is RunState.COMPLETED
    assert (result.imported, result.failed) == (1, 0)

    async with sqlite_unit_of_work() as uow:
        artist = await uow.repositories.artists.lookup_by_name("Taylor Swift")
        writer = await uow.repositories.writers.lookup_by_name("Liz Rose")
        assert artist is not None
        assert writer is not None
        album = await uow.repositories.albums.find_by_title_artists_year("Red", [artist.id], 2012)
        song = await uow.repositories.songs.find_by_title_artists_year(
            "All Too Well", [artist.id], 2012
        )

    assert album is not None
    assert song is not None
    assert album.artist_ids == [artist.id]
    assert album.song_ids == [song.id]
    assert song.writer_ids == [writer.id]
    assert song.album_ids == [album.id]
    assert song.plays == [Play(month=date(2024, 6, 30), count=10)]


async def test_reimport_is_idempotent(
    tmp_path: Path,
    sqlite_unit_of_work: UnitOfWorkFactory,
    today: Callable[[], date],
) -> None:
    path = write_export(
        tmp_path / "export.csv",
        [
            [
                "Cardigan",
                "Taylor Swift",
                "Taylor Swift\nAaron Dessner",
                "Folklore",
                "2020",
                "5",
                "",
            ],
            ["Exile", "Taylor Swift & Bon Iver", "Taylor Swift", "Folklore", "2020", "", "7"],
            ["August", "Taylor Swift", "Taylor Swift, Jack Antonoff", "Folklore", "2020", "", ""],
        ],
    )

    first = await import_catalog_export(
        path, config=ImportConfig(), unit_of_work_factory=sqlite_unit_of_work, clock=today
    )
    counts = await _table_counts(sqlite_unit_of_work)
    second = await import_catalog_export(
        path, config=ImportConfig(), unit_of_work_factory=sqlite_unit_of_work, clock=today
    )

    assert first.imported == second.imported == 3
    assert sum(second.counters.created.values()) == 0
    assert await _table_counts(sqlite_unit_of_work) == counts
    assert counts["artist"] == 2
    assert counts["writer"] == 3
    # "Exile" has a different artist set, so Folklore appears under two albums
    assert counts["album"] == 2
    assert counts["album_song"] == 3


async def test_concurrent_rows_share_new_artist_and_album(
    tmp_path: Path,
    sqlite_unit_of_work: UnitOfWorkFactory,
    today: Callable[[], date],
) -> None:
    rows = [
        [f"Track {index}", "Phoebe Bridgers", "", "Punisher", "2020", str(index), ""]
        for index in range(1, 9)
    ]
    path = write_export(tmp_path / "export.csv", rows)

    result = await import_catalog_export(
        path,
        config=ImportConfig(concurrency=4, read_batch_size=3),
        unit_of_work_factory=sqlite_unit_of_work,
        clock=today,
    )

    assert result.imported == 8
    counts = await _table_counts(sqlite_unit_of_work)
    assert counts["artist"] == 1
    assert counts["album"] == 1
    assert counts["album_song"] == 8

    popular = await most_popular_songs(
        date(2024, 6, 1), limit=3, unit_of_work_factory=sqlite_unit_of_work
    )
    assert [(song.title, song.plays) for song in popular] == [
        ("Track 8", 8),
        ("Track 7", 7),
        ("Track 6", 6),
    ]


async def test_bad_rows_do_not_stop_the_import(
    tmp_path: Path,
    sqlite_unit_of_work: UnitOfWorkFactory,
    today: Callable[[], date],
) -> None:
    path = write_export(
        tmp_path / "export.csv",
        [
            ["Good", "Lorde", "", "Melodrama", "2017", "", ""],
            ["Bad", "Lorde", "", "Melodrama", "soon", "", ""],
            ["Also Good", "Lorde", "", "Melodrama", "2017", "", ""],
        ],
    )

    result = await import_catalog_export(
        path, config=ImportConfig(), unit_of_work_factory=sqlite_unit_of_work, clock=today
    )

    assert result.state is RunState.COMPLETED
    assert result.imported == 2
    assert [failure.line for failure in result.failures] == [3]
    assert (await _table_counts(sqlite_unit_of_work))["album_song"] == 2
