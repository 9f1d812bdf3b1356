from __future__ import annotations

import logging
from datetime import date

import pytest

from songgraph.domain.errors import DecodeError, RecordValidationError, ResolutionError
from songgraph.domain.ingest_pipeline.orchestrator import ImportPipeline, RunState
from songgraph.domain.model import EntityKind, Play
from tests.support.catalog import InMemoryCatalogStore
from tests.support.sources import FakeRecordSource, record

TODAY = date(2024, 3, 15)


def _pipeline(store: InMemoryCatalogStore, *, concurrency: int = 10) -> ImportPipeline:
    return ImportPipeline(
        unit_of_work_factory=store.unit_of_work,
        concurrency=concurrency,
        clock=lambda: TODAY,
    )


async def test_single_record_builds_full_graph(catalog_store: InMemoryCatalogStore) -> None:
    source = FakeRecordSource(
        [
            record(
                "All Too Well",
                "Taylor Swift",
                writer="Liz Rose",
                album="Red",
                year="2012",
                June="10",
            )
        ]
    )
    pipeline = _pipeline(catalog_store)

    result = await pipeline.run(source)

    assert result.state is RunState.COMPLETED
    assert pipeline.state is RunState.COMPLETED
    assert (result.dispatched, result.imported, result.failed) == (1, 1, 0)

    artist = catalog_store.artists["Taylor Swift"]
    writer = catalog_store.writers["Liz Rose"]
    album = catalog_store.album_by_title("Red")
    song = catalog_store.song_by_title("All Too Well")
    assert album.year == 2012
    assert album.artist_ids == [artist.id]
    assert song.year == 2012
    assert song.artist_ids == [artist.id]
    assert song.writer_ids == [writer.id]
    assert song.album_ids == [album.id]
    assert song.plays == [Play(month=date(2024, 6, 30), count=10)]
    assert catalog_store.album_songs[album.id] == [song.id]


async def test_featuring_artists_are_resolved_separately(
    catalog_store: InMemoryCatalogStore,
) -> None:
    source = FakeRecordSource(
        [record("Everything Has Changed", "Taylor Swift featuring Ed Sheeran", album="Red")]
    )

    await _pipeline(catalog_store).run(source)

    song = catalog_store.song_by_title("Everything Has Changed")
    assert song.artist_ids == [catalog_store.artists["Taylor Swift"].id]
    assert song.featuring_artist_ids == [catalog_store.artists["Ed Sheeran"].id]


async def test_concurrent_records_with_new_artist_create_one_artist(
    catalog_store: InMemoryCatalogStore,
) -> None:
    rows = [
        record(f"Song {index}", "Phoebe Bridgers", album="Punisher", year="2020", line=index + 2)
        for index in range(12)
    ]

    result = await _pipeline(catalog_store, concurrency=4).run(FakeRecordSource(rows))

    assert result.imported == 12
    assert list(catalog_store.artists) == ["Phoebe Bridgers"]
    album = catalog_store.album_by_title("Punisher")
    assert len(catalog_store.album_songs[album.id]) == 12
    assert len(set(catalog_store.album_songs[album.id])) == 12
    assert result.counters.created[EntityKind.ARTIST] == 1


async def test_in_flight_records_never_exceed_concurrency(
    catalog_store: InMemoryCatalogStore,
) -> None:
    rows = [record(f"Track {index}", f"Artist {index}", line=index + 2) for index in range(20)]

    await _pipeline(catalog_store, concurrency=3).run(FakeRecordSource(rows))

    # each record holds at most one unit of work open at a time
    assert 1 < catalog_store.max_open_units <= 3


async def test_bad_records_fail_alone(catalog_store: InMemoryCatalogStore) -> None:
    rows = [
        record("Good", "A", line=2),
        record("Bad Year", "A", year="twenty", line=3),
        record("", "A", line=4),
        record("Also Good", "B", line=5),
    ]

    result = await _pipeline(catalog_store).run(FakeRecordSource(rows))

    assert result.state is RunState.COMPLETED
    assert (result.dispatched, result.imported, result.failed) == (4, 2, 2)
    assert sorted(failure.line for failure in result.failures) == [3, 4]
    assert all(isinstance(failure.error, RecordValidationError) for failure in result.failures)
    assert {song.title for song in catalog_store.songs.values()} == {"Good", "Also Good"}


async def test_resolution_failure_is_recorded(catalog_store: InMemoryCatalogStore) -> None:
    catalog_store.failures["writer.lookup"] = RuntimeError("timeout")
    rows = [record("No Writer", "A", line=2), record("With Writer", "A", writer="W", line=3)]

    result = await _pipeline(catalog_store).run(FakeRecordSource(rows))

    assert result.imported == 1
    [failure] = result.failures
    assert failure.line == 3
    assert isinstance(failure.error, ResolutionError)
    assert "ResolutionError" in failure.reason


async def test_record_without_album_is_not_linked(catalog_store: InMemoryCatalogStore) -> None:
    result = await _pipeline(catalog_store).run(FakeRecordSource([record("Loose Track", "A")]))

    assert result.imported == 1
    assert catalog_store.albums == {}
    assert catalog_store.song_by_title("Loose Track").album_ids == []
    assert catalog_store.calls["album.add_song"] == 0


async def test_decode_error_aborts_run(catalog_store: InMemoryCatalogStore) -> None:
    rows = [record(f"Track {index}", "A", line=index + 2) for index in range(5)]
    source = FakeRecordSource(rows, fail_after=2)
    pipeline = _pipeline(catalog_store, concurrency=2)

    with pytest.raises(DecodeError, match="line 4"):
        await pipeline.run(source)

    assert pipeline.state is RunState.ABORTED
    assert catalog_store.open_units == 0


async def test_pipeline_runs_once(catalog_store: InMemoryCatalogStore) -> None:
    pipeline = _pipeline(catalog_store)
    await pipeline.run(FakeRecordSource([]))

    with pytest.raises(RuntimeError, match="already completed"):
        await pipeline.run(FakeRecordSource([]))


async def test_empty_source_completes(catalog_store: InMemoryCatalogStore) -> None:
    result = await _pipeline(catalog_store).run(FakeRecordSource([]))

    assert result.state is RunState.COMPLETED
    assert result.dispatched == 0


def test_concurrency_must_be_positive(catalog_store: InMemoryCatalogStore) -> None:
    with pytest.raises(ValueError, match="concurrency"):
        ImportPipeline(unit_of_work_factory=catalog_store.unit_of_work, concurrency=0)


async def test_reimport_creates_nothing_new(catalog_store: InMemoryCatalogStore) -> None:
    rows = [
        record("Love Story", "Taylor Swift", writer="Taylor Swift", album="Fearless", line=2),
        record("Fifteen", "Taylor Swift", writer="Taylor Swift", album="Fearless", line=3),
    ]

    await _pipeline(catalog_store).run(FakeRecordSource(rows))
    second = await _pipeline(catalog_store).run(FakeRecordSource(rows))

    assert second.imported == 2
    assert sum(second.counters.created.values()) == 0
    assert len(catalog_store.artists) == 1
    assert len(catalog_store.writers) == 1
    assert len(catalog_store.albums) == 1
    assert len(catalog_store.songs) == 2
    album = catalog_store.album_by_title("Fearless")
    assert len(catalog_store.album_songs[album.id]) == 2


async def test_failed_record_logs_one_traceback(
    catalog_store: InMemoryCatalogStore, caplog: pytest.LogCaptureFixture
) -> None:
    catalog_store.failures["album.add_song"] = RuntimeError("disk full")
    catalog_store.failures["writer.lookup"] = RuntimeError("timeout")
    rows = [
        record("Linked", "A", album="Red", line=2),
        record("Written", "A", writer="W", line=3),
    ]

    with caplog.at_level(logging.WARNING):
        result = await _pipeline(catalog_store).run(FakeRecordSource(rows))

    assert result.failed == 2
    with_traceback = [entry for entry in caplog.records if entry.exc_info]
    assert sorted(entry.getMessage() for entry in with_traceback) == [
        "Error processing line 2",
        "Error processing line 3",
    ]
