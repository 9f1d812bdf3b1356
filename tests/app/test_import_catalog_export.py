from __future__ import annotations

from datetime import date

from songgraph.app import import_catalog_export
from songgraph.config import ImportConfig
from songgraph.domain.model import Play
from tests.support.catalog import InMemoryCatalogStore
from tests.support.sources import FakeRecordSource, record


async def test_import_dates_plays_with_given_clock(catalog_store: InMemoryCatalogStore) -> None:
    source = FakeRecordSource([record("Cardigan", "Taylor Swift", year="2020", June="5")])

    result = await import_catalog_export(
        "export.csv",
        config=ImportConfig(concurrency=2),
        source=source,
        unit_of_work_factory=catalog_store.unit_of_work,
        clock=lambda: date(2030, 1, 1),
    )

    assert result.imported == 1
    song = catalog_store.song_by_title("Cardigan")
    assert song.plays == [Play(month=date(2030, 6, 30), count=5)]
