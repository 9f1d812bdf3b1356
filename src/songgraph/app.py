"""Application orchestration entry points."""

from __future__ import annotations

from datetime import date
from logging import getLogger
from typing import TYPE_CHECKING

from songgraph.adapters.csv_export import CsvExportSource
from songgraph.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyCatalogUnitOfWork,
    is_started,
    startup,
)
from songgraph.config import get_import_config
from songgraph.domain.ingest_pipeline import ImportPipeline

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from songgraph.config import ImportConfig
    from songgraph.domain.ingest_pipeline import ImportResult
    from songgraph.domain.ports import CatalogUnitOfWorkFactory, PopularSong, RecordSource


log = getLogger(__name__)


async def _default_unit_of_work_factory() -> CatalogUnitOfWorkFactory:
    if not is_started():
        await startup()
    return SqlAlchemyCatalogUnitOfWork


async def import_catalog_export(
    path: Path | str,
    *,
    config: ImportConfig | None = None,
    source: RecordSource | None = None,
    unit_of_work_factory: CatalogUnitOfWorkFactory | None = None,
    clock: Callable[[], date] | None = None,
) -> ImportResult:
    """Import a CSV catalog export using the configured adapters."""

    effective_config = config or get_import_config()
    effective_uow = unit_of_work_factory or await _default_unit_of_work_factory()
    effective_source = source or CsvExportSource(
        path, read_batch_size=effective_config.read_batch_size
    )
    log.info(
        "Starting catalog import: path=%s, concurrency=%s, featuring_tokens=%s",
        path,
        effective_config.concurrency,
        effective_config.featuring_tokens,
    )

    pipeline = ImportPipeline(
        unit_of_work_factory=effective_uow,
        concurrency=effective_config.concurrency,
        featuring_tokens=effective_config.featuring_tokens,
        max_conflict_retries=effective_config.max_conflict_retries,
        clock=clock or date.today,
    )
    result = await pipeline.run(effective_source)

    counters = result.counters
    log.info(
        f"Finished catalog import: imported={result.imported}, failed={result.failed}, "
        f"created={dict(counters.created)}, reused={dict(counters.reused)}, "
        f"conflicts={sum(counters.conflicts.values())}, links_added={counters.links_added}"
    )
    return result


async def most_popular_songs(
    month: date,
    *,
    limit: int = 10,
    unit_of_work_factory: CatalogUnitOfWorkFactory | None = None,
) -> list[PopularSong]:
    """Return the most played songs of the calendar month containing ``month``."""

    effective_uow = unit_of_work_factory or await _default_unit_of_work_factory()
    async with effective_uow() as uow:
        return await uow.repositories.songs.most_popular(month, limit=limit)
