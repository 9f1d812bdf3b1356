"""Bounded-concurrency orchestration of an import run."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from songgraph.domain.errors import RecordValidationError
from songgraph.domain.ingest_pipeline.context import ImportCounters, ResolutionContext
from songgraph.domain.ingest_pipeline.normalization import DEFAULT_FEATURING_TOKENS
from songgraph.domain.ingest_pipeline.records import RecordImporter
from songgraph.domain.ingest_pipeline.resolution import DEFAULT_MAX_CONFLICT_RETRIES

if TYPE_CHECKING:
    from collections.abc import Callable

    from songgraph.domain.ports import CatalogUnitOfWorkFactory, RecordSource, SourceRecord


log = getLogger(__name__)

DEFAULT_CONCURRENCY = 10


class RunState(StrEnum):
    IDLE = "idle"
    STREAMING = "streaming"
    COMPLETED = "completed"
    ABORTED = "aborted"


@dataclass(frozen=True, slots=True)
class RecordFailure:
    line: int
    error: Exception

    @property
    def reason(self) -> str:
        return f"{type(self.error).__name__}: {self.error}"


@dataclass(slots=True)
class ImportResult:
    """Outcome of one run. ``dispatched == imported + len(failures)`` once completed."""

    state: RunState = RunState.IDLE
    dispatched: int = 0
    imported: int = 0
    failures: list[RecordFailure] = field(default_factory=list["RecordFailure"])
    counters: ImportCounters = field(default_factory=ImportCounters)

    @property
    def failed(self) -> int:
        return len(self.failures)


@dataclass(slots=True)
class ImportPipeline:
    """Stream records from a source and import them with bounded concurrency.

    Records are processed by ``concurrency`` worker tasks fed from a bounded queue,
    so at most ``concurrency`` records are in flight and reading pauses while all
    workers are busy. Record failures are collected; a failure of the source itself
    aborts the run. Completion order across records is not defined.
    """

    unit_of_work_factory: CatalogUnitOfWorkFactory
    concurrency: int = DEFAULT_CONCURRENCY
    featuring_tokens: tuple[str, ...] = DEFAULT_FEATURING_TOKENS
    max_conflict_retries: int = DEFAULT_MAX_CONFLICT_RETRIES
    clock: Callable[[], date] = date.today
    state: RunState = field(default=RunState.IDLE, init=False)

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {self.concurrency}")
        if self.max_conflict_retries < 0:
            raise ValueError("max_conflict_retries must not be negative")

    async def run(self, source: RecordSource) -> ImportResult:
        if self.state is not RunState.IDLE:
            raise RuntimeError(f"Import pipeline already {self.state}")

        context = ResolutionContext()
        result = ImportResult(counters=context.counters)
        importer = RecordImporter(
            unit_of_work_factory=self.unit_of_work_factory,
            context=context,
            featuring_tokens=self.featuring_tokens,
            max_conflict_retries=self.max_conflict_retries,
            clock=self.clock,
        )
        queue: asyncio.Queue[SourceRecord | None] = asyncio.Queue(maxsize=self.concurrency)
        workers = [
            asyncio.create_task(
                self._work(queue, source, importer, result), name=f"import-worker-{index}"
            )
            for index in range(self.concurrency)
        ]

        self._transition(RunState.STREAMING, result)
        log.info("Starting import with concurrency %d", self.concurrency)
        try:
            async for record in source.records():
                result.dispatched += 1
                await queue.put(record)
        except BaseException:
            self._transition(RunState.ABORTED, result)
            for worker in workers:
                worker.cancel()
            await asyncio.gather(*workers, return_exceptions=True)
            log.exception("Import aborted after %d dispatched records", result.dispatched)
            raise

        for _ in workers:
            await queue.put(None)
        await asyncio.gather(*workers)

        self._transition(RunState.COMPLETED, result)
        log.info(
            "Import finished: %d dispatched, %d imported, %d failed",
            result.dispatched,
            result.imported,
            result.failed,
        )
        for failure in result.failures:
            log.warning("Line %d failed: %s", failure.line, failure.reason)
        return result

    def _transition(self, state: RunState, result: ImportResult) -> None:
        log.debug("Import run %s -> %s", self.state, state)
        self.state = state
        result.state = state

    async def _work(
        self,
        queue: asyncio.Queue[SourceRecord | None],
        source: RecordSource,
        importer: RecordImporter,
        result: ImportResult,
    ) -> None:
        while True:
            record = await queue.get()
            try:
                if record is None:
                    return
                await self._process(record, source, importer, result)
            finally:
                queue.task_done()

    async def _process(
        self,
        record: SourceRecord,
        source: RecordSource,
        importer: RecordImporter,
        result: ImportResult,
    ) -> None:
        try:
            parsed = source.parse(record)
            await importer.import_record(record, parsed)
        except RecordValidationError as exc:
            log.warning("Skipping line %d: %s", record.line, exc)
            result.failures.append(RecordFailure(line=record.line, error=exc))
        except Exception as exc:
            log.exception("Error processing line %d", record.line)
            result.failures.append(RecordFailure(line=record.line, error=exc))
        else:
            result.imported += 1
