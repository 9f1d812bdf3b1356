"""Import pipeline defaults and environment overrides."""

from __future__ import annotations

from dataclasses import dataclass

from songgraph.adapters.csv_export.reader import DEFAULT_READ_BATCH_SIZE
from songgraph.domain.ingest_pipeline.normalization import DEFAULT_FEATURING_TOKENS
from songgraph.domain.ingest_pipeline.orchestrator import (
    DEFAULT_CONCURRENCY as DEFAULT_IMPORT_CONCURRENCY,
)
from songgraph.domain.ingest_pipeline.resolution import DEFAULT_MAX_CONFLICT_RETRIES

from .env import int_env_var, list_env_var


@dataclass(frozen=True, slots=True)
class ImportConfig:
    concurrency: int = DEFAULT_IMPORT_CONCURRENCY
    read_batch_size: int = DEFAULT_READ_BATCH_SIZE
    max_conflict_retries: int = DEFAULT_MAX_CONFLICT_RETRIES
    featuring_tokens: tuple[str, ...] = DEFAULT_FEATURING_TOKENS


def get_import_config() -> ImportConfig:
    return ImportConfig(
        concurrency=int_env_var("IMPORT_CONCURRENCY", DEFAULT_IMPORT_CONCURRENCY),
        read_batch_size=int_env_var("IMPORT_READ_BATCH_SIZE", DEFAULT_READ_BATCH_SIZE),
        max_conflict_retries=int_env_var(
            "IMPORT_MAX_CONFLICT_RETRIES", DEFAULT_MAX_CONFLICT_RETRIES, minimum=0
        ),
        featuring_tokens=list_env_var("IMPORT_FEATURING_TOKENS", DEFAULT_FEATURING_TOKENS),
    )
