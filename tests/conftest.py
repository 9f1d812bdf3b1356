from __future__ import annotations

import os
from datetime import date
from typing import TYPE_CHECKING

import pytest

from songgraph.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyCatalogUnitOfWork,
    create_engine_for,
    shutdown,
    startup,
)
from tests.support.catalog import InMemoryCatalogStore

os.environ.setdefault("DATABASE_URI", "sqlite+aiosqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable
    from pathlib import Path

    from sqlalchemy.ext.asyncio import AsyncEngine

TODAY = date(2024, 3, 15)


@pytest.fixture
def today() -> Callable[[], date]:
    return lambda: TODAY


@pytest.fixture
def catalog_store() -> InMemoryCatalogStore:
    return InMemoryCatalogStore()


@pytest.fixture
async def sqlite_engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    # A file database: concurrent sessions need separate connections.
    engine = create_engine_for(f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}")
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
async def sqlite_unit_of_work(
    sqlite_engine: AsyncEngine,
) -> AsyncIterator[Callable[[], SqlAlchemyCatalogUnitOfWork]]:
    await startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyCatalogUnitOfWork:
        return SqlAlchemyCatalogUnitOfWork()

    try:
        yield factory
    finally:
        await shutdown()
