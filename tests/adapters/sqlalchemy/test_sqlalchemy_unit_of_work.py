from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from songgraph.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyCatalogUnitOfWork,
    StartupError,
    configured_engine,
    create_engine_for,
    is_started,
    shutdown,
    startup,
)
from songgraph.config import InvalidConfigurationError

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.ext.asyncio import AsyncEngine


async def test_unit_of_work_requires_startup() -> None:
    await shutdown()

    assert not is_started()
    with pytest.raises(StartupError, match="not initialised"):
        SqlAlchemyCatalogUnitOfWork()


async def test_repositories_require_an_open_unit(
    sqlite_unit_of_work: Callable[[], SqlAlchemyCatalogUnitOfWork],
) -> None:
    uow = sqlite_unit_of_work()

    with pytest.raises(StartupError, match="session not initialised"):
        _ = uow.repositories


async def test_startup_twice_requires_force(
    sqlite_engine: AsyncEngine,
    sqlite_unit_of_work: Callable[[], SqlAlchemyCatalogUnitOfWork],
) -> None:
    with pytest.raises(StartupError, match="already initialised"):
        await startup(engine=sqlite_engine)

    assert configured_engine() is sqlite_engine


async def test_uncommitted_work_is_discarded(
    sqlite_unit_of_work: Callable[[], SqlAlchemyCatalogUnitOfWork],
) -> None:
    async with sqlite_unit_of_work() as uow:
        await uow.repositories.artists.create("Lorde")

    async with sqlite_unit_of_work() as uow:
        assert await uow.repositories.artists.lookup_by_name("Lorde") is None


async def test_error_inside_unit_rolls_back(
    sqlite_unit_of_work: Callable[[], SqlAlchemyCatalogUnitOfWork],
) -> None:
    with pytest.raises(RuntimeError, match="boom"):
        async with sqlite_unit_of_work() as uow:
            await uow.repositories.writers.create("Jack Antonoff")
            raise RuntimeError("boom")

    async with sqlite_unit_of_work() as uow:
        assert await uow.repositories.writers.lookup_by_name("Jack Antonoff") is None


async def test_committed_work_is_visible_to_later_units(
    sqlite_unit_of_work: Callable[[], SqlAlchemyCatalogUnitOfWork],
) -> None:
    async with sqlite_unit_of_work() as uow:
        artist = await uow.repositories.artists.create("Lorde")
        await uow.commit()

    async with sqlite_unit_of_work() as uow:
        found = await uow.repositories.artists.lookup_by_name("Lorde")

    assert found is not None
    assert found.id == artist.id


async def test_startup_rejects_non_sqlite_uri() -> None:
    await shutdown()

    with pytest.raises(InvalidConfigurationError, match="Only SQLite"):
        create_engine_for("postgresql+asyncpg://localhost/catalog")
    with pytest.raises(InvalidConfigurationError, match="Only SQLite"):
        await startup(database_uri="postgresql+asyncpg://localhost/catalog")

    assert not is_started()
