"""SQLAlchemy-backed async units of work for catalog imports."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from songgraph.adapters.sqlalchemy.mappings import create_all_tables, start_mappers
from songgraph.adapters.sqlalchemy.repositories import (
    SqlAlchemyAlbumRepository,
    SqlAlchemyArtistRepository,
    SqlAlchemySongRepository,
    SqlAlchemyWriterRepository,
)
from songgraph.config import DatabaseConfig, InvalidConfigurationError, get_database_config
from songgraph.domain.ports.unit_of_work import CatalogRepositories, RepositoryCollection

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.ext.asyncio import AsyncEngine

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: AsyncEngine | None = None
    _session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def engine(self) -> AsyncEngine | None:
        return self._engine

    @engine.setter
    def engine(self, value: AsyncEngine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call songgraph.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def create_engine_for(database_uri: str) -> AsyncEngine:
    """Create an async SQLite engine with a busy timeout and foreign keys enabled.

    Link rows are written with SQLite's ``INSERT OR IGNORE``, so other backends
    are rejected.
    """

    if not DatabaseConfig(uri=database_uri).is_sqlite:
        raise InvalidConfigurationError(
            f"Only SQLite databases are supported, got {database_uri!r}"
        )

    engine = create_async_engine(
        database_uri,
        connect_args={"check_same_thread": False, "timeout": 30},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_conn: Any, _connection_record: Any) -> None:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


async def startup(
    *,
    engine: AsyncEngine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the engine, mappers, schema and session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )
    if _STATE.engine is not None and _STATE.engine is not engine:
        await _STATE.engine.dispose()

    resolved_engine = engine or create_engine_for(database_uri or get_database_config().uri)
    start_mappers()
    await create_all_tables(resolved_engine)
    log.info("SQLAlchemy adapter started on %s", resolved_engine.url.render_as_string())

    _STATE.engine = resolved_engine


def configured_engine() -> AsyncEngine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def is_started() -> bool:
    """Return whether the adapter has been initialised."""

    return _STATE.engine is not None


async def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        await _STATE.engine.dispose()
    _STATE.engine = None


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """Generic async SQLAlchemy unit of work with pluggable repository collections."""

    def __init__(self) -> None:
        self.session_factory: async_sessionmaker[AsyncSession] = _STATE.session_factory
        self._session: AsyncSession | None = None

    @abstractmethod
    def _build_repositories(self, session: AsyncSession) -> TRepositories: ...

    async def __aenter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        self.session = self.session_factory()
        self._repositories = self._build_repositories(self.session)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            await self.rollback()
        # closing discards anything left uncommitted
        await self.session.close()
        self.session = None
        return False

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()

    @property
    def repositories(self) -> TRepositories:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: AsyncSession | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session


class SqlAlchemyCatalogUnitOfWork(BaseSqlAlchemyUnitOfWork[CatalogRepositories]):
    """Unit of work for one catalog import round trip."""

    def _build_repositories(self, session: AsyncSession) -> CatalogRepositories:
        return CatalogRepositories(
            artists=SqlAlchemyArtistRepository(session),
            writers=SqlAlchemyWriterRepository(session),
            albums=SqlAlchemyAlbumRepository(session),
            songs=SqlAlchemySongRepository(session),
        )


if TYPE_CHECKING:
    from songgraph.domain.ports.unit_of_work import CatalogUnitOfWork

    _uow_check: CatalogUnitOfWork = SqlAlchemyCatalogUnitOfWork()
