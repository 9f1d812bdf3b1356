"""SQLAlchemy adapter package for songgraph."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyAlbumRepository,
    SqlAlchemyArtistRepository,
    SqlAlchemySongRepository,
    SqlAlchemyWriterRepository,
)
from .unit_of_work import (
    SqlAlchemyCatalogUnitOfWork,
    StartupError,
    configured_engine,
    create_engine_for,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyAlbumRepository",
    "SqlAlchemyArtistRepository",
    "SqlAlchemyCatalogUnitOfWork",
    "SqlAlchemySongRepository",
    "SqlAlchemyWriterRepository",
    "StartupError",
    "configured_engine",
    "create_all_tables",
    "create_engine_for",
    "is_started",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
