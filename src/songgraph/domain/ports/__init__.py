"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import (
    AlbumRepository,
    ArtistRepository,
    NamedEntityRepository,
    PopularSong,
    SongRepository,
    WriterRepository,
)
from .sources import ImportRecord, RecordSource, SourceRecord
from .unit_of_work import (
    CatalogRepositories,
    CatalogUnitOfWork,
    CatalogUnitOfWorkFactory,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "AlbumRepository",
    "ArtistRepository",
    "CatalogRepositories",
    "CatalogUnitOfWork",
    "CatalogUnitOfWorkFactory",
    "ImportRecord",
    "NamedEntityRepository",
    "PopularSong",
    "RecordSource",
    "RepositoryCollection",
    "SongRepository",
    "SourceRecord",
    "UnitOfWork",
    "WriterRepository",
]
