"""Ports for persisting catalog entities.

Lookups return ``None`` when nothing matches. ``create`` raises
``ConflictError`` when the store already holds an entity with the same natural key.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from songgraph.domain.model import Album, Artist, NamedEntity, Song, Writer

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import date
    from uuid import UUID


@dataclass(frozen=True, slots=True)
class PopularSong:
    song_id: UUID
    title: str
    year: int
    plays: int


@runtime_checkable
class NamedEntityRepository[TEntity: NamedEntity](Protocol):
    """Name-keyed find-or-create capability (artists, writers)."""

    async def lookup_by_name(self, name: str) -> TEntity | None: ...

    async def create(self, name: str) -> TEntity: ...


@runtime_checkable
class ArtistRepository(NamedEntityRepository[Artist], Protocol):
    """Repository contract for artists."""


@runtime_checkable
class WriterRepository(NamedEntityRepository[Writer], Protocol):
    """Repository contract for writers."""


@runtime_checkable
class AlbumRepository(Protocol):
    """Repository contract for albums."""

    async def find_by_title_artists_year(
        self, title: str, artist_ids: Sequence[UUID], year: int
    ) -> Album | None: ...

    async def create(self, album: Album) -> Album: ...

    async def add_song(self, album_id: UUID, song_id: UUID) -> bool:
        """Atomically add ``song_id`` to the album's song set.

        Returns ``False`` when the song was already linked.
        """
        ...

    async def get(self, album_id: UUID) -> Album | None: ...


@runtime_checkable
class SongRepository(Protocol):
    """Repository contract for songs."""

    async def find_by_title_artists_year(
        self, title: str, artist_ids: Sequence[UUID], year: int
    ) -> Song | None: ...

    async def create(self, song: Song) -> Song: ...

    async def get(self, song_id: UUID) -> Song | None: ...

    async def most_popular(self, month: date, *, limit: int = 10) -> list[PopularSong]: ...
