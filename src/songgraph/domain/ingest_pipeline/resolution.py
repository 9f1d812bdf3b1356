"""Cached find-or-create resolution of catalog entities.

Every remote round trip runs in its own unit of work. A create that loses a race
against a concurrent creator surfaces as ``ConflictError`` from the repository;
the resolver then repeats the lookup, which now finds the winner's entity.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from songgraph.domain.errors import ConflictError, ResolutionError
from songgraph.domain.ingest_pipeline.normalization import (
    normalize_album_title,
    normalize_song_title,
)
from songgraph.domain.model import Album, EntityKind, Song

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable
    from uuid import UUID

    from songgraph.domain.ingest_pipeline.context import ImportCounters, ResolutionContext
    from songgraph.domain.model import NamedEntity, Play
    from songgraph.domain.ports import (
        CatalogRepositories,
        CatalogUnitOfWorkFactory,
        NamedEntityRepository,
    )


log = getLogger(__name__)

DEFAULT_MAX_CONFLICT_RETRIES = 3


async def find_or_create[TEntity](
    *,
    kind: EntityKind,
    key: object,
    lookup: Callable[[], Awaitable[TEntity | None]],
    create: Callable[[], Awaitable[TEntity]],
    counters: ImportCounters,
    max_conflict_retries: int = DEFAULT_MAX_CONFLICT_RETRIES,
) -> TEntity:
    """Look ``key`` up, create it when absent, and retry the lookup on conflicts."""

    conflicts = 0
    while True:
        found = await lookup()
        if found is not None:
            log.debug("Found existing %s %r", kind, key)
            counters.reused[kind] += 1
            return found

        log.debug("%s not found. Creating new %s: %r", kind.capitalize(), kind, key)
        try:
            created = await create()
        except ConflictError:
            conflicts += 1
            counters.conflicts[kind] += 1
            if conflicts > max_conflict_retries:
                raise ResolutionError(
                    kind, key, f"create still conflicting after {max_conflict_retries} retries"
                ) from None
            log.warning(
                "Concurrent create of %s %r; retrying lookup (%d/%d)",
                kind,
                key,
                conflicts,
                max_conflict_retries,
            )
            continue

        counters.created[kind] += 1
        return created


@dataclass(slots=True)
class NamedEntityResolver[TEntity: NamedEntity]:
    """Resolve names of one entity kind (artists or writers) to ids."""

    kind: EntityKind
    unit_of_work_factory: CatalogUnitOfWorkFactory
    select_repository: Callable[[CatalogRepositories], NamedEntityRepository[TEntity]]
    context: ResolutionContext
    max_conflict_retries: int = DEFAULT_MAX_CONFLICT_RETRIES

    async def resolve(self, name: str) -> UUID:
        cached = self.context.cached_id(self.kind, name)
        if cached is not None:
            return cached

        try:
            entity = await find_or_create(
                kind=self.kind,
                key=name,
                lookup=lambda: self._lookup(name),
                create=lambda: self._create(name),
                counters=self.context.counters,
                max_conflict_retries=self.max_conflict_retries,
            )
        except ResolutionError:
            raise
        except Exception as exc:
            log.warning("Error finding or creating %s %r: %s", self.kind, name, exc)
            raise ResolutionError(self.kind, name, str(exc)) from exc

        self.context.remember_id(self.kind, name, entity.id)
        return entity.id

    async def resolve_all(self, names: Iterable[str]) -> list[UUID]:
        """Resolve ``names`` in order, dropping repeated ids."""

        ids: list[UUID] = []
        for name in names:
            entity_id = await self.resolve(name)
            if entity_id not in ids:
                ids.append(entity_id)
        return ids

    async def _lookup(self, name: str) -> TEntity | None:
        async with self.unit_of_work_factory() as uow:
            return await self.select_repository(uow.repositories).lookup_by_name(name)

    async def _create(self, name: str) -> TEntity:
        async with self.unit_of_work_factory() as uow:
            entity = await self.select_repository(uow.repositories).create(name)
            await uow.commit()
            return entity


@dataclass(slots=True)
class AlbumResolver:
    """Resolve albums by (normalized title, main artist set, year)."""

    unit_of_work_factory: CatalogUnitOfWorkFactory
    context: ResolutionContext
    max_conflict_retries: int = DEFAULT_MAX_CONFLICT_RETRIES

    async def resolve(self, raw_title: str, artist_ids: list[UUID], year: int) -> Album | None:
        """Return the album for ``raw_title``; ``None`` when the title is blank."""

        title = normalize_album_title(raw_title)
        if not title:
            return None

        key = (title, frozenset(artist_ids), year)
        cached = self.context.cached_album(key)
        if cached is not None:
            return cached

        try:
            album = await find_or_create(
                kind=EntityKind.ALBUM,
                key=(title, year),
                lookup=lambda: self._lookup(title, artist_ids, year),
                create=lambda: self._create(title, artist_ids, year),
                counters=self.context.counters,
                max_conflict_retries=self.max_conflict_retries,
            )
        except ResolutionError:
            raise
        except Exception as exc:
            log.warning("Error finding or creating album %r (%s): %s", title, year, exc)
            raise ResolutionError(EntityKind.ALBUM, (title, year), str(exc)) from exc

        # One shared instance per key keeps the in-memory song lists consistent.
        return self.context.remember_album(key, album)

    async def _lookup(self, title: str, artist_ids: list[UUID], year: int) -> Album | None:
        async with self.unit_of_work_factory() as uow:
            return await uow.repositories.albums.find_by_title_artists_year(
                title, artist_ids, year
            )

    async def _create(self, title: str, artist_ids: list[UUID], year: int) -> Album:
        async with self.unit_of_work_factory() as uow:
            album = await uow.repositories.albums.create(
                Album(title=title, year=year, artist_ids=list(artist_ids))
            )
            await uow.commit()
            return album


@dataclass(slots=True)
class SongDraft:
    """Everything needed to create a song once its relations are resolved."""

    title: str
    year: int
    artist_ids: list[UUID] = field(default_factory=list["UUID"])
    featuring_artist_ids: list[UUID] = field(default_factory=list["UUID"])
    writer_ids: list[UUID] = field(default_factory=list["UUID"])
    album_id: UUID | None = None
    plays: list[Play] = field(default_factory=list["Play"])


@dataclass(slots=True)
class SongResolver:
    """Resolve songs by (normalized title, main artist set, year). Not cached."""

    unit_of_work_factory: CatalogUnitOfWorkFactory
    context: ResolutionContext
    max_conflict_retries: int = DEFAULT_MAX_CONFLICT_RETRIES

    async def resolve(self, draft: SongDraft) -> Song:
        title = normalize_song_title(draft.title)
        try:
            return await find_or_create(
                kind=EntityKind.SONG,
                key=(title, draft.year),
                lookup=lambda: self._lookup(title, draft.artist_ids, draft.year),
                create=lambda: self._create(title, draft),
                counters=self.context.counters,
                max_conflict_retries=self.max_conflict_retries,
            )
        except ResolutionError:
            raise
        except Exception as exc:
            log.warning("Error finding or creating song %r: %s", title, exc)
            raise ResolutionError(EntityKind.SONG, (title, draft.year), str(exc)) from exc

    async def _lookup(self, title: str, artist_ids: list[UUID], year: int) -> Song | None:
        async with self.unit_of_work_factory() as uow:
            return await uow.repositories.songs.find_by_title_artists_year(title, artist_ids, year)

    async def _create(self, title: str, draft: SongDraft) -> Song:
        song = Song(
            title=title,
            year=draft.year,
            album_ids=[draft.album_id] if draft.album_id is not None else [],
            artist_ids=list(draft.artist_ids),
            featuring_artist_ids=list(draft.featuring_artist_ids),
            writer_ids=list(draft.writer_ids),
            plays=list(draft.plays),
        )
        async with self.unit_of_work_factory() as uow:
            created = await uow.repositories.songs.create(song)
            await uow.commit()
            return created
