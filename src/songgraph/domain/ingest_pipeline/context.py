"""Run-scoped state shared by the resolvers of one import run."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID

    from songgraph.domain.model import Album, EntityKind


type NameCacheKey = tuple[EntityKind, str]
type AlbumCacheKey = tuple[str, frozenset[UUID], int]


@dataclass(slots=True)
class ImportCounters:
    """Per-kind tallies reported at the end of a run."""

    created: Counter[EntityKind] = field(default_factory=Counter["EntityKind"])
    reused: Counter[EntityKind] = field(default_factory=Counter["EntityKind"])
    cache_hits: Counter[EntityKind] = field(default_factory=Counter["EntityKind"])
    conflicts: Counter[EntityKind] = field(default_factory=Counter["EntityKind"])
    links_added: int = 0
    links_skipped: int = 0


@dataclass(slots=True)
class ResolutionContext:
    """Caches owned by a single import run.

    Caches are only populated after the remote lookup or create finished, so two
    concurrent resolutions of the same unseen key can both miss. Resolvers rely on
    the store's unique constraints to settle that race, never on this cache.
    """

    names: dict[NameCacheKey, UUID] = field(default_factory=dict["NameCacheKey", "UUID"])
    albums: dict[AlbumCacheKey, Album] = field(default_factory=dict["AlbumCacheKey", "Album"])
    counters: ImportCounters = field(default_factory=ImportCounters)

    def cached_id(self, kind: EntityKind, name: str) -> UUID | None:
        entity_id = self.names.get((kind, name))
        if entity_id is not None:
            self.counters.cache_hits[kind] += 1
        return entity_id

    def remember_id(self, kind: EntityKind, name: str, entity_id: UUID) -> None:
        self.names[(kind, name)] = entity_id

    def cached_album(self, key: AlbumCacheKey) -> Album | None:
        album = self.albums.get(key)
        if album is not None:
            self.counters.cache_hits[album.entity_kind] += 1
        return album

    def remember_album(self, key: AlbumCacheKey, album: Album) -> Album:
        """Cache ``album`` unless another task already did; return the cached instance."""
        return self.albums.setdefault(key, album)
