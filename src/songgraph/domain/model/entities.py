"""Catalog entities built by the import pipeline.

Artists and writers are plain name-keyed records. Albums and songs carry their
relations as id lists; the persistence layer owns the link tables behind them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar
from uuid import UUID, uuid4

from songgraph.domain.model.enums import EntityKind
from songgraph.domain.model.primitives import artist_set_key

if TYPE_CHECKING:
    from songgraph.domain.model.primitives import ArtistSetKey, Play


def new_id() -> UUID:
    return uuid4()


@dataclass(eq=False, kw_only=True)
class Entity:
    """Internal identity exists immediately in the domain."""

    id: UUID = field(default_factory=new_id)

    # class-level discriminator; subclasses must override
    ENTITY_KIND: ClassVar[EntityKind]

    @property
    def entity_kind(self) -> EntityKind:
        return self.ENTITY_KIND


@dataclass(eq=False, kw_only=True)
class NamedEntity(Entity):
    name: str


@dataclass(eq=False, kw_only=True)
class Artist(NamedEntity):
    ENTITY_KIND: ClassVar[EntityKind] = EntityKind.ARTIST


@dataclass(eq=False, kw_only=True)
class Writer(NamedEntity):
    ENTITY_KIND: ClassVar[EntityKind] = EntityKind.WRITER


@dataclass(eq=False, kw_only=True)
class Album(Entity):
    ENTITY_KIND: ClassVar[EntityKind] = EntityKind.ALBUM

    title: str
    year: int
    artist_ids: list[UUID] = field(default_factory=list[UUID])
    song_ids: list[UUID] = field(default_factory=list[UUID])

    @property
    def artist_key(self) -> ArtistSetKey:
        return artist_set_key(self.artist_ids)

    def has_song(self, song_id: UUID) -> bool:
        return song_id in self.song_ids

    def add_song(self, song_id: UUID) -> bool:
        """Append ``song_id`` unless present. Return whether it was appended."""
        if self.has_song(song_id):
            return False
        self.song_ids.append(song_id)
        return True


@dataclass(eq=False, kw_only=True)
class Song(Entity):
    ENTITY_KIND: ClassVar[EntityKind] = EntityKind.SONG

    title: str
    year: int
    album_ids: list[UUID] = field(default_factory=list[UUID])
    artist_ids: list[UUID] = field(default_factory=list[UUID])
    featuring_artist_ids: list[UUID] = field(default_factory=list[UUID])
    writer_ids: list[UUID] = field(default_factory=list[UUID])
    plays: list[Play] = field(default_factory=list["Play"])

    @property
    def artist_key(self) -> ArtistSetKey:
        return artist_set_key(self.artist_ids)

    @property
    def total_plays(self) -> int:
        return sum(play.count for play in self.plays)
