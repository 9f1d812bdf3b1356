"""Public domain model surface."""

from __future__ import annotations

from songgraph.domain.model.entities import (
    Album,
    Artist,
    Entity,
    NamedEntity,
    Song,
    Writer,
    new_id,
)
from songgraph.domain.model.enums import AlbumType, CreditRole, EntityKind
from songgraph.domain.model.primitives import ArtistSetKey, Play, artist_set_key

__all__ = [
    "Album",
    "AlbumType",
    "Artist",
    "ArtistSetKey",
    "CreditRole",
    "Entity",
    "EntityKind",
    "NamedEntity",
    "Play",
    "Song",
    "Writer",
    "artist_set_key",
    "new_id",
]
