"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityKind(StrEnum):
    """Discriminator for cache keys and log messages."""

    ARTIST = "artist"
    WRITER = "writer"
    ALBUM = "album"
    SONG = "song"


class AlbumType(StrEnum):
    """Categorical labels substituted for placeholder album titles."""

    SINGLE = "single"
    REMIX = "remix"
    PROMO = "promo"
    LIVE = "live"
    SOUNDTRACK = "soundtrack"
    STANDARD = "standard"
    OTHER = "other"


class CreditRole(StrEnum):
    MAIN = "main"
    FEATURING = "featuring"
