"""SQLAlchemy table metadata and mappers for the catalog model.

Artists and writers are mapped imperatively. Albums and songs keep their
relations in link tables and are read and written through Core statements by
the repositories.
"""

from __future__ import annotations

import logging
import uuid
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    Enum,
    ForeignKey,
    Integer,
    String,
    Table,
    UniqueConstraint,
    Uuid,
    orm,
)

from songgraph.domain.model import Artist, CreditRole, Writer

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Named entities -------------------------------------------------------------

artist_table = Table(
    "artist",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False, unique=True),
)

writer_table = Table(
    "writer",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False, unique=True),
)

# Albums ---------------------------------------------------------------------

album_table = Table(
    "album",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("title", String, nullable=False),
    Column("year", Integer, nullable=False),
    Column("artist_key", String, nullable=False),
    UniqueConstraint("title", "artist_key", "year"),
)

album_artist_table = Table(
    "album_artist",
    mapper_registry.metadata,
    Column(
        "album_id", UUIDColumnType, ForeignKey("album.id", ondelete="CASCADE"), primary_key=True
    ),
    Column(
        "artist_id", UUIDColumnType, ForeignKey("artist.id", ondelete="CASCADE"), primary_key=True
    ),
    Column("position", Integer, nullable=False),
)

# Ordered song list of an album; ``id`` keeps insertion order.
album_song_table = Table(
    "album_song",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "album_id", UUIDColumnType, ForeignKey("album.id", ondelete="CASCADE"), nullable=False
    ),
    Column("song_id", UUIDColumnType, ForeignKey("song.id", ondelete="CASCADE"), nullable=False),
    UniqueConstraint("album_id", "song_id"),
)

# Songs ----------------------------------------------------------------------

song_table = Table(
    "song",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("title", String, nullable=False),
    Column("year", Integer, nullable=False),
    Column("artist_key", String, nullable=False),
    UniqueConstraint("title", "artist_key", "year"),
)

song_artist_table = Table(
    "song_artist",
    mapper_registry.metadata,
    Column(
        "song_id", UUIDColumnType, ForeignKey("song.id", ondelete="CASCADE"), primary_key=True
    ),
    Column(
        "artist_id", UUIDColumnType, ForeignKey("artist.id", ondelete="CASCADE"), primary_key=True
    ),
    Column("role", Enum(CreditRole, native_enum=False), primary_key=True),
    Column("position", Integer, nullable=False),
)

song_writer_table = Table(
    "song_writer",
    mapper_registry.metadata,
    Column(
        "song_id", UUIDColumnType, ForeignKey("song.id", ondelete="CASCADE"), primary_key=True
    ),
    Column(
        "writer_id", UUIDColumnType, ForeignKey("writer.id", ondelete="CASCADE"), primary_key=True
    ),
    Column("position", Integer, nullable=False),
)

song_album_table = Table(
    "song_album",
    mapper_registry.metadata,
    Column(
        "song_id", UUIDColumnType, ForeignKey("song.id", ondelete="CASCADE"), primary_key=True
    ),
    Column(
        "album_id", UUIDColumnType, ForeignKey("album.id", ondelete="CASCADE"), primary_key=True
    ),
    Column("position", Integer, nullable=False),
)

play_table = Table(
    "play",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("song_id", UUIDColumnType, ForeignKey("song.id", ondelete="CASCADE"), nullable=False),
    Column("month", Date, nullable=False, index=True),
    Column("count", Integer, nullable=False),
    CheckConstraint("count >= 0", name="count_non_negative"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the name-keyed entities."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(Artist, artist_table)
    mapper_registry.map_imperatively(Writer, writer_table)

    orm.configure_mappers()
    return mapper_registry


async def create_all_tables(engine: AsyncEngine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    async with engine.begin() as conn:
        await conn.run_sync(mapper_registry.metadata.create_all)
