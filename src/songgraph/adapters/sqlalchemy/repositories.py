"""Repository implementations backed by SQLAlchemy async sessions."""

from __future__ import annotations

import calendar
from datetime import date
from typing import TYPE_CHECKING, cast

from sqlalchemy import func, insert, select
from sqlalchemy.exc import IntegrityError

from songgraph.adapters.sqlalchemy.mappings import (
    album_artist_table,
    album_song_table,
    album_table,
    artist_table,
    play_table,
    song_album_table,
    song_artist_table,
    song_table,
    song_writer_table,
    writer_table,
)
from songgraph.domain.errors import ConflictError
from songgraph.domain.model import (
    Album,
    Artist,
    CreditRole,
    EntityKind,
    NamedEntity,
    Play,
    Song,
    Writer,
    artist_set_key,
)
from songgraph.domain.ports import PopularSong

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from sqlalchemy import Table
    from sqlalchemy.engine import CursorResult
    from sqlalchemy.ext.asyncio import AsyncSession


class SqlAlchemyNamedEntityRepository[TEntity: NamedEntity]:
    """Shared find-or-create helpers for name-keyed entities."""

    def __init__(self, session: AsyncSession, entity_cls: type[TEntity], table: Table) -> None:
        self.session = session
        self._entity_cls = entity_cls
        self._table = table

    async def lookup_by_name(self, name: str) -> TEntity | None:
        stmt = select(self._entity_cls).where(self._table.c.name == name).limit(1)
        return await self.session.scalar(stmt)

    async def create(self, name: str) -> TEntity:
        entity = self._entity_cls(name=name)
        self.session.add(entity)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise ConflictError(entity.entity_kind, name) from exc
        return entity


class SqlAlchemyArtistRepository(SqlAlchemyNamedEntityRepository[Artist]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Artist, artist_table)


class SqlAlchemyWriterRepository(SqlAlchemyNamedEntityRepository[Writer]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Writer, writer_table)


class SqlAlchemyAlbumRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_by_title_artists_year(
        self, title: str, artist_ids: Sequence[UUID], year: int
    ) -> Album | None:
        stmt = (
            select(album_table.c.id)
            .where(album_table.c.title == title)
            .where(album_table.c.artist_key == artist_set_key(artist_ids))
            .where(album_table.c.year == year)
        )
        album_id = await self.session.scalar(stmt)
        if album_id is None:
            return None
        return await self.get(album_id)

    async def create(self, album: Album) -> Album:
        try:
            await self.session.execute(
                insert(album_table).values(
                    id=album.id,
                    title=album.title,
                    year=album.year,
                    artist_key=album.artist_key,
                )
            )
        except IntegrityError as exc:
            raise ConflictError(EntityKind.ALBUM, (album.title, album.year)) from exc

        if album.artist_ids:
            await self.session.execute(
                insert(album_artist_table),
                [
                    {"album_id": album.id, "artist_id": artist_id, "position": position}
                    for position, artist_id in enumerate(album.artist_ids)
                ],
            )
        for song_id in album.song_ids:
            await self.add_song(album.id, song_id)
        return album

    async def add_song(self, album_id: UUID, song_id: UUID) -> bool:
        stmt = (
            insert(album_song_table)
            .prefix_with("OR IGNORE")
            .values(album_id=album_id, song_id=song_id)
        )
        result = cast("CursorResult[tuple[()]]", await self.session.execute(stmt))
        return result.rowcount == 1

    async def get(self, album_id: UUID) -> Album | None:
        row = (
            await self.session.execute(
                select(album_table.c.title, album_table.c.year).where(album_table.c.id == album_id)
            )
        ).one_or_none()
        if row is None:
            return None

        artist_ids = await self.session.scalars(
            select(album_artist_table.c.artist_id)
            .where(album_artist_table.c.album_id == album_id)
            .order_by(album_artist_table.c.position)
        )
        song_ids = await self.session.scalars(
            select(album_song_table.c.song_id)
            .where(album_song_table.c.album_id == album_id)
            .order_by(album_song_table.c.id)
        )
        return Album(
            id=album_id,
            title=row.title,
            year=row.year,
            artist_ids=list(artist_ids),
            song_ids=list(song_ids),
        )


class SqlAlchemySongRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_by_title_artists_year(
        self, title: str, artist_ids: Sequence[UUID], year: int
    ) -> Song | None:
        stmt = (
            select(song_table.c.id)
            .where(song_table.c.title == title)
            .where(song_table.c.artist_key == artist_set_key(artist_ids))
            .where(song_table.c.year == year)
        )
        song_id = await self.session.scalar(stmt)
        if song_id is None:
            return None
        return await self.get(song_id)

    async def create(self, song: Song) -> Song:
        try:
            await self.session.execute(
                insert(song_table).values(
                    id=song.id,
                    title=song.title,
                    year=song.year,
                    artist_key=song.artist_key,
                )
            )
        except IntegrityError as exc:
            raise ConflictError(EntityKind.SONG, (song.title, song.year)) from exc

        credits = [
            {"song_id": song.id, "artist_id": artist_id, "role": role, "position": position}
            for role, artist_ids in (
                (CreditRole.MAIN, song.artist_ids),
                (CreditRole.FEATURING, song.featuring_artist_ids),
            )
            for position, artist_id in enumerate(artist_ids)
        ]
        if credits:
            await self.session.execute(insert(song_artist_table), credits)
        if song.writer_ids:
            await self.session.execute(
                insert(song_writer_table),
                [
                    {"song_id": song.id, "writer_id": writer_id, "position": position}
                    for position, writer_id in enumerate(song.writer_ids)
                ],
            )
        if song.album_ids:
            await self.session.execute(
                insert(song_album_table),
                [
                    {"song_id": song.id, "album_id": album_id, "position": position}
                    for position, album_id in enumerate(song.album_ids)
                ],
            )
        if song.plays:
            await self.session.execute(
                insert(play_table),
                [
                    {"song_id": song.id, "month": play.month, "count": play.count}
                    for play in song.plays
                ],
            )
        return song

    async def get(self, song_id: UUID) -> Song | None:
        row = (
            await self.session.execute(
                select(song_table.c.title, song_table.c.year).where(song_table.c.id == song_id)
            )
        ).one_or_none()
        if row is None:
            return None

        credits = await self.session.execute(
            select(song_artist_table.c.artist_id, song_artist_table.c.role)
            .where(song_artist_table.c.song_id == song_id)
            .order_by(song_artist_table.c.position)
        )
        artist_ids: list[UUID] = []
        featuring_artist_ids: list[UUID] = []
        for artist_id, role in credits:
            if role == CreditRole.FEATURING:
                featuring_artist_ids.append(artist_id)
            else:
                artist_ids.append(artist_id)

        writer_ids = await self.session.scalars(
            select(song_writer_table.c.writer_id)
            .where(song_writer_table.c.song_id == song_id)
            .order_by(song_writer_table.c.position)
        )
        album_ids = await self.session.scalars(
            select(song_album_table.c.album_id)
            .where(song_album_table.c.song_id == song_id)
            .order_by(song_album_table.c.position)
        )
        plays = await self.session.execute(
            select(play_table.c.month, play_table.c.count)
            .where(play_table.c.song_id == song_id)
            .order_by(play_table.c.id)
        )
        return Song(
            id=song_id,
            title=row.title,
            year=row.year,
            album_ids=list(album_ids),
            artist_ids=artist_ids,
            featuring_artist_ids=featuring_artist_ids,
            writer_ids=list(writer_ids),
            plays=[Play(month=month, count=count) for month, count in plays],
        )

    async def most_popular(self, month: date, *, limit: int = 10) -> list[PopularSong]:
        """Return the songs with the most plays in the calendar month of ``month``."""

        _, last_day = calendar.monthrange(month.year, month.month)
        total = func.sum(play_table.c.count).label("total")
        stmt = (
            select(song_table.c.id, song_table.c.title, song_table.c.year, total)
            .join(play_table, play_table.c.song_id == song_table.c.id)
            .where(play_table.c.month >= month.replace(day=1))
            .where(play_table.c.month <= date(month.year, month.month, last_day))
            .group_by(song_table.c.id, song_table.c.title, song_table.c.year)
            .order_by(total.desc(), song_table.c.title)
            .limit(limit)
        )
        rows = await self.session.execute(stmt)
        return [
            PopularSong(song_id=song_id, title=title, year=year, plays=plays)
            for song_id, title, year, plays in rows
        ]


if TYPE_CHECKING:
    from songgraph.domain.ports.persistence import (
        AlbumRepository,
        ArtistRepository,
        SongRepository,
        WriterRepository,
    )

    _session_stub = cast("AsyncSession", object())
    _artist_repo: ArtistRepository = SqlAlchemyArtistRepository(_session_stub)
    _writer_repo: WriterRepository = SqlAlchemyWriterRepository(_session_stub)
    _album_repo: AlbumRepository = SqlAlchemyAlbumRepository(_session_stub)
    _song_repo: SongRepository = SqlAlchemySongRepository(_session_stub)
