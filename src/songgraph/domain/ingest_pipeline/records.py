"""Per-record import: resolve every relation of one row and link the song."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from logging import getLogger
from typing import TYPE_CHECKING

from songgraph.domain.ingest_pipeline.linking import AlbumSongLinker
from songgraph.domain.ingest_pipeline.normalization import (
    DEFAULT_FEATURING_TOKENS,
    split_artist_credit,
    split_writer_credit,
)
from songgraph.domain.ingest_pipeline.plays import extract_plays
from songgraph.domain.ingest_pipeline.resolution import (
    DEFAULT_MAX_CONFLICT_RETRIES,
    AlbumResolver,
    NamedEntityResolver,
    SongDraft,
    SongResolver,
)
from songgraph.domain.model import Artist, EntityKind, Writer

if TYPE_CHECKING:
    from collections.abc import Callable
    from uuid import UUID

    from songgraph.domain.ingest_pipeline.context import ResolutionContext
    from songgraph.domain.model import Album, Song
    from songgraph.domain.ports import (
        CatalogUnitOfWorkFactory,
        ImportRecord,
        SourceRecord,
    )


log = getLogger(__name__)


@dataclass(slots=True)
class ImportedRecord:
    line: int
    song: Song
    album: Album | None
    artist_ids: list[UUID] = field(default_factory=list["UUID"])
    featuring_artist_ids: list[UUID] = field(default_factory=list["UUID"])
    writer_ids: list[UUID] = field(default_factory=list["UUID"])
    linked: bool = False


class RecordImporter:
    """Turn one validated record into persisted catalog entities.

    Relations resolve in a fixed order: main artists, featuring artists, writers,
    album, song, then the album link. Any failure aborts only this record.
    """

    def __init__(
        self,
        *,
        unit_of_work_factory: CatalogUnitOfWorkFactory,
        context: ResolutionContext,
        featuring_tokens: tuple[str, ...] = DEFAULT_FEATURING_TOKENS,
        max_conflict_retries: int = DEFAULT_MAX_CONFLICT_RETRIES,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self.featuring_tokens = featuring_tokens
        self.clock = clock
        self.artists = NamedEntityResolver[Artist](
            kind=EntityKind.ARTIST,
            unit_of_work_factory=unit_of_work_factory,
            select_repository=lambda repositories: repositories.artists,
            context=context,
            max_conflict_retries=max_conflict_retries,
        )
        self.writers = NamedEntityResolver[Writer](
            kind=EntityKind.WRITER,
            unit_of_work_factory=unit_of_work_factory,
            select_repository=lambda repositories: repositories.writers,
            context=context,
            max_conflict_retries=max_conflict_retries,
        )
        self.albums = AlbumResolver(
            unit_of_work_factory=unit_of_work_factory,
            context=context,
            max_conflict_retries=max_conflict_retries,
        )
        self.songs = SongResolver(
            unit_of_work_factory=unit_of_work_factory,
            context=context,
            max_conflict_retries=max_conflict_retries,
        )
        self.linker = AlbumSongLinker(unit_of_work_factory=unit_of_work_factory, context=context)

    async def import_record(self, source: SourceRecord, record: ImportRecord) -> ImportedRecord:
        credit = split_artist_credit(record.artist_field, featuring_tokens=self.featuring_tokens)
        artist_ids = await self.artists.resolve_all(credit.main)
        featuring_artist_ids = await self.artists.resolve_all(credit.featuring)
        writer_ids = await self.writers.resolve_all(split_writer_credit(record.writer_field))

        album = await self.albums.resolve(record.album_title, artist_ids, record.year)

        song = await self.songs.resolve(
            SongDraft(
                title=record.song_title,
                year=record.year,
                artist_ids=artist_ids,
                featuring_artist_ids=featuring_artist_ids,
                writer_ids=writer_ids,
                album_id=album.id if album is not None else None,
                plays=extract_plays(source.fields, today=self.clock()),
            )
        )

        linked = False
        if album is not None:
            linked = await self.linker.link(album, song.id)

        imported = ImportedRecord(
            line=source.line,
            song=song,
            album=album,
            artist_ids=artist_ids,
            featuring_artist_ids=featuring_artist_ids,
            writer_ids=writer_ids,
            linked=linked,
        )
        log_imported_record(imported)
        return imported


def log_imported_record(imported: ImportedRecord) -> None:
    song = imported.song
    log.info(
        "Imported line %d: %r (%s) album=%r artists=%d featuring=%d writers=%d plays=%d",
        imported.line,
        song.title,
        song.year,
        imported.album.title if imported.album is not None else None,
        len(imported.artist_ids),
        len(imported.featuring_artist_ids),
        len(imported.writer_ids),
        song.total_plays,
    )
