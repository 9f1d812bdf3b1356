"""Idempotent album to song linking."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from songgraph.domain.errors import LinkingPersistError

if TYPE_CHECKING:
    from uuid import UUID

    from songgraph.domain.ingest_pipeline.context import ResolutionContext
    from songgraph.domain.model import Album
    from songgraph.domain.ports import CatalogUnitOfWorkFactory


log = getLogger(__name__)


@dataclass(slots=True)
class AlbumSongLinker:
    """Add songs to albums at most once.

    The store performs an insert-if-absent, so concurrent links of the same pair
    leave exactly one entry even when both tasks miss the in-memory check.
    """

    unit_of_work_factory: CatalogUnitOfWorkFactory
    context: ResolutionContext

    async def link(self, album: Album, song_id: UUID) -> bool:
        """Link ``song_id`` to ``album``. Return whether a new entry was stored."""

        if album.has_song(song_id):
            log.debug("Song %s already in album %r, skipping", song_id, album.title)
            self.context.counters.links_skipped += 1
            return False

        try:
            async with self.unit_of_work_factory() as uow:
                added = await uow.repositories.albums.add_song(album.id, song_id)
                await uow.commit()
        except Exception as exc:
            log.warning("Error adding song %s to album %r: %s", song_id, album.title, exc)
            raise LinkingPersistError(
                f"Could not add song {song_id} to album {album.title!r} [{album.id}]"
            ) from exc

        album.add_song(song_id)
        if added:
            log.debug("Added song %s to album %r", song_id, album.title)
            self.context.counters.links_added += 1
        else:
            self.context.counters.links_skipped += 1
        return added
