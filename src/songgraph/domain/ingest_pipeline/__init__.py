"""Import pipeline for catalog exports.

Normalization and play extraction are pure functions. Resolution, linking and
orchestration talk to the store only through ``CatalogUnitOfWork`` ports, one
unit of work per round trip.
"""

from __future__ import annotations

from .context import ImportCounters, ResolutionContext
from .linking import AlbumSongLinker
from .normalization import (
    DEFAULT_FEATURING_TOKENS,
    ArtistCredit,
    classify_album_title,
    normalize_album_title,
    normalize_name,
    normalize_song_title,
    split_artist_credit,
    split_writer_credit,
)
from .orchestrator import (
    DEFAULT_CONCURRENCY,
    ImportPipeline,
    ImportResult,
    RecordFailure,
    RunState,
)
from .plays import extract_plays, month_end
from .records import ImportedRecord, RecordImporter
from .resolution import (
    DEFAULT_MAX_CONFLICT_RETRIES,
    AlbumResolver,
    NamedEntityResolver,
    SongDraft,
    SongResolver,
    find_or_create,
)

__all__ = [
    "DEFAULT_CONCURRENCY",
    "DEFAULT_FEATURING_TOKENS",
    "DEFAULT_MAX_CONFLICT_RETRIES",
    "AlbumResolver",
    "AlbumSongLinker",
    "ArtistCredit",
    "ImportCounters",
    "ImportPipeline",
    "ImportResult",
    "ImportedRecord",
    "NamedEntityResolver",
    "RecordFailure",
    "RecordImporter",
    "ResolutionContext",
    "RunState",
    "SongDraft",
    "SongResolver",
    "classify_album_title",
    "extract_plays",
    "find_or_create",
    "month_end",
    "normalize_album_title",
    "normalize_name",
    "normalize_song_title",
    "split_artist_credit",
    "split_writer_credit",
]
