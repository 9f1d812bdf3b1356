from __future__ import annotations

from uuid import uuid4

from songgraph.domain.ingest_pipeline.context import ResolutionContext
from songgraph.domain.model import Album, EntityKind


def test_cached_id_counts_hits_only() -> None:
    context = ResolutionContext()
    artist_id = uuid4()

    assert context.cached_id(EntityKind.ARTIST, "HAIM") is None
    context.remember_id(EntityKind.ARTIST, "HAIM", artist_id)

    assert context.cached_id(EntityKind.ARTIST, "HAIM") == artist_id
    assert context.cached_id(EntityKind.WRITER, "HAIM") is None
    assert context.counters.cache_hits == {EntityKind.ARTIST: 1}


def test_remember_album_keeps_first_instance() -> None:
    context = ResolutionContext()
    key = ("Red", frozenset(), 2012)
    first = Album(title="Red", year=2012)
    second = Album(id=first.id, title="Red", year=2012)

    assert context.remember_album(key, first) is first
    assert context.remember_album(key, second) is first
    assert context.cached_album(key) is first
    assert context.counters.cache_hits[EntityKind.ALBUM] == 1
