"""Domain primitives: scalar aliases + small value objects."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import date
    from uuid import UUID

type ArtistSetKey = str


@dataclass(frozen=True, slots=True)
class Play:
    """Monthly play count owned by a single song.

    ``month`` is the last calendar day of the counted month.
    """

    month: date
    count: int

    def __post_init__(self) -> None:
        if self.count < 0:
            raise ValueError(f"Play count must be non-negative, got {self.count}")


def artist_set_key(artist_ids: Iterable[UUID]) -> ArtistSetKey:
    """Return an order-independent key for a set of artist ids.

    Albums and songs are unique on (title, artist set, year); storing the set as a
    sorted string lets a plain unique constraint enforce that.
    """

    return ",".join(sorted({str(artist_id) for artist_id in artist_ids}))
