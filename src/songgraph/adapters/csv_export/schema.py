"""Pydantic model describing one row of a catalog CSV export."""

from __future__ import annotations

from typing import Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

REQUIRED_COLUMNS: Final[tuple[str, ...]] = ("Song", "Artist", "Writer", "Album", "Year")


class ExportRowPayload(BaseModel):
    """Fixed columns of an export row; ``Plays - <Month>`` columns are ignored here."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, str_strip_whitespace=True)

    song: str = Field(alias="Song", min_length=1)
    artist: str = Field(default="", alias="Artist")
    writer: str = Field(default="", alias="Writer")
    album: str = Field(default="", alias="Album")
    year: int = Field(alias="Year", gt=0)

    @field_validator("year", mode="before")
    @classmethod
    def _parse_year(cls, value: object) -> object:
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped.isdigit():
                raise ValueError(f"year must be a whole number, got {value!r}")
            return int(stripped)
        return value
