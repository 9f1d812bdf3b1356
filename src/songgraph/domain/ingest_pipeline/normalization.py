"""Text normalization for names and titles arriving from catalog exports.

Every function here is pure and total: any string goes in, a string (or a tuple
of strings) comes out.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import cache
from typing import Final

from songgraph.domain.model import AlbumType

DEFAULT_FEATURING_TOKENS: Final[tuple[str, ...]] = ("featuring", "feat.", "ft.")
ALBUM_TITLE_SEPARATOR: Final[str] = " - "

PLACEHOLDER_ALBUM_TYPES: Final[dict[str, AlbumType]] = {
    "none": AlbumType.SINGLE,
    "none[a]": AlbumType.REMIX,
    "none[b]": AlbumType.PROMO,
    "none[c]": AlbumType.LIVE,
    "none[d]": AlbumType.SOUNDTRACK,
    "none[e]": AlbumType.STANDARD,
    "none[f]": AlbumType.OTHER,
}

_FOOTNOTE_RE = re.compile(r"\[\w\]")
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")
_PADDED_LINE_BREAK_RE = re.compile(r"[ \t]*(?:\r\n|\r|\n)[ \t]*")
_REPEATED_SPACE_RE = re.compile(r" {2,}")
_SPACE_BEFORE_QUESTION_RE = re.compile(r" +\?")
_LEADING_CONJUNCTION_RE = re.compile(r"^(?:and\s+|&\s*)", re.IGNORECASE)
_NAME_SEPARATOR_RE = re.compile(r"\s*(?:,|&|\band\b)\s*", re.IGNORECASE)
_WRITER_SEPARATOR_RE = re.compile(r"[\r\n,]+")
_AFFILIATION_RE = re.compile(r"\s+of\s+.*$", re.IGNORECASE | re.DOTALL)


@dataclass(frozen=True, slots=True)
class ArtistCredit:
    """Main and featuring artist names split out of one credit field."""

    main: tuple[str, ...] = ()
    featuring: tuple[str, ...] = ()


# --- Text normalizer ---------------------------------------------------------


def strip_footnotes(text: str) -> str:
    """Remove footnote markers such as ``[a]`` and trim."""

    stripped = _FOOTNOTE_RE.sub("", text)
    return _REPEATED_SPACE_RE.sub(" ", stripped).strip()


def collapse_lines(text: str) -> str:
    """Join multi-line text into one line separated by single spaces."""

    joined = _PADDED_LINE_BREAK_RE.sub(" ", text)
    return _REPEATED_SPACE_RE.sub(" ", joined).strip()


def fix_question_spacing(text: str) -> str:
    """Remove spaces in front of a question mark (``"Why ?"`` -> ``"Why?"``)."""

    return _SPACE_BEFORE_QUESTION_RE.sub("?", text)


def normalize_name(text: str) -> str:
    return strip_footnotes(collapse_lines(text))


def normalize_song_title(text: str) -> str:
    return fix_question_spacing(strip_footnotes(collapse_lines(text)))


# --- Name splitter -----------------------------------------------------------


@cache
def _featuring_pattern(tokens: tuple[str, ...]) -> re.Pattern[str]:
    # Longest first so "featuring" wins over any shorter prefix token.
    alternatives = [
        re.escape(token) + (r"\b" if token[-1].isalnum() else "")
        for token in sorted(tokens, key=len, reverse=True)
    ]
    return re.compile(r"(?<!\w)(?:" + "|".join(alternatives) + r")", re.IGNORECASE)


def _split_names(segment: str) -> list[str]:
    names: list[str] = []
    for part in _NAME_SEPARATOR_RE.split(segment):
        name = normalize_name(part)
        if name and name not in names:
            names.append(name)
    return names


def _drop_affiliation(name: str) -> str:
    """``"X of the Y"`` -> ``"X"``."""
    return _AFFILIATION_RE.sub("", name).strip()


def split_artist_credit(
    text: str,
    *,
    featuring_tokens: tuple[str, ...] = DEFAULT_FEATURING_TOKENS,
) -> ArtistCredit:
    """Split a compound artist field into main and featuring artist names.

    The first featuring token (case-insensitive) separates the two groups. Each
    group is then split on commas, ``and`` and ``&``. Featuring names lose any
    trailing ``of <group>`` affiliation.
    """

    normalized = _LEADING_CONJUNCTION_RE.sub("", collapse_lines(text)).strip()
    if not normalized:
        return ArtistCredit()

    if featuring_tokens:
        parts = _featuring_pattern(tuple(featuring_tokens)).split(normalized, maxsplit=1)
    else:
        parts = [normalized]
    main_segment = parts[0]
    featuring_segment = parts[1] if len(parts) > 1 else ""

    main = _split_names(main_segment)
    featuring: list[str] = []
    for name in _split_names(featuring_segment):
        trimmed = _drop_affiliation(name)
        if trimmed and trimmed not in featuring:
            featuring.append(trimmed)

    return ArtistCredit(main=tuple(main), featuring=tuple(featuring))


def split_writer_credit(text: str) -> tuple[str, ...]:
    """Split a writer field on line breaks and commas."""

    names: list[str] = []
    for part in _WRITER_SEPARATOR_RE.split(text):
        name = normalize_name(part)
        if name and name not in names:
            names.append(name)
    return tuple(names)


# --- Title classifier --------------------------------------------------------


def classify_album_title(title: str) -> str:
    """Substitute the album type label for placeholder titles.

    Titles that are not placeholders are returned unchanged.
    """

    album_type = PLACEHOLDER_ALBUM_TYPES.get(title.strip().casefold())
    if album_type is None:
        return title
    return album_type.value


def normalize_album_title(raw_title: str) -> str:
    """Join a multi-line album title and resolve placeholder titles.

    Placeholders carry their footnote marker (``none[a]``), so the joined title is
    classified as is first and again once footnotes are stripped.
    """

    segments = [segment.strip() for segment in _LINE_BREAK_RE.split(raw_title)]
    joined = ALBUM_TITLE_SEPARATOR.join(segment for segment in segments if segment)
    if joined.casefold() in PLACEHOLDER_ALBUM_TYPES:
        return classify_album_title(joined)
    return classify_album_title(strip_footnotes(joined))
