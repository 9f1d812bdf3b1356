"""Monthly play-count extraction from ``Plays - <Month>`` columns."""

from __future__ import annotations

import calendar
import re
from datetime import date
from logging import getLogger
from typing import TYPE_CHECKING, Final

from songgraph.domain.model import Play

if TYPE_CHECKING:
    from collections.abc import Mapping

log = getLogger(__name__)

_PLAYS_FIELD_RE = re.compile(r"^Plays\s*-\s*(?P<month>.+?)\s*$")

# English names regardless of process locale.
_MONTH_NAMES: Final[tuple[str, ...]] = (
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
)
_MONTHS_BY_NAME: Final[dict[str, int]] = {
    **{name: index for index, name in enumerate(_MONTH_NAMES, start=1)},
    **{name[:3]: index for index, name in enumerate(_MONTH_NAMES, start=1)},
    "sept": 9,
}


def parse_month(name: str) -> int | None:
    """Return the month number for an English month name or abbreviation."""

    return _MONTHS_BY_NAME.get(name.strip().rstrip(".").casefold())


def month_end(month_name: str, year: int) -> date | None:
    """Return the last calendar day of ``month_name`` in ``year``."""

    month = parse_month(month_name)
    if month is None:
        return None
    _, last_day = calendar.monthrange(year, month)
    return date(year, month, last_day)


def plays_column_month(field_name: str) -> str | None:
    """Return the month part of a ``Plays - <Month>`` header, else ``None``."""

    match = _PLAYS_FIELD_RE.match(field_name)
    if match is None:
        return None
    return match.group("month")


def _parse_count(value: str) -> int | None:
    try:
        count = int(value.strip())
    except ValueError:
        return None
    if count < 0:
        return None
    return count


def extract_plays(fields: Mapping[str, str], *, today: date) -> list[Play]:
    """Collect monthly play counts from a record's fields.

    Months are dated in the calendar year of ``today`` rather than the record's
    own year. Unparseable counts and unknown month names are skipped with a
    warning.
    """

    plays: list[Play] = []
    for field_name, value in fields.items():
        month_name = plays_column_month(field_name)
        if month_name is None:
            continue

        count = _parse_count(value)
        if count is None:
            log.warning("Invalid play count for %r: %r", month_name, value)
            continue

        month = month_end(month_name, today.year)
        if month is None:
            log.warning("Invalid month name: %r", month_name)
            continue

        plays.append(Play(month=month, count=count))
    return plays
