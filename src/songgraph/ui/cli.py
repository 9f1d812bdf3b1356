from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import sys
from datetime import date
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from songgraph.adapters.sqlalchemy.unit_of_work import shutdown
from songgraph.app import import_catalog_export, most_popular_songs
from songgraph.config import ConfigurationError, configure_logging, get_import_config

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from songgraph.config import ImportConfig

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="songgraph-import", description="Import a song catalog CSV export"
    )
    parser.add_argument("path", help="Path to the CSV export to import")
    parser.add_argument(
        "--concurrency",
        type=int,
        default=None,
        help="Maximum number of records processed at once (defaults to config)",
    )
    parser.add_argument(
        "--popular-month",
        type=str,
        help="After importing, list the most played songs of this month (YYYY-MM)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser.parse_args(list(argv))


def _parse_month(value: str) -> date:
    try:
        year, month = value.strip().split("-")
        return date(int(year), int(month), 1)
    except ValueError as exc:
        raise ValueError(f"Invalid month (expected YYYY-MM): {value}") from exc


def _build_import_config(args: argparse.Namespace) -> ImportConfig:
    config = get_import_config()
    if args.concurrency is None:
        return config
    if args.concurrency < 1:
        raise ValueError("Concurrency must be at least 1")
    return dataclasses.replace(config, concurrency=args.concurrency)


async def _run(args: argparse.Namespace, config: ImportConfig, popular_month: date | None) -> None:
    try:
        await import_catalog_export(args.path, config=config)
        if popular_month is not None:
            songs = await most_popular_songs(popular_month)
            log.info("Most played songs in %s:", popular_month.strftime("%B %Y"))
            for rank, song in enumerate(songs, start=1):
                log.info("%2d. %s (%s) - %d plays", rank, song.title, song.year, song.plays)
    finally:
        await shutdown()


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        config = _build_import_config(parsed_args)
        popular_month = (
            _parse_month(parsed_args.popular_month) if parsed_args.popular_month else None
        )
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        asyncio.run(_run(parsed_args, config, popular_month))
    except Exception:
        log.exception("Fatal error during import")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def entrypoint() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    entrypoint()
