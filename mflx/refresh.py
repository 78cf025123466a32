"""Write reference data fetched from MFL into the cache files.

This is the producer side of ReferenceCache. The cache itself never calls
into here; run it from a scheduled job or by hand.

Usage:
    mflx-refresh
    mflx-refresh --data-dir data --log-dir logs --log-level DEBUG
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Iterable, Optional

from pydantic import BaseModel

from .cache import IntegrityReport, ReferenceCache
from .client import MFLClient
from .config import get_cache_dir
from .constants import CACHE_VERSION, COLLECTION_FILES, NFL_TEAMS
from .errors import MFLError
from .logging_config import setup_logging
from .utils import save_json, unix_now

logger = logging.getLogger('mflx.refresh')


def build_envelope(
    items: Iterable[Any],
    source: str,
    version: str = CACHE_VERSION,
    now: Optional[int] = None,
) -> dict:
    """Wrap records in the cache envelope stamped with lastUpdated."""
    data = [
        item.model_dump(by_alias=True, exclude_none=True) if isinstance(item, BaseModel) else item
        for item in items
    ]
    return {
        'metadata': {
            'lastUpdated': unix_now() if now is None else now,
            'version': version,
            'source': source,
        },
        'data': data,
    }


def write_collection(
    data_dir: Path | str,
    name: str,
    items: Iterable[Any],
    source: str,
    now: Optional[int] = None,
) -> Path:
    """Overwrite one collection file; returns its path."""
    path = Path(data_dir) / COLLECTION_FILES[name]
    envelope = build_envelope(items, source, now=now)
    save_json(path, envelope)
    logger.info(f'Cached {len(envelope["data"])} {name} records in {path}')
    return path


def static_nfl_teams() -> list[dict]:
    return [
        {
            'id': abbrev,
            'name': name,
            'abbreviation': abbrev,
            'conference': conference,
            'division': division,
        }
        for abbrev, (name, conference, division) in NFL_TEAMS.items()
    ]


async def refresh_players(client: MFLClient, data_dir: Path | str) -> int:
    """
    Refresh players.json from the MFL player directory.

    An empty upstream answer leaves the existing file untouched.

    Returns:
        Number of players written (0 if the file was kept)
    """
    players = await client.get_players(details=True)
    if not players:
        logger.warning('No players returned by MFL, keeping existing cache')
        return 0
    write_collection(data_dir, 'players', players, 'MFL API - players endpoint')
    return len(players)


async def refresh_nfl_data(client: MFLClient, data_dir: Path | str) -> tuple[int, int]:
    """
    Refresh nfl-schedule.json from MFL and nfl-teams.json from the static table.

    Returns:
        (games written, teams written)
    """
    games = await client.get_nfl_schedule(week='ALL')
    teams = static_nfl_teams()
    write_collection(data_dir, 'nfl-schedule', games, 'MFL API - nflSchedule endpoint')
    write_collection(data_dir, 'nfl-teams', teams, 'Static NFL team data')
    return len(games), len(teams)


async def refresh_all(client: MFLClient, data_dir: Path | str) -> IntegrityReport:
    """Refresh players and NFL data, drop stale memoized copies, then validate."""
    await refresh_players(client, data_dir)
    await refresh_nfl_data(client, data_dir)

    cache = ReferenceCache(data_dir)
    cache.clear()
    report = cache.validate_integrity()
    for error in report.errors:
        logger.error(error)
    for warning in report.warnings:
        logger.warning(warning)
    return report


async def _refresh(data_dir: Path) -> IntegrityReport:
    async with MFLClient() as client:
        return await refresh_all(client, data_dir)


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Refresh the MFL reference data cache")
    parser.add_argument(
        "--data-dir", "-d",
        default=None,
        help="Cache directory to write (default: config cache_dir)",
    )
    parser.add_argument(
        "--log-dir",
        default=None,
        help="Also write a log file to this directory",
    )
    parser.add_argument(
        "--log-level", "-l",
        default=None,
        help="Logging level name (default: config log_level)",
    )

    args = parser.parse_args(argv)

    try:
        setup_logging(
            log_dir=Path(args.log_dir) if args.log_dir else None,
            level=args.log_level,
            log_to_file=args.log_dir is not None,
        )
    except ValueError as e:
        parser.error(str(e))
    data_dir = Path(args.data_dir) if args.data_dir else get_cache_dir()

    try:
        report = asyncio.run(_refresh(data_dir))
    except MFLError as e:
        logger.error(f'Refresh failed: {e.message}')
        return 1

    if not report.valid:
        logger.error(f'Cache in {data_dir} failed integrity checks')
        return 1
    logger.info(f'Cache in {data_dir} refreshed')
    return 0


if __name__ == "__main__":
    sys.exit(main())
