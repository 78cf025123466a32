"""Normalize decoded MFL export payloads into typed records.

MFL's JSON export mirrors its XML: a repeated element becomes an array,
a single occurrence becomes a bare object, and numbers arrive as strings.
Everything here runs right after decoding so the rest of the package only
ever sees lists and parsed values.
"""

import logging
import re
from typing import Any, Optional

from pydantic import ValidationError

from .models import FranchiseInfo, League, StandingsTeam
from .schemas import PlayerRecord
from .utils import as_list, parse_float, parse_int

logger = logging.getLogger('mflx.adapters')

HOST_PATTERN = re.compile(r'https?://([^/]+)')


def _section(payload: Any, *keys: str) -> Any:
    """Walk nested dict keys, returning None as soon as one is missing."""
    node = payload
    for key in keys:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def transform_player(raw: dict) -> dict:
    """Convert an MFL player element into the cached PlayerRecord shape."""
    record = {
        'id': raw.get('id'),
        'name': raw.get('name'),
        'position': raw.get('position'),
        'team': raw.get('team') or 'FA',
        'status': 'active',
        'height': raw.get('height'),
        'weight': raw.get('weight'),
        'age': parse_int(raw.get('age')),
        'experience': parse_int(raw.get('experience')),
        'jersey': raw.get('jersey'),
    }
    return {k: v for k, v in record.items() if v is not None}


def players_from_payload(payload: Any, path: tuple[str, ...] = ('players', 'player')) -> list[PlayerRecord]:
    """
    Extract player records from an export payload.

    Entries that do not satisfy PlayerRecord are skipped and counted.

    Args:
        payload: Decoded JSON from export TYPE=players or TYPE=freeAgents
        path: Keys leading to the repeated player element
    """
    players = []
    skipped = 0
    for raw in as_list(_section(payload, *path)):
        if not isinstance(raw, dict):
            skipped += 1
            continue
        try:
            players.append(PlayerRecord.model_validate(transform_player(raw)))
        except ValidationError:
            skipped += 1
    if skipped:
        logger.warning(f'Skipped {skipped} malformed player entries from upstream')
    return players


def transform_league(raw: dict, default_host: str, default_year: int) -> League:
    """
    Convert an MFL myleagues entry into a League.

    The serving host is taken from the league URL; leagues without one
    are assumed to live on the default API host.
    """
    host = default_host
    match = HOST_PATTERN.match(raw.get('url') or '')
    if match:
        host = match.group(1)

    return League(
        id=str(raw.get('league_id', '')),
        name=raw.get('name', ''),
        year=parse_int(raw.get('year')) or default_year,
        host=host,
        franchise_id=raw.get('franchise_id'),
        franchise_name=raw.get('franchise_name'),
    )


def leagues_from_payload(payload: Any, default_host: str, default_year: int) -> list[League]:
    return [
        transform_league(raw, default_host, default_year)
        for raw in as_list(_section(payload, 'leagues', 'league'))
        if isinstance(raw, dict)
    ]


def franchises_from_payload(payload: Any) -> list[FranchiseInfo]:
    """Franchise names and owners from an export TYPE=league payload."""
    return [
        FranchiseInfo(
            id=raw['id'],
            name=raw.get('name') or f"Team {raw['id']}",
            owner_name=raw.get('owner_name'),
            logo_url=raw.get('logo') or raw.get('icon'),
        )
        for raw in as_list(_section(payload, 'league', 'franchises', 'franchise'))
        if isinstance(raw, dict) and raw.get('id')
    ]


def rosters_from_payload(payload: Any) -> list[dict]:
    """
    Normalize an export TYPE=rosters payload.

    Returns:
        List of {'id': franchise_id, 'players': [raw roster entries]}
    """
    rosters = []
    for franchise in as_list(_section(payload, 'rosters', 'franchise')):
        if not isinstance(franchise, dict):
            continue
        entries = [p for p in as_list(franchise.get('player')) if isinstance(p, dict) and p.get('id')]
        rosters.append({'id': franchise.get('id'), 'players': entries})
    return rosters


def standings_from_payload(payload: Any) -> list[StandingsTeam]:
    """Unranked standings rows from an export TYPE=leagueStandings payload."""
    teams = []
    for raw in as_list(_section(payload, 'leagueStandings', 'franchise')):
        if not isinstance(raw, dict) or not raw.get('id'):
            continue
        teams.append(StandingsTeam(
            franchise_id=raw['id'],
            franchise_name=f"Team {raw['id']}",
            wins=parse_int(raw.get('h2hw')) or 0,
            losses=parse_int(raw.get('h2hl')) or 0,
            points_for=parse_float(raw.get('pf')) or 0.0,
            points_against=parse_float(raw.get('pa')) or 0.0,
        ))
    return teams


def _game_status(seconds_remaining: Optional[str]) -> str:
    if seconds_remaining is None or seconds_remaining == '':
        return 'not_started'
    if str(seconds_remaining) == '0':
        return 'final'
    return 'in_progress'


def transform_matchup(raw: dict, week: Any = None) -> Optional[dict]:
    """
    Convert an MFL nflSchedule matchup into the cached NFLGame shape.

    The week normally lives on the enclosing nflSchedule element; a week
    on the matchup itself wins.

    Returns None for matchups that do not list two teams.
    """
    teams = [t for t in as_list(raw.get('team')) if isinstance(t, dict)]
    if len(teams) < 2:
        return None

    home = next((t for t in teams if t.get('isHome') == '1'), teams[0])
    away = next((t for t in teams if t is not home), teams[1])
    week = parse_int(raw.get('week', week))

    game = {
        'id': f"{week}_{teams[0].get('id')}_{teams[1].get('id')}",
        'week': week,
        'homeTeam': home.get('id'),
        'awayTeam': away.get('id'),
        'kickoff': parse_int(raw.get('kickoff')) or 0,
        'homeScore': parse_int(home.get('score')),
        'awayScore': parse_int(away.get('score')),
        'gameStatus': _game_status(raw.get('gameSecondsRemaining')),
    }
    return {k: v for k, v in game.items() if v is not None}


def schedule_from_payload(payload: Any) -> list[dict]:
    """Games from export TYPE=nflSchedule, for one week or W=ALL."""
    week_blocks = as_list(_section(payload, 'fullNflSchedule', 'nflSchedule'))
    if not week_blocks:
        week_blocks = as_list(_section(payload, 'nflSchedule'))

    games = []
    for block in week_blocks:
        if not isinstance(block, dict):
            continue
        for raw in as_list(block.get('matchup')):
            if isinstance(raw, dict):
                game = transform_matchup(raw, block.get('week'))
                if game is not None:
                    games.append(game)
    return games


def scoring_rules_from_payload(payload: Any) -> list[dict]:
    return [r for r in as_list(_section(payload, 'allRules', 'rule')) if isinstance(r, dict)]


def standings_rows_from_payload(payload: Any) -> list[dict]:
    """Raw franchise rows from export TYPE=standings."""
    return [r for r in as_list(_section(payload, 'standings', 'franchise')) if isinstance(r, dict)]


def free_agents_from_payload(payload: Any) -> list[dict]:
    """
    Free-agent entries from export TYPE=freeAgents.

    Entries carry only an id and loosely-typed extras, like roster entries.
    """
    entries = []
    for unit in as_list(_section(payload, 'freeAgents', 'leagueUnit')):
        if isinstance(unit, dict):
            entries.extend(p for p in as_list(unit.get('player')) if isinstance(p, dict) and p.get('id'))
    return entries
