"""Cross-reference raw rosters against the player directory for display.

MFL roster entries carry only a player id plus loosely-typed status,
salary and contract fields. Names, positions and NFL teams come from the
cached player directory.
"""

from dataclasses import replace
from typing import Any, Iterable, Mapping, Optional, Sequence

from .constants import IR_STATUSES, POSITION_ORDER, TAXI_STATUS, UNKNOWN_PLAYER
from .models import (
    FranchiseInfo,
    FranchiseRoster,
    ProjectedRosterPlayer,
    RosterBuckets,
    RosterTotals,
    StandingsTeam,
)
from .schemas import PlayerRecord
from .utils import parse_float, parse_int

DirectoryEntry = PlayerRecord | Mapping[str, Any]

_DIRECTORY_FIELDS = ('status', 'height', 'weight', 'age', 'experience', 'jersey')


def _get(record: DirectoryEntry, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def classify_roster_status(status: Optional[str]) -> str:
    """Map a raw MFL roster status token to active, ir or taxi."""
    if status == TAXI_STATUS:
        return 'taxi'
    if status in IR_STATUSES:
        return 'ir'
    return 'active'


def _text_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def index_directory(player_directory: Iterable[DirectoryEntry]) -> dict[str, DirectoryEntry]:
    """Map player id to directory record; the first record for an id wins."""
    index: dict[str, DirectoryEntry] = {}
    for record in player_directory:
        index.setdefault(str(_get(record, 'id')), record)
    return index


def project_entry(entry: Mapping[str, Any], index: Mapping[str, DirectoryEntry]) -> ProjectedRosterPlayer:
    """Join one raw roster entry against an indexed directory."""
    player_id = str(entry.get('id', ''))
    record = index.get(player_id)

    if record is None:
        identity = dict(UNKNOWN_PLAYER)
        extras = {}
    else:
        identity = {key: _get(record, key) or fallback for key, fallback in UNKNOWN_PLAYER.items()}
        extras = {key: _get(record, key) for key in _DIRECTORY_FIELDS}

    return ProjectedRosterPlayer(
        id=player_id,
        roster_status=classify_roster_status(entry.get('status')),
        salary=parse_float(entry.get('salary')),
        contract_years=parse_int(entry.get('contractYear')),
        contract_status=_text_or_none(entry.get('contractStatus')),
        **identity,
        **extras,
    )


def project(
    raw_roster: Iterable[Mapping[str, Any]],
    player_directory: Iterable[DirectoryEntry],
) -> list[ProjectedRosterPlayer]:
    """
    Project raw roster entries into display records.

    Every entry produces exactly one ProjectedRosterPlayer, in input order.
    Ids missing from the directory get the Unknown Player / UNK / FA
    stand-in rather than being dropped.

    Args:
        raw_roster: Raw MFL roster entries ({'id', 'status'?, 'salary'?, ...})
        player_directory: PlayerRecords (or dicts with the same keys)

    Returns:
        List of ProjectedRosterPlayer, same length as raw_roster
    """
    index = index_directory(player_directory)
    return [project_entry(entry, index) for entry in raw_roster]


def position_sort_key(player: ProjectedRosterPlayer) -> tuple[int, str, str]:
    """Fixed position order, unknown positions last, then name ignoring case."""
    try:
        position_rank = POSITION_ORDER.index(player.position)
    except ValueError:
        position_rank = len(POSITION_ORDER)
    return position_rank, player.name.casefold(), player.name


def group_and_sort(players: Iterable[ProjectedRosterPlayer]) -> RosterBuckets:
    """Split projected players into active, IR and taxi buckets, each sorted."""
    buckets: dict[str, list[ProjectedRosterPlayer]] = {'active': [], 'ir': [], 'taxi': []}
    for player in players:
        buckets[player.roster_status].append(player)

    return RosterBuckets(**{name: sorted(group, key=position_sort_key) for name, group in buckets.items()})


def compute_totals(active_players: Iterable[ProjectedRosterPlayer]) -> RosterTotals:
    """
    Sum salary and contract years over the active bucket.

    has_salaries and has_contracts are derived from the data alone and
    decide whether salary and contract columns are shown. Players not in
    the active bucket are ignored even if passed in.
    """
    active = [p for p in active_players if p.roster_status == 'active']

    return RosterTotals(
        salary=sum(p.salary or 0.0 for p in active),
        contract_years=sum(p.contract_years or 0 for p in active),
        has_salaries=any(p.salary is not None for p in active),
        has_contracts=any(p.contract_years is not None or p.contract_status for p in active),
    )


def build_franchise_rosters(
    rosters: Iterable[Mapping[str, Any]],
    franchises: Sequence[FranchiseInfo],
    player_directory: Iterable[DirectoryEntry],
) -> list[FranchiseRoster]:
    """
    Build every franchise's display roster for a league.

    Args:
        rosters: Output of MFLClient.get_rosters
        franchises: Output of MFLClient.get_franchises, for names and owners
        player_directory: Cached player directory

    Returns:
        FranchiseRoster list ordered by franchise name
    """
    index = index_directory(player_directory)
    by_id = {f.id: f for f in franchises}

    result = []
    for roster in rosters:
        franchise_id = str(roster.get('id', ''))
        info = by_id.get(franchise_id)
        buckets = group_and_sort(project_entry(entry, index) for entry in roster.get('players', []))
        result.append(FranchiseRoster(
            franchise_id=franchise_id,
            franchise_name=info.name if info else f'Team {franchise_id}',
            owner_name=(info.owner_name if info else None) or 'Unknown Owner',
            logo_url=info.logo_url if info else None,
            buckets=buckets,
            totals=compute_totals(buckets.active),
        ))

    result.sort(key=lambda r: (r.franchise_name.casefold(), r.franchise_name))
    return result


def rank_standings(
    teams: Iterable[StandingsTeam],
    franchises: Optional[Sequence[FranchiseInfo]] = None,
    current_franchise_id: Optional[str] = None,
) -> list[StandingsTeam]:
    """Order standings by wins then points for, assigning 1-based ranks."""
    names = {f.id: f.name for f in franchises or []}
    ordered = sorted(teams, key=lambda t: (-t.wins, -t.points_for))
    return [
        replace(
            team,
            rank=position,
            franchise_name=names.get(team.franchise_id, team.franchise_name),
            is_current_user=team.franchise_id == current_franchise_id,
        )
        for position, team in enumerate(ordered, start=1)
    ]
