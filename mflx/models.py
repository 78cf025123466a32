"""Data models for sessions, leagues and projected rosters."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class AuthSession:
    """Session token held by one client instance."""
    username: str
    token: str  # raw value from the login response, never percent-encoded
    issued_at: int  # unix seconds

    def is_expired(self, ttl: int, now: int) -> bool:
        return now - self.issued_at >= ttl


@dataclass
class AuthResult:
    """Outcome of a login attempt."""
    success: bool
    token: Optional[str] = None
    error: Optional[str] = None


@dataclass
class League:
    """League the user belongs to, with the host that serves it."""
    id: str
    name: str
    year: int
    host: str
    franchise_id: Optional[str] = None
    franchise_name: Optional[str] = None


@dataclass
class FranchiseInfo:
    """Franchise identity from league info."""
    id: str
    name: str
    owner_name: Optional[str] = None
    logo_url: Optional[str] = None


@dataclass
class StandingsTeam:
    """One row of league standings."""
    franchise_id: str
    franchise_name: str
    wins: int = 0
    losses: int = 0
    points_for: float = 0.0
    points_against: float = 0.0
    rank: int = 0
    is_current_user: bool = False


@dataclass
class ProjectedRosterPlayer:
    """Roster entry joined against the player directory."""
    id: str
    name: str
    position: str
    team: str
    roster_status: str  # active | ir | taxi
    status: Optional[str] = None
    height: Any = None
    weight: Any = None
    age: Optional[int] = None
    experience: Optional[int] = None
    jersey: Any = None
    salary: Optional[float] = None
    contract_years: Optional[int] = None
    contract_status: Optional[str] = None


@dataclass
class RosterBuckets:
    """Projected players split by roster status, each sorted for display."""
    active: List[ProjectedRosterPlayer] = field(default_factory=list)
    ir: List[ProjectedRosterPlayer] = field(default_factory=list)
    taxi: List[ProjectedRosterPlayer] = field(default_factory=list)

    def all_players(self) -> List[ProjectedRosterPlayer]:
        """Active, then IR, then taxi."""
        return [*self.active, *self.ir, *self.taxi]


@dataclass
class RosterTotals:
    """Aggregates over the active bucket."""
    salary: float = 0.0
    contract_years: int = 0
    has_salaries: bool = False
    has_contracts: bool = False


@dataclass
class FranchiseRoster:
    """Display-ready roster for one franchise."""
    franchise_id: str
    franchise_name: str
    owner_name: str
    logo_url: Optional[str]
    buckets: RosterBuckets
    totals: RosterTotals

    @property
    def players(self) -> List[ProjectedRosterPlayer]:
        return self.buckets.all_players()


@dataclass
class DashboardData:
    """Results of concurrent dashboard calls; a failed part is None and listed in errors."""
    league_info: Optional[Dict[str, Any]] = None
    rosters: Optional[List[Dict[str, Any]]] = None
    standings: Optional[List[StandingsTeam]] = None
    errors: Dict[str, Exception] = field(default_factory=dict)

    @property
    def complete(self) -> bool:
        return not self.errors
