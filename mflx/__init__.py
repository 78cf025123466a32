from .errors import (
    MFLError,
    AuthenticationFailed,
    RateLimited,
    ServerError,
    NetworkError,
    CacheReadError,
    ValidationError,
)
from .models import (
    AuthSession,
    AuthResult,
    League,
    FranchiseInfo,
    StandingsTeam,
    ProjectedRosterPlayer,
    RosterBuckets,
    RosterTotals,
    FranchiseRoster,
    DashboardData,
)
from .schemas import PlayerRecord, NFLTeam, NFLGame, ScoringRule, ClientConfig
from .config import get_config, clear_config_cache
from .request_builder import build_url
from .client import MFLClient
from .auth import Authenticator, parse_login_response, encode_session_token, decode_session_token
from .cache import ReferenceCache, clear_memory_cache
from .roster import project, group_and_sort, compute_totals, build_franchise_rosters, rank_standings
from .logging_config import setup_logging

__all__ = [
    # Errors
    'MFLError',
    'AuthenticationFailed',
    'RateLimited',
    'ServerError',
    'NetworkError',
    'CacheReadError',
    'ValidationError',
    # Models
    'AuthSession',
    'AuthResult',
    'League',
    'FranchiseInfo',
    'StandingsTeam',
    'ProjectedRosterPlayer',
    'RosterBuckets',
    'RosterTotals',
    'FranchiseRoster',
    'DashboardData',
    # Schemas
    'PlayerRecord',
    'NFLTeam',
    'NFLGame',
    'ScoringRule',
    'ClientConfig',
    # Configuration
    'get_config',
    'clear_config_cache',
    # Upstream
    'build_url',
    'MFLClient',
    'Authenticator',
    'parse_login_response',
    'encode_session_token',
    'decode_session_token',
    # Reference cache
    'ReferenceCache',
    'clear_memory_cache',
    # Rosters
    'project',
    'group_and_sort',
    'compute_totals',
    'build_franchise_rosters',
    'rank_standings',
    # Logging
    'setup_logging',
]
