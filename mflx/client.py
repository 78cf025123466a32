"""Async client for the MyFantasyLeague HTTP API."""

import asyncio
import logging
from http.cookiejar import CookieJar, DefaultCookiePolicy
from typing import Any, Mapping, Optional
from urllib.parse import urlencode

import httpx

from . import adapters
from .auth import encode_session_token
from .config import get_config
from .errors import MFLError, NetworkError, RateLimited, ServerError
from .models import AuthSession, DashboardData, FranchiseInfo, League, ProjectedRosterPlayer, StandingsTeam
from .request_builder import build_url
from .roster import project, rank_standings
from .schemas import ClientConfig, PlayerRecord
from .utils import unix_now

logger = logging.getLogger('mflx.client')


def _parse_retry_after(value: Optional[str]) -> Optional[int]:
    """Retry-After in seconds; HTTP-date values are not honoured."""
    if value is None:
        return None
    try:
        return max(0, int(value.strip()))
    except ValueError:
        return None


class MFLClient:
    """
    Issues MFL API requests and classifies their failures.

    Each instance holds at most one AuthSession. Nothing is retried here;
    RateLimited and NetworkError are left to the caller.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        session: Optional[AuthSession] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or get_config()
        self._session = session
        self._league_hosts: dict[str, str] = {}
        # Refuse every Set-Cookie so the only cookie ever sent is the session header
        jar = CookieJar(policy=DefaultCookiePolicy(allowed_domains=[]))
        self._http = httpx.AsyncClient(
            transport=transport,
            timeout=self.config.timeout,
            cookies=jar,
            follow_redirects=True,
        )

    async def __aenter__(self) -> 'MFLClient':
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # Session ---------------------------------------------------------------

    def arm_session(self, session: AuthSession) -> None:
        self._session = session

    def clear_session(self) -> None:
        """Forget the session and every league host resolved under it."""
        self._session = None
        self._league_hosts = {}

    @property
    def session(self) -> Optional[AuthSession]:
        """The live session, or None. An expired session is dropped here."""
        if self._session is not None and self._session.is_expired(self.config.session_ttl, unix_now()):
            logger.info(f'Session for {self._session.username} expired')
            self.clear_session()
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self.session is not None

    # Transport -------------------------------------------------------------

    def build_url(
        self,
        command: str,
        args: Optional[Mapping[str, str | int | float]] = None,
        host: Optional[str] = None,
    ) -> str:
        return build_url(command, args, host=host, config=self.config)

    def _headers(self) -> dict[str, str]:
        headers = {
            'User-Agent': self.config.user_agent,
            'Accept': 'application/json',
        }
        session = self.session
        if session is not None and session.token:
            headers['Cookie'] = f'{self.config.cookie_name}={encode_session_token(session.token)}'
        return headers

    async def request(
        self,
        url: str,
        method: str = 'GET',
        body: Optional[str | Mapping[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """
        Send one request and decode the response.

        Args:
            url: Absolute URL, usually from build_url
            method: 'GET' or 'POST'
            body: Form body, either pre-encoded or a mapping to urlencode
            timeout: Seconds before the request is abandoned (default: config.timeout)

        Returns:
            Decoded JSON when the response is application/json, else the text body

        Raises:
            NetworkError: On timeout, connection failure, redirect loops or a
                corrupt Content-Encoding
            RateLimited: On HTTP 429
            ServerError: On any other non-2xx status or an undecodable JSON body
        """
        headers = self._headers()
        content = None
        if body is not None:
            if not isinstance(body, str):
                body = urlencode(body)
            content = body.encode('utf-8')
            headers['Content-Type'] = 'application/x-www-form-urlencoded'
            headers['Content-Length'] = str(len(content))

        try:
            request = self._http.build_request(
                method,
                url,
                headers=headers,
                content=content,
                timeout=timeout if timeout is not None else self.config.timeout,
            )
        except httpx.InvalidURL as e:
            raise NetworkError(f'Network error: {e}') from e
        logger.debug(f'{method} {request.url.host}{request.url.path}')

        # Body decoding happens inside send, so DecodingError and
        # TooManyRedirects surface here as RequestError subclasses
        try:
            response = await self._http.send(request)
        except httpx.TimeoutException as e:
            raise NetworkError('Request timeout') from e
        except httpx.RequestError as e:
            raise NetworkError(f'Network error: {e}') from e

        if response.status_code == 429:
            retry_after = _parse_retry_after(response.headers.get('Retry-After'))
            logger.warning(f'Rate limited by {request.url.host} (retry after {retry_after})')
            raise RateLimited(retry_after=retry_after)
        if not response.is_success:
            raise ServerError(response.status_code, response.reason_phrase)

        try:
            if 'application/json' in response.headers.get('content-type', ''):
                return response.json()
            return response.text
        except ValueError as e:
            raise ServerError(response.status_code, f'Invalid JSON body: {e}') from e
        except httpx.HTTPError as e:
            raise NetworkError(f'Network error: {e}') from e

    async def export(self, export_type: str, host: Optional[str] = None, **args: Any) -> Any:
        """Run the export command for TYPE=export_type with JSON output."""
        query = {'TYPE': export_type}
        query.update({k: v for k, v in args.items() if v is not None})
        query['JSON'] = 1
        return await self.request(self.build_url('export', query, host=host))

    # League hosts ----------------------------------------------------------

    def resolve_host(self, league_id: str) -> str:
        """Host recorded for a league by get_leagues, else the default API host."""
        return self._league_hosts.get(league_id, self.config.api_host)

    # Reference data --------------------------------------------------------

    async def get_players(
        self,
        details: bool = False,
        since: Optional[int] = None,
        players: Optional[list[str]] = None,
    ) -> list[PlayerRecord]:
        """Fetch the MFL player directory, or a subset of it."""
        payload = await self.export(
            'players',
            DETAILS=1 if details else None,
            SINCE=since,
            PLAYERS=','.join(players) if players else None,
        )
        return adapters.players_from_payload(payload)

    async def get_nfl_schedule(self, week: Optional[int | str] = None) -> list[dict]:
        """Fetch NFL games in the cached NFLGame shape; week may be 'ALL'."""
        payload = await self.export('nflSchedule', W=week)
        return adapters.schedule_from_payload(payload)

    async def get_scoring_rules(self) -> list[dict]:
        payload = await self.export('allRules')
        return adapters.scoring_rules_from_payload(payload)

    # League data -----------------------------------------------------------

    async def get_leagues(self, year: Optional[int] = None, franchise_names: bool = False) -> list[League]:
        """
        Fetch the logged-in user's leagues and remember which host serves each.

        League-scoped calls made afterwards without an explicit host use the
        host recorded here.
        """
        payload = await self.export(
            'myleagues',
            YEAR=year,
            FRANCHISE_NAMES=1 if franchise_names else None,
        )
        leagues = adapters.leagues_from_payload(payload, self.config.api_host, self.config.year)
        self._league_hosts = {**self._league_hosts, **{league.id: league.host for league in leagues}}
        return leagues

    async def get_league_info(self, league_id: str, host: Optional[str] = None) -> Optional[dict]:
        payload = await self.export('league', host=host or self.resolve_host(league_id), L=league_id)
        league = payload.get('league') if isinstance(payload, dict) else None
        return league or None

    async def get_franchises(self, league_id: str, host: Optional[str] = None) -> list[FranchiseInfo]:
        payload = await self.export('league', host=host or self.resolve_host(league_id), L=league_id)
        return adapters.franchises_from_payload(payload)

    async def get_standings(self, league_id: str, week: Optional[int] = None, host: Optional[str] = None) -> list[dict]:
        """Raw export TYPE=standings franchise rows."""
        payload = await self.export('standings', host=host or self.resolve_host(league_id), L=league_id, W=week)
        return adapters.standings_rows_from_payload(payload)

    async def get_league_standings(
        self,
        league_id: str,
        host: Optional[str] = None,
        franchises: Optional[list[FranchiseInfo]] = None,
        current_franchise_id: Optional[str] = None,
    ) -> list[StandingsTeam]:
        """Head-to-head standings, ranked by wins then points for."""
        payload = await self.export('leagueStandings', host=host or self.resolve_host(league_id), L=league_id)
        return rank_standings(adapters.standings_from_payload(payload), franchises, current_franchise_id)

    async def get_rosters(
        self,
        league_id: str,
        week: Optional[int] = None,
        host: Optional[str] = None,
        franchise_id: Optional[str] = None,
    ) -> list[dict]:
        """Raw rosters as [{'id': franchise_id, 'players': [RosterEntry, ...]}]."""
        payload = await self.export(
            'rosters',
            host=host or self.resolve_host(league_id),
            L=league_id,
            FRANCHISE=franchise_id,
            W=week,
        )
        return adapters.rosters_from_payload(payload)

    async def get_franchise_roster(
        self,
        league_id: str,
        franchise_id: str,
        directory: list[PlayerRecord],
        host: Optional[str] = None,
    ) -> list[ProjectedRosterPlayer]:
        """One franchise's roster joined against the player directory."""
        rosters = await self.get_rosters(league_id, host=host, franchise_id=franchise_id)
        franchise = next((r for r in rosters if r['id'] == franchise_id), None)
        if franchise is None:
            logger.warning(f'Franchise {franchise_id} not found in league {league_id} rosters')
            return []
        return project(franchise['players'], directory)

    async def get_free_agents(
        self,
        league_id: str,
        position: Optional[str] = None,
        host: Optional[str] = None,
    ) -> list[dict]:
        """Free-agent entries ({'id', ...}); join them against the directory for names."""
        payload = await self.export('freeAgents', host=host or self.resolve_host(league_id), L=league_id, POSITION=position)
        return adapters.free_agents_from_payload(payload)

    async def fetch_dashboard(self, league_id: str, host: Optional[str] = None) -> DashboardData:
        """
        Fetch league info, rosters and standings concurrently.

        A classified failure of one part is recorded in DashboardData.errors
        and leaves the other parts intact.
        """
        host = host or self.resolve_host(league_id)
        parts = {
            'league_info': self.get_league_info(league_id, host=host),
            'rosters': self.get_rosters(league_id, host=host),
            'standings': self.get_league_standings(league_id, host=host),
        }
        results = await asyncio.gather(*parts.values(), return_exceptions=True)

        dashboard = DashboardData()
        for name, result in zip(parts, results):
            if isinstance(result, MFLError):
                logger.warning(f'Dashboard {name} for league {league_id} failed: {result.message}')
                dashboard.errors[name] = result
            elif isinstance(result, BaseException):
                raise result
            else:
                setattr(dashboard, name, result)
        return dashboard
