"""Pydantic schemas for cached reference data and client configuration."""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from .constants import (
    CACHE_MAX_AGE,
    DEFAULT_API_HOST,
    DEFAULT_COOKIE_NAME,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
    SESSION_TTL,
)


def _require_text(value: str) -> str:
    if not value.strip():
        raise ValueError('must not be blank')
    return value


class PlayerRecord(BaseModel):
    """Player in the MFL player directory."""

    id: str
    name: str
    position: str
    team: str
    status: str | None = Field(default=None, pattern=r'^(active|injured|bye)$')
    height: str | int | None = None
    weight: str | int | None = None
    age: int | None = None
    experience: int | None = None
    jersey: str | int | None = None

    @field_validator('id', 'name', 'position', 'team')
    @classmethod
    def validate_required_text(cls, v):
        """Identity fields must carry something besides whitespace."""
        return _require_text(v)

    class Config:
        extra = 'allow'


class NFLTeam(BaseModel):
    """NFL franchise reference entry."""

    id: str
    name: str
    abbreviation: str
    conference: str = Field(..., pattern=r'^(AFC|NFC)$')
    division: str = Field(..., pattern=r'^(North|South|East|West)$')

    @field_validator('id', 'name', 'abbreviation')
    @classmethod
    def validate_required_text(cls, v):
        return _require_text(v)

    class Config:
        extra = 'allow'


class NFLGame(BaseModel):
    """One game of the NFL schedule."""

    id: str
    week: int = Field(..., ge=1, le=21)
    home_team: str = Field(..., alias='homeTeam')
    away_team: str = Field(..., alias='awayTeam')
    kickoff: int = Field(..., gt=0)
    home_score: int | None = Field(default=None, alias='homeScore')
    away_score: int | None = Field(default=None, alias='awayScore')
    game_status: str = Field(
        default='not_started',
        alias='gameStatus',
        pattern=r'^(not_started|in_progress|final)$',
    )

    @field_validator('id', 'home_team', 'away_team')
    @classmethod
    def validate_required_text(cls, v):
        return _require_text(v)

    class Config:
        extra = 'allow'
        populate_by_name = True


class ScoringRule(BaseModel):
    """League scoring rule as exported by MFL allRules."""

    id: str = Field(..., min_length=1)
    abbreviation: str
    description: str
    points: float
    is_player_rule: bool = Field(..., alias='isPlayerRule')
    is_team_rule: bool = Field(default=False, alias='isTeamRule')
    is_coach_rule: bool = Field(default=False, alias='isCoachRule')

    class Config:
        extra = 'allow'
        populate_by_name = True


class CacheMetadata(BaseModel):
    """Metadata block written by the refresh pipeline."""

    last_updated: float = Field(..., alias='lastUpdated', ge=0)
    version: str = 'unknown'
    source: str = 'unknown'

    class Config:
        extra = 'allow'
        populate_by_name = True


class CacheEnvelope(BaseModel):
    """Complete cache file structure: metadata plus a data array."""

    metadata: CacheMetadata
    data: list[Any]

    class Config:
        extra = 'allow'


class ClientConfig(BaseModel):
    """Client configuration settings."""

    user_agent: str = Field(default=DEFAULT_USER_AGENT, min_length=1)
    api_host: str = Field(default=DEFAULT_API_HOST, min_length=1)
    protocol: str = Field(default='https', pattern=r'^(http|https)$')
    year: int = Field(default=2025, ge=2000, le=2100)
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    session_ttl: int = Field(default=SESSION_TTL, gt=0)
    cookie_name: str = Field(default=DEFAULT_COOKIE_NAME, min_length=1)
    cache_dir: str = 'data'
    cache_max_age: int = Field(default=CACHE_MAX_AGE, ge=0)
    log_level: str = Field(default='INFO', pattern=r'^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$')

    class Config:
        extra = 'forbid'
