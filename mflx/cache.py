"""File-backed reference data cache with a process-wide memory tier.

Each collection lives in its own JSON file wrapped in an envelope:

    {"metadata": {"lastUpdated": 1735689600, "version": "1.0.0", "source": "..."},
     "data": [...]}

Reads go memory first, then disk. A structurally broken file is a hard
CacheReadError; individual records that fail their schema are dropped and
counted. The memory tier never expires on its own; call clear() or
clear_memory_cache() after the refresh pipeline rewrites the files.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .config import get_cache_dir, get_config
from .constants import COLLECTION_FILES, REQUIRED_COLLECTIONS
from .errors import CacheReadError, ValidationError
from .schemas import CacheEnvelope, CacheMetadata, NFLGame, NFLTeam, PlayerRecord, ScoringRule
from .utils import load_json, unix_now

logger = logging.getLogger('mflx.cache')

COLLECTION_SCHEMAS: dict[str, type[BaseModel]] = {
    'players': PlayerRecord,
    'nfl-teams': NFLTeam,
    'nfl-schedule': NFLGame,
    'scoring-rules': ScoringRule,
}


@dataclass(frozen=True)
class CachedCollection:
    """Validated contents of one cache file."""
    metadata: CacheMetadata
    items: tuple


# Keyed by resolved file path. Only ever replaced, never mutated in place.
_MEMORY: dict[str, CachedCollection] = {}


def clear_memory_cache() -> None:
    """Drop every memoized collection in this process."""
    global _MEMORY
    _MEMORY = {}


def _remember(key: str, collection: CachedCollection) -> None:
    global _MEMORY
    _MEMORY = {**_MEMORY, key: collection}


def validate_record(collection: str, index: int, item: Any) -> BaseModel:
    """
    Validate one cached record against its collection schema.

    Raises:
        ValidationError: If the record does not satisfy the schema
    """
    schema = COLLECTION_SCHEMAS[collection]
    if not isinstance(item, dict):
        raise ValidationError(collection, index, f'expected an object, got {type(item).__name__}')
    try:
        return schema.model_validate(item)
    except PydanticValidationError as e:
        raise ValidationError(collection, index, str(e)) from e


def validate_records(collection: str, items: list) -> list[BaseModel]:
    """Keep the records that validate, in order; log how many were dropped."""
    valid = []
    invalid = 0
    for index, item in enumerate(items):
        try:
            valid.append(validate_record(collection, index, item))
        except ValidationError as e:
            invalid += 1
            logger.debug(e.message)
    if invalid:
        logger.warning(f'{COLLECTION_FILES[collection]}: {invalid} invalid records filtered out')
    return valid


@dataclass
class IntegrityReport:
    """Outcome of ReferenceCache.validate_integrity."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class CacheFileStats:
    """On-disk facts about one cache file."""
    name: str
    exists: bool
    size: int = 0
    last_modified: Optional[datetime] = None
    record_count: int = 0
    is_stale: bool = True


class ReferenceCache:
    """Read access to the cached player directory and NFL reference data."""

    def __init__(self, data_dir: Optional[Path | str] = None, max_age: Optional[int] = None):
        self.data_dir = Path(data_dir) if data_dir is not None else get_cache_dir()
        self.max_age = get_config().cache_max_age if max_age is None else max_age

    def path_for(self, name: str) -> Path:
        if name not in COLLECTION_FILES:
            raise CacheReadError(name, 'unknown collection')
        return self.data_dir / COLLECTION_FILES[name]

    def _key(self, name: str) -> str:
        return str(self.path_for(name).resolve())

    def _load(self, name: str) -> CachedCollection:
        key = self._key(name)
        cached = _MEMORY.get(key)
        if cached is not None:
            return cached

        path = self.path_for(name)
        try:
            envelope = load_json(path, schema=CacheEnvelope)
        except FileNotFoundError:
            logger.error(f'Cache file not found: {path}')
            raise CacheReadError(name, f'cache file not found: {path.name}') from None
        except json.JSONDecodeError as e:
            raise CacheReadError(name, f'invalid JSON in {path.name}: {e.msg}') from e
        except ValueError as e:
            logger.error(f'Invalid cache structure in {path}')
            raise CacheReadError(name, f'invalid cache structure in {path.name}: metadata object and data array required') from e
        except OSError as e:
            raise CacheReadError(name, f'could not read {path.name}: {e}') from e

        collection = CachedCollection(
            metadata=envelope.metadata,
            items=tuple(validate_records(name, envelope.data)),
        )
        _remember(key, collection)
        logger.debug(f'Loaded {len(collection.items)} {name} records from {path}')
        return collection

    def clear(self) -> None:
        """Drop this cache directory's collections from the memory tier."""
        global _MEMORY
        keys = {self._key(name) for name in COLLECTION_FILES}
        _MEMORY = {k: v for k, v in _MEMORY.items() if k not in keys}

    # Generic reads ---------------------------------------------------------

    def get_collection(self, name: str) -> list:
        """
        All valid records of a collection, in file order.

        Raises:
            CacheReadError: If the file is missing, malformed, or not an envelope
        """
        return list(self._load(name).items)

    def get_by_id(self, name: str, record_id: str) -> Optional[BaseModel]:
        return next((item for item in self._load(name).items if item.id == record_id), None)

    def get_by_filter(self, name: str, predicate: Callable[[Any], bool]) -> list:
        return [item for item in self._load(name).items if predicate(item)]

    def get_metadata(self, name: str) -> CacheMetadata:
        return self._load(name).metadata

    def is_stale(self, name: str, max_age: Optional[int] = None, now: Optional[float] = None) -> bool:
        """
        Whether a collection's lastUpdated is older than max_age seconds.

        A missing file counts as stale. The age is measured from the
        envelope's lastUpdated, never from when it was memoized.

        Raises:
            CacheReadError: If the file exists but is corrupt
        """
        max_age = self.max_age if max_age is None else max_age
        now = unix_now() if now is None else now

        if self._key(name) not in _MEMORY and not self.path_for(name).exists():
            return True
        return now - self._load(name).metadata.last_updated > max_age

    # Typed convenience -----------------------------------------------------

    def get_players(self) -> list[PlayerRecord]:
        return self.get_collection('players')

    def get_player_by_id(self, player_id: str) -> Optional[PlayerRecord]:
        return self.get_by_id('players', player_id)

    def get_players_by_position(self, position: str) -> list[PlayerRecord]:
        return self.get_by_filter('players', lambda p: p.position == position)

    def get_nfl_teams(self) -> list[NFLTeam]:
        return self.get_collection('nfl-teams')

    def get_nfl_team(self, abbreviation: str) -> Optional[NFLTeam]:
        matches = self.get_by_filter('nfl-teams', lambda t: t.abbreviation == abbreviation)
        return matches[0] if matches else None

    def get_nfl_schedule(self) -> list[NFLGame]:
        return self.get_collection('nfl-schedule')

    def get_games_for_week(self, week: int) -> list[NFLGame]:
        return self.get_by_filter('nfl-schedule', lambda g: g.week == week)

    def get_scoring_rules(self) -> list[ScoringRule]:
        return self.get_collection('scoring-rules')

    # Diagnostics -----------------------------------------------------------

    def validate_integrity(self, now: Optional[float] = None) -> IntegrityReport:
        """
        Check the required cache files on disk, bypassing the memory tier.

        Missing files, broken envelopes and invalid player records are
        errors; stale files and invalid records in other collections are
        warnings.
        """
        now = unix_now() if now is None else now
        errors: list[str] = []
        warnings: list[str] = []

        for name in REQUIRED_COLLECTIONS:
            file_name = COLLECTION_FILES[name]
            path = self.path_for(name)

            if not path.exists():
                errors.append(f'Missing required cache file: {file_name}')
                continue

            try:
                envelope = load_json(path, schema=CacheEnvelope)
            except json.JSONDecodeError as e:
                errors.append(f'{file_name}: Invalid JSON - {e.msg}')
                continue
            except ValueError:
                errors.append(f'{file_name}: Missing metadata or data array')
                continue

            age = now - envelope.metadata.last_updated
            if age > self.max_age:
                warnings.append(f'{file_name}: Cache is stale (age: {int(age)} seconds)')

            invalid = 0
            for index, item in enumerate(envelope.data):
                try:
                    validate_record(name, index, item)
                except ValidationError:
                    invalid += 1
            if invalid and name == 'players':
                errors.append(f'{file_name}: {invalid} invalid player records')
            elif invalid:
                warnings.append(f'{file_name}: {invalid} invalid records')

        return IntegrityReport(valid=not errors, errors=errors, warnings=warnings)

    def get_stats(self, now: Optional[float] = None) -> list[CacheFileStats]:
        """Size, modification time, record count and staleness for every cache file."""
        now = unix_now() if now is None else now
        stats = []

        for name, file_name in COLLECTION_FILES.items():
            path = self.path_for(name)
            entry = CacheFileStats(name=file_name, exists=path.exists())
            if entry.exists:
                stat = path.stat()
                entry.size = stat.st_size
                entry.last_modified = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)
                try:
                    envelope = load_json(path, schema=CacheEnvelope)
                    entry.record_count = len(envelope.data)
                    entry.is_stale = now - envelope.metadata.last_updated > self.max_age
                except ValueError as e:
                    logger.warning(f'Error reading stats for {file_name}: {e}')
            stats.append(entry)

        return stats
