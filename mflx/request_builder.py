"""URL construction for MFL API commands."""

from typing import Mapping, Optional
from urllib.parse import urlencode

from .config import get_config
from .schemas import ClientConfig


def build_url(
    command: str,
    args: Optional[Mapping[str, str | int | float]] = None,
    host: Optional[str] = None,
    config: Optional[ClientConfig] = None,
) -> str:
    """
    Build an MFL API URL of the form protocol://host/year/command?args.

    Args are serialized in the caller's order with their values stringified.
    No query string is appended when args is empty.

    Args:
        command: MFL command name (e.g., 'export', 'login')
        args: Query parameters (e.g., {'TYPE': 'rosters', 'L': '12345'})
        host: Host override for multi-host leagues (default: config.api_host)
        config: Client configuration (default: loaded config)

    Returns:
        Absolute URL string

    Example:
        build_url('export', {'TYPE': 'players', 'JSON': 1})
        # 'https://api.myfantasyleague.com/2025/export?TYPE=players&JSON=1'
    """
    if config is None:
        config = get_config()

    base_url = f'{config.protocol}://{host or config.api_host}/{config.year}/{command}'

    query = urlencode([(key, str(value)) for key, value in (args or {}).items()])
    return f'{base_url}?{query}' if query else base_url
