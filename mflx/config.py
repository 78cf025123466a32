"""Client configuration management."""

import logging
import os
from functools import lru_cache
from pathlib import Path

from .schemas import ClientConfig
from .utils import load_json

logger = logging.getLogger('mflx.config')

CONFIG_ENV_VAR = 'MFLX_CONFIG'
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / 'data' / 'client_config.json'


@lru_cache(maxsize=1)
def get_config() -> ClientConfig:
    """
    Load client configuration.

    Reads the file named by $MFLX_CONFIG, else data/client_config.json.
    When neither exists the built-in defaults are used. Configuration is
    cached after first load.

    Returns:
        ClientConfig object with validated settings

    Raises:
        FileNotFoundError: If $MFLX_CONFIG points at a missing file
        ValueError: If the config file has invalid structure

    Example:
        from mflx.config import get_config
        config = get_config()
        print(f"Upstream host: {config.api_host}")
    """
    explicit = os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        return load_json(explicit, schema=ClientConfig)

    if DEFAULT_CONFIG_PATH.exists():
        return load_json(DEFAULT_CONFIG_PATH, schema=ClientConfig)

    logger.debug('No client config file found, using defaults')
    return ClientConfig()


def get_cache_dir() -> Path:
    """Get the reference-data cache directory from config."""
    return Path(get_config().cache_dir)


def clear_config_cache() -> None:
    """
    Clear the configuration cache.

    Use this if the config file or $MFLX_CONFIG changes during runtime.
    """
    get_config.cache_clear()
