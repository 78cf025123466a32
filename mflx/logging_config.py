"""Logging setup for mflx entry points.

Library modules only ever call logging.getLogger('mflx.<module>'); handlers
are attached once, by whichever script or service drives the package.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from .config import get_config

# httpx logs every request line at INFO, query string included
HTTP_LOGGERS = ('httpx', 'httpcore')

FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
CONSOLE_FORMAT = '%(levelname)s: %(name)s: %(message)s'


def resolve_level(level: int | str | None) -> int:
    """
    Turn a level name or number into a logging level.

    None falls back to the configured log_level.

    Raises:
        ValueError: If the name is not a standard logging level
    """
    if level is None:
        level = get_config().log_level
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f'Unknown log level: {level}')
    return resolved


def setup_logging(
    log_dir: Optional[Path] = None,
    level: int | str | None = None,
    log_to_file: bool = False,
    log_to_console: bool = True,
) -> logging.Logger:
    """
    Attach handlers to the 'mflx' logger.

    Console output goes to stderr so command output on stdout stays clean.
    The file handler writes one timestamped file per run. Calling this again
    replaces the handlers rather than stacking them.

    Args:
        log_dir: Directory for log files (default: ./logs)
        level: Level number or name (default: config.log_level)
        log_to_file: Whether to log to file (default: False)
        log_to_console: Whether to log to console (default: True)

    Returns:
        The configured 'mflx' logger

    Example:
        from mflx.logging_config import setup_logging
        logger = setup_logging(level='DEBUG')
        logger.info("Refreshing reference data")
    """
    level = resolve_level(level)
    logger = logging.getLogger('mflx')
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.close()
    logger.handlers = []

    if log_to_file:
        log_dir = Path('logs') if log_dir is None else Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f'mflx_{datetime.now().strftime("%Y%m%d_%H%M%S")}.log'
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        logger.addHandler(file_handler)

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        logger.addHandler(console_handler)

    for name in HTTP_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    return logger


def get_logger(name: str = 'mflx') -> logging.Logger:
    """Get a logger under the mflx namespace."""
    if name != 'mflx' and not name.startswith('mflx.'):
        name = f'mflx.{name}'
    return logging.getLogger(name)
