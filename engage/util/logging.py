"""Stdlib logging setup.

Structured events go through logfire; this only decides what the plain
console handler lets through.
"""

import logging
import sys

from engage.config import Settings

_ENVIRONMENT_LEVELS = {
    "production": logging.WARNING,
    "staging": logging.INFO,
    "development": logging.INFO,
    "test": logging.WARNING,
}

# Libraries that log every request at INFO
_NOISY_LOGGERS = ("httpx", "httpcore")


def setup_logging(settings: Settings) -> None:
    """Configure the root logger for the current environment.

    Args:
        settings: Application settings
    """
    level = logging.DEBUG if settings.debug else _ENVIRONMENT_LEVELS[settings.environment]

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging configured for %s at %s",
        settings.environment,
        logging.getLevelName(level),
    )
