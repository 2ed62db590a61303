"""
Logging setup for mqdepth.

Every record goes to stderr so measurements printed on stdout stay
parseable. The level is picked in this order:

- ``--verbose`` (DEBUG)
- ``log_level`` from the configuration file
- WARNING

Debug scopes show DEBUG records for part of mqdepth while the rest stays at
the chosen level. A scope is a short name from LOG_SCOPES or a module path
such as ``core.session``.
"""

from __future__ import annotations

import sys
from collections.abc import Iterable
from typing import Any

from loguru import logger

from .errors import ConfigurationError

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name} - {message}"
DEFAULT_LOG_LEVEL = "WARNING"

LOG_SCOPES: dict[str, str] = {
    # every command sent and reply line read
    "session": "mqdepth.core.session",
    # per-group failures and cycle summaries
    "poller": "mqdepth.core.poller",
    "cli": "mqdepth.cli",
}


def effective_level(configured: str | None, *, verbose: bool = False) -> str:
    """Level to run at, given a configured level and the verbose flag."""
    if verbose:
        return "DEBUG"
    return (configured or DEFAULT_LOG_LEVEL).upper()


def scope_module(scope: str) -> str:
    """Expand a debug scope to the module prefix it covers."""
    scope = scope.strip()
    if scope in LOG_SCOPES:
        return LOG_SCOPES[scope]
    if scope == "mqdepth" or scope.startswith("mqdepth."):
        return scope
    return f"mqdepth.{scope}"


def configure_logging(
    level: str = DEFAULT_LOG_LEVEL,
    *,
    debug_scopes: Iterable[str] = (),
    colorize: bool = False,
) -> int:
    """Replace loguru's handlers with one stderr handler for mqdepth.

    Returns the handler id.

    Raises:
        ConfigurationError: If ``level`` is not a loguru level name.
    """
    level = level.upper()
    try:
        threshold = logger.level(level).no
    except ValueError:
        raise ConfigurationError(f"Unknown log level '{level}'") from None

    modules = tuple(scope_module(scope) for scope in debug_scopes if scope.strip())
    logger.remove()

    if not modules or level == "DEBUG":
        return logger.add(
            sys.stderr, level=level, format=LOG_FORMAT, colorize=colorize
        )

    debug_no = logger.level("DEBUG").no

    def _within_scope(record: dict[str, Any]) -> bool:
        no = record["level"].no
        if no >= threshold:
            return True
        return no >= debug_no and (record["name"] or "").startswith(modules)

    return logger.add(
        sys.stderr,
        level="DEBUG",
        format=LOG_FORMAT,
        colorize=colorize,
        filter=_within_scope,
    )
