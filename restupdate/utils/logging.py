"""Root logger setup for the update agent.

The CLI calls :func:`configure_root` once with its ``--log_level`` value.
``RESTUPDATE_LOG_LEVEL`` overrides that value, and a truthy
``RESTUPDATE_DEBUG`` forces DEBUG when no explicit level is set. Third-party
loggers that report every connection are held at WARNING unless DEBUG is on.
"""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional, Union

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%H:%M:%S"
LEVEL_ENV = "RESTUPDATE_LOG_LEVEL"
DEBUG_ENV = "RESTUPDATE_DEBUG"

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_CHATTY_LOGGERS = ("urllib3",)


def parse_level(value: Union[int, str, None], fallback: int = logging.INFO) -> int:
    """Turn ``"debug"``, ``"10"`` or ``10`` into a numeric level."""
    if isinstance(value, int):
        return value
    text = str(value or "").strip()
    if not text:
        return fallback
    if text.isdigit():
        return int(text)
    level = logging.getLevelName(text.upper())
    return level if isinstance(level, int) else fallback


def level_from_env(environ: Mapping[str, str]) -> Optional[int]:
    """Return the level forced by the environment, if any."""
    explicit = environ.get(LEVEL_ENV, "")
    if explicit.strip():
        return parse_level(explicit)
    if environ.get(DEBUG_ENV, "").strip().lower() in _TRUTHY:
        return logging.DEBUG
    return None


def configure_root(
    default_level: Union[int, str] = logging.INFO,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> int:
    """Configure the root logger and return the effective level."""
    env = os.environ if environ is None else environ
    forced = level_from_env(env)
    effective = forced if forced is not None else parse_level(default_level)

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=effective, format=LOG_FORMAT, datefmt=LOG_DATEFMT)
    root.setLevel(effective)

    chatty_level = logging.NOTSET if effective <= logging.DEBUG else logging.WARNING
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(chatty_level)
    return effective


__all__ = ["configure_root", "level_from_env", "parse_level"]
