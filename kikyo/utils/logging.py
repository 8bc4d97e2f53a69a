"""Root logger setup for the settings client.

Environment overrides (checked in this order):
  - KIKYO_LOG_LEVEL: explicit level, name ("debug") or number ("10")
  - KIKYO_DEBUG / KIKYO_DEBUG_LOGGING: truthy -> DEBUG

``urllib3`` is kept at WARNING unless the effective level is DEBUG; the event
stream reconnects every few seconds while the backend is down and would
otherwise fill the console.
"""
from __future__ import annotations

import logging
import os
from typing import Optional, Union

_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
_DATEFMT = "%H:%M:%S"
_NOISY_LOGGERS = ("urllib3",)

LevelLike = Union[int, str]


def env_truthy(value: Optional[str]) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def parse_level(value: Optional[LevelLike], fallback: int = logging.INFO) -> int:
    """Level number for ``value``; unknown names and blanks give ``fallback``."""
    if isinstance(value, int):
        return value
    text = (value or "").strip()
    if not text:
        return fallback
    if text.isdigit():
        return int(text)
    candidate = logging.getLevelName(text.upper())
    return candidate if isinstance(candidate, int) else fallback


def level_from_env() -> Optional[int]:
    explicit = os.getenv("KIKYO_LOG_LEVEL")
    if explicit and explicit.strip():
        return parse_level(explicit)
    if env_truthy(os.getenv("KIKYO_DEBUG")) or env_truthy(os.getenv("KIKYO_DEBUG_LOGGING")):
        return logging.DEBUG
    return None


def configure_root(default_level: LevelLike = logging.INFO) -> int:
    """Install a compact console handler once and return the effective level."""
    env_level = level_from_env()
    effective = env_level if env_level is not None else parse_level(default_level)

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=effective, format=_FORMAT, datefmt=_DATEFMT)
    root.setLevel(effective)

    library_level = logging.DEBUG if effective <= logging.DEBUG else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)
    return effective


def level_name(level: int) -> str:
    return logging.getLevelName(level)
