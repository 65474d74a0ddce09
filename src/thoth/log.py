"""Alert-style terminal output for Thoth.

Every wrapper reports through this module: ``success`` after a command
worked, ``warning`` when a wrapped tool failed and the caller moves on,
``info`` for tool output and hints. Warnings and errors go to stderr.

The threshold comes from ``--log-level`` or ``THOTH_LOG_LEVEL`` (read once).
Color is off when ``--no-color``, ``NO_COLOR``, or ``THOTH_NO_COLOR`` is set.
"""

from __future__ import annotations

import os
import sys
from enum import IntEnum
from typing import NamedTuple

from rich.console import Console
from rich.text import Text

LEVEL_ENV_VAR = "THOTH_LOG_LEVEL"
NO_COLOR_ENV_VARS = ("NO_COLOR", "THOTH_NO_COLOR")


class LogLevel(IntEnum):
    TRACE = 10
    DEBUG = 20
    INFO = 30
    SUCCESS = 35
    WARNING = 40
    ERROR = 50


class _Alert(NamedTuple):
    prefix: str
    style: str
    stderr: bool


_ALERTS: dict[LogLevel, _Alert] = {
    LogLevel.TRACE: _Alert("", "dim", False),
    LogLevel.DEBUG: _Alert("", "cyan", False),
    LogLevel.INFO: _Alert("ℹ ", "blue", False),
    LogLevel.SUCCESS: _Alert("✔ ", "green", False),
    LogLevel.WARNING: _Alert("! ", "yellow", True),
    LogLevel.ERROR: _Alert("✖ ", "bold red", True),
}

LOG_LEVEL_NAMES = tuple(level.name.lower() for level in LogLevel)

_ALIASES = {"warn": LogLevel.WARNING}
_DEFAULT_LEVEL = LogLevel.INFO

_configured_level: LogLevel | None = None
_no_color_override: bool | None = None


def parse_level(value: str | None) -> LogLevel:
    """Map a level name to ``LogLevel``; unknown or empty names mean INFO."""
    name = (value or "").strip().lower()
    if name in _ALIASES:
        return _ALIASES[name]
    if name in LOG_LEVEL_NAMES:
        return LogLevel[name.upper()]
    return _DEFAULT_LEVEL


def configured_level() -> LogLevel:
    global _configured_level
    if _configured_level is None:
        _configured_level = parse_level(os.environ.get(LEVEL_ENV_VAR))
    return _configured_level


def set_level(value: str | None) -> None:
    global _configured_level
    _configured_level = parse_level(value)


def set_no_color(value: bool) -> None:
    """Force color off, or hand the decision back to the environment."""
    global _no_color_override
    _no_color_override = True if value else None


def _no_color() -> bool:
    if _no_color_override is not None:
        return _no_color_override
    return any(os.environ.get(name) for name in NO_COLOR_ENV_VARS)


def emit(level: LogLevel, message: str, *, style: str | None = None) -> None:
    if level < configured_level():
        return
    alert = _ALERTS[level]
    console = Console(
        file=sys.stderr if alert.stderr else sys.stdout,
        soft_wrap=True,
        highlight=False,
        no_color=_no_color(),
    )
    text = Text(alert.prefix, style=style or alert.style)
    text.append(message)
    console.print(text)


def trace(message: str, *, style: str | None = None) -> None:
    emit(LogLevel.TRACE, message, style=style)


def debug(message: str, *, style: str | None = None) -> None:
    emit(LogLevel.DEBUG, message, style=style)


def info(message: str, *, style: str | None = None) -> None:
    emit(LogLevel.INFO, message, style=style)


def success(message: str, *, style: str | None = None) -> None:
    emit(LogLevel.SUCCESS, message, style=style)


def warning(message: str, *, style: str | None = None) -> None:
    emit(LogLevel.WARNING, message, style=style)


def error(message: str, *, style: str | None = None) -> None:
    emit(LogLevel.ERROR, message, style=style)
