"""Plain console output, fatal exits, and yes/no prompts."""

from __future__ import annotations

import sys
from typing import NoReturn

import questionary

_YES = frozenset({"y", "yes"})
_NO = frozenset({"n", "no"})


def _use_questionary() -> bool:
    return sys.stdin.isatty() and sys.stdout.isatty()


def say(message: str) -> None:
    """Print command output to stdout.

    Example:
        >>> say("Hello")
        Hello
    """
    print(message)


def die(message: str, code: int = 1, *, hint: str | None = None) -> NoReturn:
    """Report a fatal error on stderr and exit with ``code``.

    The recovery hint, when given, is printed on its own ``hint:`` line.
    """
    print(f"error: {message}", file=sys.stderr)
    if hint:
        print(f"hint: {hint}", file=sys.stderr)
    sys.exit(code)


def confirm(text: str, default: bool = False) -> bool:
    """Ask a yes/no question; an empty answer or an interrupt picks ``default``."""
    if _use_questionary():
        answer = questionary.confirm(text, default=default).ask()
        return default if answer is None else bool(answer)
    suffix = "[Y/n]" if default else "[y/N]"
    while True:
        response = input(f"{text} {suffix}: ").strip().lower()
        if not response:
            return default
        if response in _YES:
            return True
        if response in _NO:
            return False
