"""Coloured, emoji-aware status messages for the terminal."""

from __future__ import annotations

import os
import sys

_RESET = "\x1b[0m"
_BOLD = "1"
_RED = "31"
_GREEN = "32"


def use_emoji() -> bool:
    """Return True unless the NO_EMOJI environment variable is set."""
    return "NO_EMOJI" not in os.environ


def _colors_enabled() -> bool:
    force = os.environ.get("CLICOLOR_FORCE")
    if force is not None and force != "0":
        return True
    if os.environ.get("CLICOLOR") == "0":
        return False
    isatty = getattr(sys.stdout, "isatty", None)
    return bool(isatty and isatty())


def _style(text: object, *codes: str) -> str:
    text = str(text)
    if not codes or not _colors_enabled():
        return text
    return f"\x1b[{';'.join(codes)}m{text}{_RESET}"


def bold(text: object) -> str:
    """Return ``text`` rendered bold when the terminal supports colours."""
    return _style(text, _BOLD)


def warn(message: str) -> None:
    """Print a red warning line."""
    symbol = "⚠️ " if use_emoji() else "!"
    print(f"{_style(symbol, _RED)} {_style(message, _RED)}")


def success(message: str) -> None:
    """Print a green success line."""
    symbol = "✅" if use_emoji() else "✓"
    print(f"{_style(symbol, _GREEN)} {_style(message, _GREEN)}")