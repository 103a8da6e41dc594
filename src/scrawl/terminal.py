"""Terminal color utilities for diagnostics and error messages.

ANSI colors with TTY detection. Respects ``NO_COLOR`` (https://no-color.org/)
and ``FORCE_COLOR``. Every helper degrades to plain text when colors are off,
so formatted messages stay stable under test runners and log files.
"""

from __future__ import annotations

import os
import re
import sys
from typing import Literal

_CODES = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "yellow": "\033[33m",
    "cyan": "\033[36m",
    "green": "\033[32m",
    "bright_red": "\033[91m",
    "bright_yellow": "\033[93m",
    "bright_blue": "\033[94m",
}

Style = Literal[
    "reset", "bold", "dim", "yellow", "cyan", "green",
    "bright_red", "bright_yellow", "bright_blue",
]

_ANSI_RE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")


def _detect_colors() -> bool:
    if os.environ.get("FORCE_COLOR"):
        return True
    if os.environ.get("NO_COLOR"):
        return False
    return sys.stdout.isatty()


_USE_COLORS = _detect_colors()


def supports_color() -> bool:
    """True if ANSI colors are emitted."""
    return _USE_COLORS


def colorize(text: str, *styles: Style) -> str:
    """Wrap ``text`` in the given styles when colors are enabled."""
    if not _USE_COLORS or not styles:
        return text
    prefix = "".join(_CODES[s] for s in styles)
    return f"{prefix}{text}{_CODES['reset']}"


def strip_colors(text: str) -> str:
    """Remove ANSI escape sequences from ``text``."""
    return _ANSI_RE.sub("", text)


def severity(label: str) -> str:
    """Color a severity label: errors red, warnings yellow, the rest dim."""
    if label == "error":
        return colorize(label, "bright_red", "bold")
    if label == "warning":
        return colorize(label, "bright_yellow", "bold")
    return colorize(label, "dim")


def location(text: str) -> str:
    return colorize(text, "cyan")


def hint(text: str) -> str:
    return colorize(text, "green")


def dim_text(text: str) -> str:
    return colorize(text, "dim")


def caret(text: str) -> str:
    return colorize(text, "bright_red")


def format_source_line(lineno: int, content: str, *, is_error: bool = False) -> str:
    """Format one source line of a snippet, marking the error line with ``>``."""
    marker = ">" if is_error else " "
    number = colorize(f"{marker}{lineno:>3}", "yellow")
    body = colorize(content, "bright_red") if is_error else dim_text(content)
    return f"{number} | {body}"
