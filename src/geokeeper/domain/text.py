"""Small text helpers shared by description and comment handling."""

from __future__ import annotations

import re
from html import escape
from typing import Final

_LINE_BREAK: Final[re.Pattern[str]] = re.compile(r"(\r\n|\n\r|\n|\r)")
_CONTROL_WHITESPACE: Final[re.Pattern[str]] = re.compile(r"[\r\n\t]+")
_CARRIAGE_RETURN: Final[re.Pattern[str]] = re.compile(r"\r\n?")


def nl2br(text: str) -> str:
    """Insert ``<br />`` before every line break, keeping the break itself."""
    return _LINE_BREAK.sub(r"<br />\1", text)


def single_line(text: str) -> str:
    return _CONTROL_WHITESPACE.sub(" ", text).strip()


def normalize_newlines(text: str) -> str:
    return _CARRIAGE_RETURN.sub("\n", text)


def escape_html(text: str) -> str:
    """Escape markup characters; single quotes are left alone."""
    return escape(text, quote=False).replace('"', "&quot;")
