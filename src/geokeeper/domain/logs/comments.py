"""Comment encoding.

Comments are stored as HTML; ``text_html`` keeps the format the author used
so the original can be reconstructed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from geokeeper.domain.errors import InvalidParameter
from geokeeper.domain.model import CommentFormat
from geokeeper.domain.text import escape_html, nl2br

if TYPE_CHECKING:
    from geokeeper.domain.policy import BranchPolicy
    from geokeeper.domain.ports.services import HtmlSanitizer


def parse_comment_format(raw: Any) -> CommentFormat:
    if raw is None:
        return CommentFormat.AUTO
    try:
        return CommentFormat(str(raw))
    except ValueError as exc:
        raise InvalidParameter("comment_format", f"'{raw}' is not a valid comment format.") from exc


class CommentEncoder:
    def __init__(self, *, policy: BranchPolicy, sanitizer: HtmlSanitizer) -> None:
        self._policy = policy
        self._sanitizer = sanitizer

    def encode(self, comment: str, comment_format: CommentFormat) -> tuple[str, int]:
        """Return (stored HTML, ``text_html`` flag)."""
        if comment_format is CommentFormat.PLAINTEXT:
            text = nl2br(escape_html(comment))
            # twice, so runs of three or more spaces are covered
            text = text.replace("  ", "&nbsp; ").replace("  ", "&nbsp; ")
            return text, self._policy.plaintext_comment_flag
        if comment_format is CommentFormat.AUTO:
            comment = nl2br(comment)
        return self._sanitizer.purify(comment)
