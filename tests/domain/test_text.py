from __future__ import annotations

from geokeeper.domain.text import escape_html, nl2br, normalize_newlines, single_line


def test_nl2br_keeps_line_breaks() -> None:
    assert nl2br("a\nb\r\nc") == "a<br />\nb<br />\r\nc"


def test_single_line_collapses_control_whitespace() -> None:
    assert single_line("  one\r\n\ttwo\nthree ") == "one two three"


def test_normalize_newlines() -> None:
    assert normalize_newlines("a\r\nb\rc") == "a\nb\nc"


def test_escape_html_leaves_single_quotes() -> None:
    assert escape_html("<b>\"it's\"</b> & more") == "&lt;b&gt;&quot;it's&quot;&lt;/b&gt; &amp; more"
