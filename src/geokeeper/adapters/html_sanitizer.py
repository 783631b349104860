"""Allow-list HTML sanitizer built on BeautifulSoup."""

from __future__ import annotations

import logging
from typing import Final

from bs4 import BeautifulSoup, Comment, Tag

log = logging.getLogger(__name__)

# ``text_html`` / ``desc_html`` value for purified HTML
HTML_FORMAT_FLAG: Final[int] = 1

ALLOWED_TAGS: Final[dict[str, frozenset[str]]] = {
    "a": frozenset({"href", "title", "target"}),
    "b": frozenset(),
    "blockquote": frozenset(),
    "br": frozenset(),
    "div": frozenset({"style"}),
    "em": frozenset(),
    "font": frozenset({"color", "size", "face"}),
    "h1": frozenset(),
    "h2": frozenset(),
    "h3": frozenset(),
    "hr": frozenset(),
    "i": frozenset(),
    "img": frozenset({"src", "alt", "title", "width", "height"}),
    "li": frozenset(),
    "ol": frozenset(),
    "p": frozenset({"style"}),
    "pre": frozenset(),
    "s": frozenset(),
    "span": frozenset({"style"}),
    "strong": frozenset(),
    "sub": frozenset(),
    "sup": frozenset(),
    "table": frozenset({"border", "cellpadding", "cellspacing"}),
    "tbody": frozenset(),
    "td": frozenset({"colspan", "rowspan"}),
    "th": frozenset({"colspan", "rowspan"}),
    "tr": frozenset(),
    "u": frozenset(),
    "ul": frozenset(),
}
# dropped together with their content
FORBIDDEN_TAGS: Final[frozenset[str]] = frozenset(
    {"script", "style", "iframe", "object", "embed", "form", "input", "textarea", "button"}
)
SAFE_URL_SCHEMES: Final[tuple[str, ...]] = ("http://", "https://", "mailto:", "/", "#")


def _is_safe_url(value: str) -> bool:
    return value.strip().lower().startswith(SAFE_URL_SCHEMES)


class SoupHtmlSanitizer:
    def purify(self, html: str) -> tuple[str, int]:
        soup = BeautifulSoup(html, "html.parser")

        for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
            comment.extract()

        for tag in list(soup.find_all(True)):
            if not isinstance(tag, Tag) or tag.decomposed:
                continue
            if tag.name in FORBIDDEN_TAGS:
                tag.decompose()
                continue
            allowed = ALLOWED_TAGS.get(tag.name)
            if allowed is None:
                tag.unwrap()
                continue
            for attribute in list(tag.attrs):
                value = tag.attrs[attribute]
                if attribute not in allowed:
                    del tag.attrs[attribute]
                elif attribute in {"href", "src"} and not _is_safe_url(str(value)):
                    log.debug("Dropping unsafe %s on <%s>", attribute, tag.name)
                    del tag.attrs[attribute]

        return soup.decode(formatter="minimal"), HTML_FORMAT_FLAG
