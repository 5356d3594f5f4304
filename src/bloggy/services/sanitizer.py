"""Markdown to safe HTML rendering.

Author markdown is rendered with Python-Markdown and the resulting HTML is
passed through a bleach allow-list. Anything outside the allow-list is
stripped rather than escaped, and the bodies of ``<script>`` and ``<style>``
elements are dropped along with the tags.
"""
from __future__ import annotations

import re

import markdown
from bleach.sanitizer import Cleaner

MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "sane_lists"]

ALLOWED_TAGS = frozenset(
    {
        "p", "br", "hr",
        "h1", "h2", "h3", "h4", "h5", "h6",
        "strong", "em", "b", "i", "del",
        "blockquote", "code", "pre",
        "ul", "ol", "li",
        "a", "img",
        "table", "thead", "tbody", "tr", "th", "td",
    }
)

ALLOWED_ATTRIBUTES: dict[str, list[str]] = {
    "a": ["href", "title"],
    "img": ["src", "alt", "title"],
    "code": ["class"],
    "th": ["align"],
    "td": ["align"],
}

ALLOWED_PROTOCOLS = frozenset({"http", "https", "mailto"})

_EXECUTABLE_BLOCKS = re.compile(
    r"<(script|style)\b[^>]*>.*?</\1\s*>",
    re.IGNORECASE | re.DOTALL,
)

_cleaner = Cleaner(
    tags=ALLOWED_TAGS,
    attributes=ALLOWED_ATTRIBUTES,
    protocols=ALLOWED_PROTOCOLS,
    strip=True,
    strip_comments=True,
)


def render_markdown(markdown_source: str | None) -> str:
    """Render author markdown into sanitized HTML.

    Args:
        markdown_source: Raw markdown as typed by the author. May be empty.

    Returns:
        Sanitized HTML, or an empty string when there is no markdown.
    """
    if not markdown_source or not markdown_source.strip():
        return ""

    html = markdown.markdown(markdown_source, extensions=MARKDOWN_EXTENSIONS)
    html = _EXECUTABLE_BLOCKS.sub("", html)
    return _cleaner.clean(html).strip()
