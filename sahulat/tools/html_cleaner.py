"""Text cleanup for search-result titles and snippets."""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

MAX_SNIPPET_CHARS = 500


def clean_html(raw_html: str | None, max_chars: int | None = None) -> str:
    """Strip HTML tags, decode entities and normalize whitespace."""
    if not raw_html:
        return ""

    if "<" in raw_html or "&" in raw_html:
        soup = BeautifulSoup(raw_html, "html.parser")
        for element in soup(["script", "style"]):
            element.decompose()
        text = soup.get_text(separator=" ")
    else:
        text = raw_html

    text = re.sub(r"\s+", " ", text).strip()
    if max_chars is not None and len(text) > max_chars:
        text = text[: max_chars - 1].rstrip() + "…"
    return text


def clean_snippet(raw: str | None) -> str:
    return clean_html(raw, max_chars=MAX_SNIPPET_CHARS)
