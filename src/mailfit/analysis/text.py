from __future__ import annotations

import re

_STYLE_BLOCK_RE = re.compile(r"<style[^>]*>[\s\S]*?</style>", re.IGNORECASE)
_SCRIPT_BLOCK_RE = re.compile(r"<script[^>]*>[\s\S]*?</script>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")
_NON_WORD_RE = re.compile(r"[^\w\s]")


def strip_html(html: str) -> str:
    """Return the visible text of ``html`` with whitespace collapsed.

    Style and script blocks are dropped entirely; every other tag becomes a
    single space so adjacent cells do not run together.
    """

    text = _STYLE_BLOCK_RE.sub("", html)
    text = _SCRIPT_BLOCK_RE.sub("", text)
    text = _TAG_RE.sub(" ", text)
    return _WS_RE.sub(" ", text).strip()


def count_words(text: str) -> int:
    cleaned = _NON_WORD_RE.sub(" ", text).strip()
    if not cleaned:
        return 0
    return len(cleaned.split())
