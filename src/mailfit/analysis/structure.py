"""Approximate DOM complexity metrics from raw HTML text.

This is tag scanning, not parsing: markup does not need to be well formed and
unbalanced closing tags never push the depth below zero.
"""

from __future__ import annotations

import re

from mailfit.measure import size_of
from mailfit.model.verdict import StructureMetrics

VOID_ELEMENTS = frozenset({"br", "hr", "img", "input", "meta", "link"})

_TABLE_RE = re.compile(r"<table[\s>]", re.IGNORECASE)
_DIV_RE = re.compile(r"<div[\s>]", re.IGNORECASE)
_SPAN_RE = re.compile(r"<span[\s>]", re.IGNORECASE)
_ANY_TAG_RE = re.compile(r"<[a-z][^>]*>", re.IGNORECASE)
_INLINE_STYLE_RE = re.compile(r'style="[^"]*"', re.IGNORECASE)
_TAG_WALK_RE = re.compile(r"</?([a-z][a-z0-9]*)[^>]*>", re.IGNORECASE)


def compute_nesting_depth(html: str) -> int:
    """Return the deepest run of open non-void elements.

    Closing tags on an empty stack are ignored rather than going negative.
    """

    depth = 0
    max_depth = 0
    for match in _TAG_WALK_RE.finditer(html):
        full_tag = match.group(0)
        tag_name = match.group(1).lower()
        if full_tag.endswith("/>") or tag_name in VOID_ELEMENTS:
            continue
        if full_tag.startswith("</"):
            depth = max(0, depth - 1)
        else:
            depth += 1
            max_depth = max(max_depth, depth)
    return max_depth


def scan_structure(html: str) -> StructureMetrics:
    """Count structural elements and inline styles in ``html``."""
    inline_styles = _INLINE_STYLE_RE.findall(html)
    return StructureMetrics(
        total_nodes=len(_ANY_TAG_RE.findall(html)),
        table_count=len(_TABLE_RE.findall(html)),
        div_count=len(_DIV_RE.findall(html)),
        span_count=len(_SPAN_RE.findall(html)),
        max_nesting_depth=compute_nesting_depth(html),
        inline_style_count=len(inline_styles),
        inline_style_bytes=sum(size_of(style) for style in inline_styles),
    )
