"""Paste-source classification.

Flags word-processor, online-document and rich-text editor artifacts and
estimates how many bytes they contribute. The estimate is a deliberate
over-count: overlapping patterns each add their full matched length.
"""

from __future__ import annotations

import logging

from mailfit.analysis.patterns import PATTERN_TABLES, PatternTable, SourceKind
from mailfit.measure import size_of
from mailfit.model.verdict import SourceFindings

logger = logging.getLogger(__name__)


def _scan_table(html: str, table: PatternTable) -> tuple[list[str], int]:
    descriptions: list[str] = []
    bloat = 0
    for pattern in table.patterns:
        matches = [m.group(0) for m in pattern.regex.finditer(html)]
        if not matches:
            continue
        descriptions.append(f"{table.label} ({len(matches)} occurrences)")
        bloat += sum(size_of(m) for m in matches)
        logger.debug("Pattern %s matched %d times", pattern.name, len(matches))
    return descriptions, bloat


def classify_source(
    html: str, tables: tuple[PatternTable, ...] = PATTERN_TABLES
) -> SourceFindings:
    """Run every pattern table over ``html`` and collect the findings."""
    flags = {kind: False for kind in SourceKind}
    descriptions: list[str] = []
    bloat = 0

    for table in tables:
        found, table_bloat = _scan_table(html, table)
        if found:
            flags[table.kind] = True
            descriptions.extend(found)
            bloat += table_bloat

    return SourceFindings(
        has_word_processor_metadata=flags[SourceKind.WORD_PROCESSOR],
        has_online_document_metadata=flags[SourceKind.ONLINE_DOCUMENT],
        has_rich_text_artifacts=flags[SourceKind.RICH_TEXT],
        problematic_patterns=tuple(descriptions),
        estimated_bloat_bytes=bloat,
    )
