"""Byte budgets and compression defaults shared by the analysis and image pipelines.

The clipping thresholds match the receiving client's behaviour: messages whose
HTML exceeds roughly 102KB are truncated. Values are part of the public
contract and must not drift.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# Clipping thresholds in bytes, ascending
OPTIMAL_LIMIT = 71_680  # 70KB
WARNING_LIMIT = 87_040  # 85KB
TARGET_LIMIT = 92_160  # 90KB, recommended maximum
HARD_LIMIT = 104_448  # 102KB, content above this is clipped

# Header image limits in bytes
MAX_SIZE_BYTES = 102_400  # 100KB hard ceiling
TARGET_SIZE_BYTES = 81_920  # 80KB
WARNING_SIZE_BYTES = 92_160  # 90KB

# Template widths in pixels
STANDARD_WIDTH = 600
WIDE_WIDTH = 700
MAX_WIDTH = 800

DEFAULT_QUALITY = 85
DEFAULT_MIN_QUALITY = 40
DEFAULT_QUALITY_STEP = 5

MAX_BATCH_VARIANTS = 10


@dataclass(frozen=True)
class SuggestionCosts:
    """Per-unit byte estimates used when sizing optimization suggestions.

    These are rough presentation figures, not measured savings. Callers may
    override any of them through ``AnalysisOptions.costs``.
    """

    table_bytes: int = 200
    table_allowance: int = 5
    nesting_level_bytes: int = 50
    empty_span_bytes: int = 30
    nbsp_bytes: int = 5
    word_bytes: int = 5
    word_allowance: int = 500
    inline_style_ratio: float = 0.3
    online_document_ratio: float = 0.8

    def to_dict(self) -> dict[str, Any]:
        return {
            "table_bytes": self.table_bytes,
            "table_allowance": self.table_allowance,
            "nesting_level_bytes": self.nesting_level_bytes,
            "empty_span_bytes": self.empty_span_bytes,
            "nbsp_bytes": self.nbsp_bytes,
            "word_bytes": self.word_bytes,
            "word_allowance": self.word_allowance,
            "inline_style_ratio": self.inline_style_ratio,
            "online_document_ratio": self.online_document_ratio,
        }


def limits_to_dict() -> dict[str, int]:
    """Return the clipping thresholds keyed by name, for reports and the CLI."""
    return {
        "hard_limit": HARD_LIMIT,
        "target_limit": TARGET_LIMIT,
        "warning_limit": WARNING_LIMIT,
        "optimal_limit": OPTIMAL_LIMIT,
    }


__all__ = [
    "OPTIMAL_LIMIT",
    "WARNING_LIMIT",
    "TARGET_LIMIT",
    "HARD_LIMIT",
    "MAX_SIZE_BYTES",
    "TARGET_SIZE_BYTES",
    "WARNING_SIZE_BYTES",
    "STANDARD_WIDTH",
    "WIDE_WIDTH",
    "MAX_WIDTH",
    "DEFAULT_QUALITY",
    "DEFAULT_MIN_QUALITY",
    "DEFAULT_QUALITY_STEP",
    "MAX_BATCH_VARIANTS",
    "SuggestionCosts",
    "limits_to_dict",
]
