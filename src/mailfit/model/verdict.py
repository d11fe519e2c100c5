"""Result structures produced by HTML size analysis."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class SizeStatus(Enum):
    """Clipping risk band, ordered from safest to worst."""

    OPTIMAL = "optimal"
    GOOD = "good"
    WARNING = "warning"
    DANGER = "danger"
    CLIPPED = "clipped"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]


_SEVERITY = {
    SizeStatus.OPTIMAL: 0,
    SizeStatus.GOOD: 1,
    SizeStatus.WARNING: 2,
    SizeStatus.DANGER: 3,
    SizeStatus.CLIPPED: 4,
}


class SuggestionCategory(Enum):
    STRUCTURE = "structure"
    CONTENT = "content"
    STYLING = "styling"
    IMAGES = "images"
    METADATA = "metadata"


@dataclass(frozen=True)
class StructureMetrics:
    total_nodes: int = 0
    table_count: int = 0
    div_count: int = 0
    span_count: int = 0
    max_nesting_depth: int = 0
    inline_style_count: int = 0
    inline_style_bytes: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "total_nodes": self.total_nodes,
            "table_count": self.table_count,
            "div_count": self.div_count,
            "span_count": self.span_count,
            "max_nesting_depth": self.max_nesting_depth,
            "inline_style_count": self.inline_style_count,
            "inline_style_bytes": self.inline_style_bytes,
        }


@dataclass(frozen=True)
class SourceFindings:
    """Paste-source artifacts detected in the markup.

    ``estimated_bloat_bytes`` sums every matched substring across all patterns,
    so overlapping patterns are counted more than once.
    """

    has_word_processor_metadata: bool = False
    has_online_document_metadata: bool = False
    has_rich_text_artifacts: bool = False
    problematic_patterns: tuple[str, ...] = ()
    estimated_bloat_bytes: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "has_word_processor_metadata": self.has_word_processor_metadata,
            "has_online_document_metadata": self.has_online_document_metadata,
            "has_rich_text_artifacts": self.has_rich_text_artifacts,
            "problematic_patterns": list(self.problematic_patterns),
            "estimated_bloat_bytes": self.estimated_bloat_bytes,
        }


@dataclass(frozen=True)
class Suggestion:
    id: str
    category: SuggestionCategory
    priority: int  # 1 = most urgent
    description: str
    estimated_savings_bytes: int
    action: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "category": self.category.value,
            "priority": self.priority,
            "description": self.description,
            "estimated_savings_bytes": self.estimated_savings_bytes,
            "action": self.action,
        }


@dataclass(frozen=True)
class SizeVerdict:
    """Complete clipping analysis for one HTML payload."""

    success: bool
    total_bytes: int
    size_kb: float
    status: SizeStatus
    summary: str
    percent_of_hard_limit: int
    bytes_remaining: int
    structure: StructureMetrics
    source: SourceFindings
    suggestions: tuple[Suggestion, ...]
    word_count: int
    char_count: int
    analyzed_at: str
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "success": self.success,
            "total_bytes": self.total_bytes,
            "size_kb": self.size_kb,
            "status": self.status.value,
            "summary": self.summary,
            "percent_of_hard_limit": self.percent_of_hard_limit,
            "bytes_remaining": self.bytes_remaining,
            "structure": self.structure.to_dict(),
            "source": self.source.to_dict(),
            "suggestions": [s.to_dict() for s in self.suggestions],
            "word_count": self.word_count,
            "char_count": self.char_count,
            "analyzed_at": self.analyzed_at,
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class EmailVariant:
    """One candidate email in a batch comparison."""

    id: str
    html: str
    subject: str | None = None


@dataclass(frozen=True)
class VariantResult:
    id: str
    verdict: SizeVerdict

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "verdict": self.verdict.to_dict()}


@dataclass(frozen=True)
class BatchReport:
    """Variants sorted smallest first, with the recommended pick."""

    results: tuple[VariantResult, ...]
    recommended_id: str
    passing_count: int
    smallest_kb: float
    largest_kb: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [r.to_dict() for r in self.results],
            "recommended_id": self.recommended_id,
            "summary": {
                "total_variants": len(self.results),
                "passing_variants": self.passing_count,
                "smallest_kb": self.smallest_kb,
                "largest_kb": self.largest_kb,
            },
        }


@dataclass(frozen=True)
class QuickCheck:
    is_at_risk: bool
    size_kb: float
    message: str


@dataclass(frozen=True)
class DeploymentValidation:
    valid: bool
    verdict: SizeVerdict
    recommendations: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "recommendations": list(self.recommendations),
            "verdict": self.verdict.to_dict(),
        }
