"""Email size analysis for clipping prevention.

Receiving clients truncate messages whose HTML exceeds roughly 102KB
(104,448 bytes). This module combines byte measurement, envelope estimation,
structure scanning and paste-source classification into one ``SizeVerdict``,
and compares several variants of the same email.

Key properties:
- ``status`` depends only on ``total_bytes`` and fixed thresholds
- ``analyze`` never raises; internal faults degrade to a safe verdict
- batch comparison is order independent: results are sorted by size, ties
  keep input order
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone

from mailfit.analysis.envelope import estimate_envelope_overhead
from mailfit.analysis.source import classify_source
from mailfit.analysis.structure import scan_structure
from mailfit.analysis.suggestions import generate_suggestions
from mailfit.analysis.text import count_words, strip_html
from mailfit.feature_logger import log_error_policy, log_feature_decision
from mailfit.measure import round_half_up, size_in_kb, size_of
from mailfit.model.limits import (
    HARD_LIMIT,
    MAX_BATCH_VARIANTS,
    OPTIMAL_LIMIT,
    TARGET_LIMIT,
    WARNING_LIMIT,
    SuggestionCosts,
)
from mailfit.model.verdict import (
    BatchReport,
    DeploymentValidation,
    EmailVariant,
    QuickCheck,
    SizeStatus,
    SizeVerdict,
    SourceFindings,
    StructureMetrics,
    VariantResult,
)

logger = logging.getLogger(__name__)

TABLE_RECOMMENDATION_THRESHOLD = 15
WORD_RECOMMENDATION_THRESHOLD = 1000


@dataclass(frozen=True)
class AnalysisOptions:
    subject: str | None = None
    preheader: str | None = None
    include_envelope: bool = True
    costs: SuggestionCosts | None = None


def status_for(total_bytes: int) -> SizeStatus:
    if total_bytes <= OPTIMAL_LIMIT:
        return SizeStatus.OPTIMAL
    if total_bytes <= WARNING_LIMIT:
        return SizeStatus.GOOD
    if total_bytes <= TARGET_LIMIT:
        return SizeStatus.WARNING
    if total_bytes < HARD_LIMIT:
        return SizeStatus.DANGER
    return SizeStatus.CLIPPED


def summary_for(total_bytes: int) -> str:
    kb = f"{total_bytes / 1024:.1f}"
    status = status_for(total_bytes)
    if status is SizeStatus.OPTIMAL:
        return f"Excellent! Email size ({kb}KB) is optimal for all email clients including Gmail."
    if status is SizeStatus.GOOD:
        return f"Good! Email size ({kb}KB) is within safe limits. No clipping expected."
    if status is SizeStatus.WARNING:
        return (
            f"Warning: Email size ({kb}KB) is approaching Gmail's limit. "
            "Consider optimizations."
        )
    if status is SizeStatus.DANGER:
        return (
            f"Danger: Email size ({kb}KB) is very close to Gmail's 102KB limit. "
            "High risk of clipping."
        )
    return f"Critical: Email size ({kb}KB) exceeds Gmail's 102KB limit. Message WILL be clipped."


def percent_of_limit(total_bytes: int) -> int:
    return round_half_up(total_bytes / HARD_LIMIT * 100)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _failed_verdict(message: str) -> SizeVerdict:
    return SizeVerdict(
        success=False,
        total_bytes=0,
        size_kb=0.0,
        status=SizeStatus.WARNING,
        summary="Analysis failed",
        percent_of_hard_limit=0,
        bytes_remaining=HARD_LIMIT,
        structure=StructureMetrics(),
        source=SourceFindings(),
        suggestions=(),
        word_count=0,
        char_count=0,
        analyzed_at=_now_iso(),
        error=message,
    )


def _analyze(html: str, options: AnalysisOptions) -> SizeVerdict:
    total_bytes = size_of(html)
    if options.include_envelope:
        total_bytes += estimate_envelope_overhead(options.subject, options.preheader)

    # Structure and source always look at the original markup, never the
    # envelope-adjusted total
    structure = scan_structure(html)
    source = classify_source(html)

    plain_text = strip_html(html)
    word_count = count_words(plain_text)

    suggestions = generate_suggestions(html, structure, source, word_count, options.costs)

    return SizeVerdict(
        success=True,
        total_bytes=total_bytes,
        size_kb=size_in_kb(total_bytes),
        status=status_for(total_bytes),
        summary=summary_for(total_bytes),
        percent_of_hard_limit=percent_of_limit(total_bytes),
        bytes_remaining=max(0, HARD_LIMIT - total_bytes),
        structure=structure,
        source=source,
        suggestions=tuple(suggestions),
        word_count=word_count,
        char_count=len(plain_text),
        analyzed_at=_now_iso(),
    )


def analyze(html: str, options: AnalysisOptions | None = None) -> SizeVerdict:
    """Analyze ``html`` for clipping risk.

    Args:
        html: Fully composed HTML body (document wrapper optional)
        options: Subject/preheader for envelope estimation and savings costs

    Returns:
        A ``SizeVerdict``. On any internal fault the verdict has
        ``success=False``, ``status=warning``, zeroed metrics and ``error`` set.
    """
    options = options or AnalysisOptions()
    try:
        verdict = _analyze(html, options)
    except Exception as exc:
        logger.exception("Size analysis failed")
        log_error_policy("Analysis", "analysis_failed", "safe_verdict", str(exc))
        return _failed_verdict(str(exc) or exc.__class__.__name__)

    logger.debug(
        "Analyzed %d bytes -> %s (%d suggestions)",
        verdict.total_bytes,
        verdict.status.value,
        len(verdict.suggestions),
    )
    return verdict


def compare_variants(
    variants: Sequence[EmailVariant], max_workers: int | None = None
) -> BatchReport:
    """Analyze each variant and recommend the smallest one under the target.

    Args:
        variants: Candidate emails; ids should be unique
        max_workers: Analyze on a thread pool when greater than 1

    Returns:
        ``BatchReport`` with results sorted by ``(total_bytes, input order)``.
        The recommendation is the smallest variant below ``TARGET_LIMIT``, or
        the smallest overall when none qualify.

    Raises:
        ValueError: If ``variants`` is empty or exceeds ``MAX_BATCH_VARIANTS``
    """
    if not variants:
        raise ValueError("At least one variant is required")
    if len(variants) > MAX_BATCH_VARIANTS:
        raise ValueError(f"Maximum {MAX_BATCH_VARIANTS} variants allowed per comparison")

    def _run(variant: EmailVariant) -> SizeVerdict:
        return analyze(variant.html, AnalysisOptions(subject=variant.subject))

    if max_workers is not None and max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            verdicts = list(executor.map(_run, variants))
    else:
        verdicts = [_run(variant) for variant in variants]

    indexed = sorted(
        enumerate(zip(variants, verdicts, strict=True)),
        key=lambda item: (item[1][1].total_bytes, item[0]),
    )
    results = tuple(VariantResult(id=variant.id, verdict=verdict) for _, (variant, verdict) in indexed)

    passing = [r for r in results if r.verdict.total_bytes < TARGET_LIMIT]
    recommended = passing[0] if passing else results[0]

    log_feature_decision(
        "Batch",
        "recommended",
        {"id": recommended.id, "passing": len(passing), "total": len(results)},
    )

    return BatchReport(
        results=results,
        recommended_id=recommended.id,
        passing_count=len(passing),
        smallest_kb=results[0].verdict.size_kb,
        largest_kb=results[-1].verdict.size_kb,
    )


def quick_clip_check(html: str) -> QuickCheck:
    """Raw-byte risk check without envelope, structure or suggestions."""
    num_bytes = size_of(html)
    size_kb = size_in_kb(num_bytes)

    if num_bytes >= HARD_LIMIT:
        message = f"WILL BE CLIPPED: {size_kb}KB exceeds Gmail's 102KB limit"
    elif num_bytes >= TARGET_LIMIT:
        message = f"HIGH RISK: {size_kb}KB is very close to Gmail's limit"
    elif num_bytes >= WARNING_LIMIT:
        message = f"WARNING: {size_kb}KB approaching Gmail's limit"
    elif num_bytes >= OPTIMAL_LIMIT:
        message = f"OK: {size_kb}KB within safe limits"
    else:
        message = f"OPTIMAL: {size_kb}KB is well under Gmail's limit"

    return QuickCheck(is_at_risk=num_bytes >= WARNING_LIMIT, size_kb=size_kb, message=message)


def validate_for_deployment(
    html: str,
    subject: str | None = None,
    preheader: str | None = None,
    strict: bool = False,
) -> DeploymentValidation:
    """Pass/fail gate before sending.

    Strict mode requires the optimal threshold instead of the target one.
    """
    verdict = analyze(html, AnalysisOptions(subject=subject, preheader=preheader))
    threshold = OPTIMAL_LIMIT if strict else TARGET_LIMIT
    valid = verdict.total_bytes < threshold

    recommendations: list[str] = []
    if not valid:
        recommendations.append(
            f"Email size ({verdict.size_kb}KB) exceeds the "
            f"{'optimal' if strict else 'recommended'} limit of {threshold / 1024:.0f}KB."
        )
    if verdict.source.has_word_processor_metadata:
        recommendations.append("Strip Microsoft Office formatting before pasting content.")
    if verdict.source.has_online_document_metadata:
        recommendations.append("Use 'Paste as Plain Text' when copying from Google Docs.")
    if verdict.structure.table_count > TABLE_RECOMMENDATION_THRESHOLD:
        recommendations.append("Reduce table nesting by consolidating content blocks.")
    if verdict.word_count > WORD_RECOMMENDATION_THRESHOLD:
        recommendations.append("Consider splitting long-form content into multiple emails.")

    return DeploymentValidation(
        valid=valid, verdict=verdict, recommendations=tuple(recommendations)
    )


__all__ = [
    "AnalysisOptions",
    "analyze",
    "compare_variants",
    "percent_of_limit",
    "quick_clip_check",
    "status_for",
    "summary_for",
    "validate_for_deployment",
]
