"""Rule-based optimization suggestions.

Each rule is an independent threshold check over already-computed metrics;
any number may fire. Savings figures come from ``SuggestionCosts`` and are
estimates for display, not guarantees.
"""

from __future__ import annotations

from mailfit.analysis.patterns import EMPTY_SPAN_RE, HTML_COMMENT_RE, NBSP_RE
from mailfit.measure import round_half_up, size_of
from mailfit.model.limits import SuggestionCosts
from mailfit.model.verdict import (
    SourceFindings,
    StructureMetrics,
    Suggestion,
    SuggestionCategory,
)

MAX_TABLES = 10
MAX_INLINE_STYLES = 50
MAX_NESTING_DEPTH = 15
MAX_EMPTY_SPANS = 5
MAX_COMMENTS = 2
MAX_NBSP = 20
MAX_WORDS = 800

_PLAIN_PASTE_HINT = "Use 'Paste as Plain Text' (Ctrl+Shift+V / Cmd+Shift+V)"


def generate_suggestions(
    html: str,
    structure: StructureMetrics,
    source: SourceFindings,
    word_count: int,
    costs: SuggestionCosts | None = None,
) -> list[Suggestion]:
    """Return the suggestions that apply, most urgent first.

    The sort is stable, so rules sharing a priority keep their rule order.
    """

    costs = costs or SuggestionCosts()
    suggestions: list[Suggestion] = []

    if source.has_word_processor_metadata:
        suggestions.append(
            Suggestion(
                id="strip-ms-metadata",
                category=SuggestionCategory.METADATA,
                priority=1,
                description=(
                    "Microsoft Office metadata detected. This significantly inflates email size."
                ),
                estimated_savings_bytes=source.estimated_bloat_bytes,
                action=(
                    f"{_PLAIN_PASTE_HINT} or click the 'Remove Formatting' button "
                    "before pasting content from Word."
                ),
            )
        )

    if source.has_online_document_metadata:
        suggestions.append(
            Suggestion(
                id="strip-gdocs-metadata",
                category=SuggestionCategory.METADATA,
                priority=1,
                description="Google Docs metadata detected. This adds unnecessary formatting tags.",
                estimated_savings_bytes=round_half_up(
                    source.estimated_bloat_bytes * costs.online_document_ratio
                ),
                action=f"{_PLAIN_PASTE_HINT} when copying from Google Docs.",
            )
        )

    if structure.table_count > MAX_TABLES:
        suggestions.append(
            Suggestion(
                id="reduce-tables",
                category=SuggestionCategory.STRUCTURE,
                priority=1,
                description=(
                    f"Excessive table nesting detected ({structure.table_count} tables). "
                    "Email builders often create nested tables for each content block."
                ),
                estimated_savings_bytes=max(0, structure.table_count - costs.table_allowance)
                * costs.table_bytes,
                action=(
                    "Consolidate multiple content blocks into single containers. "
                    "Avoid using separate blocks for each paragraph."
                ),
            )
        )

    if structure.inline_style_count > MAX_INLINE_STYLES:
        suggestions.append(
            Suggestion(
                id="reduce-inline-styles",
                category=SuggestionCategory.STYLING,
                priority=2,
                description=(
                    f"High number of inline styles detected ({structure.inline_style_count}). "
                    "This adds significant overhead."
                ),
                estimated_savings_bytes=round_half_up(
                    structure.inline_style_bytes * costs.inline_style_ratio
                ),
                action=(
                    "Use a CSS inliner tool that consolidates repeated styles. "
                    "Remove redundant styling from nested elements."
                ),
            )
        )

    if structure.max_nesting_depth > MAX_NESTING_DEPTH:
        suggestions.append(
            Suggestion(
                id="reduce-nesting",
                category=SuggestionCategory.STRUCTURE,
                priority=2,
                description=(
                    f"Deep DOM nesting detected ({structure.max_nesting_depth} levels). "
                    "This indicates overly complex structure."
                ),
                estimated_savings_bytes=structure.max_nesting_depth * costs.nesting_level_bytes,
                action=(
                    "Simplify email layout. Minimize nested columns and varying "
                    "background colors per section."
                ),
            )
        )

    empty_spans = len(EMPTY_SPAN_RE.findall(html))
    if empty_spans > MAX_EMPTY_SPANS:
        suggestions.append(
            Suggestion(
                id="remove-empty-spans",
                category=SuggestionCategory.CONTENT,
                priority=3,
                description=(
                    f"Empty span elements detected ({empty_spans}). "
                    "These are often artifacts from copy-paste."
                ),
                estimated_savings_bytes=empty_spans * costs.empty_span_bytes,
                action=(
                    "Use the 'Remove Formatting' tool (Tx/Eraser icon) in your email "
                    "editor to strip extraneous tags."
                ),
            )
        )

    comments = HTML_COMMENT_RE.findall(html)
    if len(comments) > MAX_COMMENTS:
        suggestions.append(
            Suggestion(
                id="remove-comments",
                category=SuggestionCategory.CONTENT,
                priority=3,
                description=(
                    f"HTML comments detected ({len(comments)}). "
                    "These add unnecessary bytes to the payload."
                ),
                estimated_savings_bytes=sum(size_of(c) for c in comments),
                action=(
                    "Remove HTML comments before sending. They are not visible to "
                    "recipients but count toward the size limit."
                ),
            )
        )

    nbsp_count = len(NBSP_RE.findall(html))
    if nbsp_count > MAX_NBSP:
        suggestions.append(
            Suggestion(
                id="reduce-nbsp",
                category=SuggestionCategory.CONTENT,
                priority=3,
                description=(
                    f"Excessive non-breaking spaces detected ({nbsp_count}). "
                    "Often a sign of copy-paste from formatted sources."
                ),
                estimated_savings_bytes=nbsp_count * costs.nbsp_bytes,
                action="Replace &nbsp; with regular spaces where possible. Use CSS for spacing instead.",
            )
        )

    if word_count > MAX_WORDS:
        suggestions.append(
            Suggestion(
                id="reduce-word-count",
                category=SuggestionCategory.CONTENT,
                priority=2,
                description=(
                    f"High word count ({word_count} words). "
                    "Long-form content contributes significantly to size."
                ),
                estimated_savings_bytes=max(0, word_count - costs.word_allowance) * costs.word_bytes,
                action=(
                    "Consider splitting into multiple emails or creating a "
                    "'read more' link to web content."
                ),
            )
        )

    return sorted(suggestions, key=lambda s: s.priority)
