"""Pattern tables describing paste-source bloat.

Tables are plain data: adding a marker means adding a row, not touching the
classifier or the sanitizer. Patterns may overlap; the classifier accepts the
resulting over-count.

``regex`` is the detection marker and only decides what is counted. ``strip``
is the sanitizer's rewrite for the same artifact, usually wider than the
marker so the whole declaration, element or attribute goes. Rows without a
``strip`` rule are detection-only: they either guard markup that some clients
depend on (Office conditional blocks) or are handled by a dedicated sanitizer
step.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum


class SourceKind(Enum):
    WORD_PROCESSOR = "word_processor"
    ONLINE_DOCUMENT = "online_document"
    RICH_TEXT = "rich_text"


@dataclass(frozen=True)
class StripRule:
    regex: re.Pattern[str]
    replacement: str | Callable[[re.Match[str]], str] = ""

    def apply(self, text: str) -> str:
        return self.regex.sub(self.replacement, text)


@dataclass(frozen=True)
class BloatPattern:
    name: str
    regex: re.Pattern[str]
    strip: StripRule | None = None


@dataclass(frozen=True)
class PatternTable:
    kind: SourceKind
    label: str
    patterns: tuple[BloatPattern, ...]


def _p(
    name: str,
    pattern: str,
    *,
    strip: str | None = None,
    replacement: str | Callable[[re.Match[str]], str] = "",
    flags: int = re.IGNORECASE,
) -> BloatPattern:
    rule = None
    if strip is not None:
        rule = StripRule(regex=re.compile(strip, flags), replacement=replacement)
    return BloatPattern(name=name, regex=re.compile(pattern, flags), strip=rule)


def _drop_mso_classes(match: re.Match[str]) -> str:
    """Remove ``Mso*`` tokens from a class attribute, keeping the others."""
    if match.group("bare") is not None:
        return ""
    tokens = match.group("value").split()
    kept = [token for token in tokens if not token.lower().startswith("mso")]
    if len(kept) == len(tokens):
        return match.group(0)
    if not kept:
        return ""
    return f'class="{" ".join(kept)}"'


WORD_PROCESSOR_TABLE = PatternTable(
    kind=SourceKind.WORD_PROCESSOR,
    label="Microsoft Office metadata",
    patterns=(
        # Declarations only: the property must start a style or CSS rule
        _p("mso-style-prefix", r"mso-", strip=r"(?<=[\s;\"'{])mso-[\w-]*\s*:[^;\"'}<>]*;?"),
        _p("mso-conditional", r"<!--\[if\s+mso\]"),
        _p("office-paragraph", r"<o:p>", strip=r"</?o:p>"),
        _p(
            "word-document",
            r"<w:WordDocument>",
            strip=r"<w:WordDocument>(?:[\s\S]*?</w:WordDocument>)?",
        ),
        _p(
            "mso-class",
            r"class=\"?Mso",
            strip=r"class=(?:\"(?P<value>[^\"]*)\"|(?P<bare>Mso[\w-]*)(?=[\s>/]))",
            replacement=_drop_mso_classes,
        ),
        _p("mso-inline-style", r"style=\"[^\"]*mso-[^\"]*\""),
        _p("office-xml", r"<xml>", strip=r"<xml>(?:[\s\S]*?</xml>)?"),
        _p(
            "office-namespace",
            r"xmlns:o=\"urn:schemas-microsoft-com",
            strip=r"\s?xmlns:\w+=\"urn:schemas-microsoft-com[^\"]*\"",
        ),
    ),
)

ONLINE_DOCUMENT_TABLE = PatternTable(
    kind=SourceKind.ONLINE_DOCUMENT,
    label="Google Docs metadata",
    patterns=(
        _p("docs-guid", r"id=\"docs-internal-guid", strip=r"id=\"docs-internal-guid[^\"]*\""),
        _p("generated-class", r"class=\"c\d+\"", strip=r"class=\"c\d+\""),
        _p(
            "smartmail-attribute",
            r"data-smartmail=",
            strip=r"data-smartmail=(?:\"[^\"]*\"|[^\s>]*)",
        ),
        _p("ltr-direction", r"dir=\"ltr\"", strip=r"dir=\"ltr\""),
    ),
)

RICH_TEXT_TABLE = PatternTable(
    kind=SourceKind.RICH_TEXT,
    label="Rich text artifacts",
    patterns=(
        _p("font-tag", r"<font\s+[^>]*>"),
        _p("font-family-stack", r"style=\"[^\"]*font-family:\s*[^;]*;[^\"]*\""),
        _p("empty-styled-span", r"<span[^>]*style=\"[^\"]*\"[^>]*>\s*</span>"),
        _p("html-comment", r"<!--[\s\S]*?-->", flags=0),
        _p("empty-break-div", r"<div[^>]*>\s*<br\s*/?>\s*</div>"),
        _p("nbsp-entity", r"&nbsp;"),
    ),
)

PATTERN_TABLES: tuple[PatternTable, ...] = (
    WORD_PROCESSOR_TABLE,
    ONLINE_DOCUMENT_TABLE,
    RICH_TEXT_TABLE,
)

# Standalone counters used by the suggestion rules and the sanitizer
EMPTY_SPAN_RE = re.compile(r"<span[^>]*>\s*</span>", re.IGNORECASE)
HTML_COMMENT_RE = re.compile(r"<!--[\s\S]*?-->")
NBSP_RE = re.compile(r"&nbsp;", re.IGNORECASE)

# Comments opening or closing a conditional block are load-bearing for some
# clients: "<!--[if mso]>", "<!--<![endif]-->" and the "<!-->" half of a
# downlevel-revealed "<!--[if !mso]><!-->"
CONDITIONAL_COMMENT_PREFIXES: tuple[str, ...] = ("[if", "<![endif]", ">")

REMOVABLE_COMMENT_RE = re.compile(
    "<!--(?!"
    + "|".join(re.escape(prefix) for prefix in CONDITIONAL_COMMENT_PREFIXES)
    + r")[\s\S]*?-->"
)
