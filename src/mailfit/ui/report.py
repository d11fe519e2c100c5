"""Rich rendering of analysis, batch and compression results for the terminal."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from mailfit.measure import format_file_size
from mailfit.model.compression import CompressionResult
from mailfit.model.limits import limits_to_dict
from mailfit.model.verdict import BatchReport, SizeStatus, SizeVerdict

_STATUS_STYLES = {
    SizeStatus.OPTIMAL: "bold green",
    SizeStatus.GOOD: "green",
    SizeStatus.WARNING: "yellow",
    SizeStatus.DANGER: "bold red",
    SizeStatus.CLIPPED: "bold white on red",
}


def render_verdict(verdict: SizeVerdict, console: Console) -> None:
    if not verdict.success:
        console.print(Panel(f"Analysis failed: {verdict.error}", border_style="red"))
        return

    style = _STATUS_STYLES[verdict.status]
    console.print(
        Panel(
            f"[{style}]{verdict.status.value.upper()}[/] {verdict.summary}\n"
            f"{verdict.total_bytes} bytes ({verdict.percent_of_hard_limit}% of limit, "
            f"{verdict.bytes_remaining} bytes remaining)",
            title="Clipping check",
        )
    )

    metrics = Table(title="Structure", show_header=False)
    metrics.add_column("Metric")
    metrics.add_column("Value", justify="right")
    for name, value in verdict.structure.to_dict().items():
        metrics.add_row(name.replace("_", " "), str(value))
    metrics.add_row("words", str(verdict.word_count))
    metrics.add_row("characters", str(verdict.char_count))
    metrics.add_row("estimated bloat", format_file_size(verdict.source.estimated_bloat_bytes))
    console.print(metrics)

    for pattern in verdict.source.problematic_patterns:
        console.print(f"  [yellow]•[/] {pattern}")

    if verdict.suggestions:
        table = Table(title="Suggestions")
        table.add_column("P", justify="center")
        table.add_column("Category")
        table.add_column("Description")
        table.add_column("Savings", justify="right")
        for suggestion in verdict.suggestions:
            table.add_row(
                str(suggestion.priority),
                suggestion.category.value,
                f"{suggestion.description}\n[dim]{suggestion.action}[/]",
                format_file_size(suggestion.estimated_savings_bytes),
            )
        console.print(table)


def render_batch(report: BatchReport, console: Console) -> None:
    table = Table(title="Variants (smallest first)")
    table.add_column("ID")
    table.add_column("Bytes", justify="right")
    table.add_column("Status")
    table.add_column("")
    for result in report.results:
        verdict = result.verdict
        marker = "recommended" if result.id == report.recommended_id else ""
        table.add_row(
            result.id,
            str(verdict.total_bytes),
            f"[{_STATUS_STYLES[verdict.status]}]{verdict.status.value}[/]",
            marker,
        )
    console.print(table)
    console.print(
        f"{report.passing_count}/{len(report.results)} variants under target; "
        f"recommended: [bold]{report.recommended_id}[/]"
    )


def render_compression(result: CompressionResult, console: Console) -> None:
    if not result.success:
        console.print(Panel(f"Compression failed: {result.error}", border_style="red"))
        return
    body = (
        f"{format_file_size(result.original_size_bytes)} -> "
        f"{format_file_size(result.final_size_bytes)} "
        f"({result.percent_reduction}% smaller, ratio {result.compression_ratio})\n"
        f"{result.format_used.value} at quality {result.quality_used}, "
        f"{result.dimensions.width}x{result.dimensions.height}, "
        f"{result.attempts} attempts in {result.processing_time_ms} ms"
    )
    if result.warning:
        body += f"\n[yellow]{result.warning}[/]"
    console.print(Panel(body, title="Image compression"))


def render_limits(console: Console) -> None:
    table = Table(title="Clipping thresholds")
    table.add_column("Limit")
    table.add_column("Bytes", justify="right")
    table.add_column("KB", justify="right")
    for name, value in limits_to_dict().items():
        table.add_row(name.replace("_", " "), str(value), f"{value / 1024:.1f}")
    console.print(table)
