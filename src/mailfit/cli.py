"""CLI interface for mailfit."""

import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from mailfit import __version__
from mailfit.analysis.analyzer import AnalysisOptions, analyze, compare_variants
from mailfit.images.compressor import compress_image
from mailfit.model.compression import CompressionConfig
from mailfit.model.limits import (
    DEFAULT_MIN_QUALITY,
    DEFAULT_QUALITY,
    DEFAULT_QUALITY_STEP,
    MAX_SIZE_BYTES,
    STANDARD_WIDTH,
)
from mailfit.model.verdict import EmailVariant
from mailfit.transform.sanitize import sanitize
from mailfit.ui.report import render_batch, render_compression, render_limits, render_verdict

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="mailfit",
    help="Check marketing emails against clipping limits and shrink header images.",
    no_args_is_help=True,
)

console = Console()


def _read_html(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        typer.echo(f"Error: cannot read {path}: {exc}", err=True)
        raise typer.Exit(1) from exc


def _existing_file(help_text: str):  # type: ignore[no-untyped-def]
    return typer.Argument(
        help=help_text, exists=True, file_okay=True, dir_okay=False, readable=True
    )


@app.command("analyze")
def analyze_command(
    html_file: Annotated[Path, _existing_file("HTML file to analyze")],
    subject: Annotated[
        str | None, typer.Option("--subject", help="Subject line (adds envelope overhead)")
    ] = None,
    preheader: Annotated[
        str | None, typer.Option("--preheader", help="Preheader text (adds envelope overhead)")
    ] = None,
    envelope: Annotated[
        bool,
        typer.Option(
            "--envelope/--no-envelope",
            help="Include estimated transport envelope overhead (default: yes)",
        ),
    ] = True,
    as_json: Annotated[bool, typer.Option("--json", help="Print the verdict as JSON")] = False,
) -> None:
    """
    Estimate the delivered size of an email and suggest how to shrink it.

    Examples:

        mailfit analyze newsletter.html --subject "Spring sale"

        mailfit analyze newsletter.html --no-envelope --json
    """
    html = _read_html(html_file)
    verdict = analyze(
        html, AnalysisOptions(subject=subject, preheader=preheader, include_envelope=envelope)
    )
    if as_json:
        typer.echo(json.dumps(verdict.to_dict(), ensure_ascii=False, indent=2))
    else:
        render_verdict(verdict, console)
    if not verdict.success:
        raise typer.Exit(1)


@app.command("sanitize")
def sanitize_command(
    html_file: Annotated[Path, _existing_file("HTML file to clean")],
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write cleaned HTML here (default: stdout)"),
    ] = None,
) -> None:
    """Strip Office/Docs metadata, empty spans, comments and extra whitespace."""
    html = _read_html(html_file)
    result = sanitize(html)

    if output is None:
        typer.echo(result.html)
        return

    before = analyze(html)
    after = analyze(result.html)
    output.write_text(result.html, encoding="utf-8")
    typer.echo(f"✅ Wrote {output}")
    typer.echo(f"🧹 Removed {result.bytes_removed} bytes")
    typer.echo(f"📏 Status: {before.status.value} -> {after.status.value}")


@app.command("compare")
def compare_command(
    html_files: Annotated[
        list[Path],
        typer.Argument(help="Variant HTML files; the file name is the variant id", exists=True),
    ],
    workers: Annotated[
        int, typer.Option("--workers", help="Analyze variants on this many threads")
    ] = 1,
    as_json: Annotated[bool, typer.Option("--json", help="Print the report as JSON")] = False,
) -> None:
    """Analyze several variants and recommend the smallest one under the target."""
    variants = [EmailVariant(id=path.stem, html=_read_html(path)) for path in html_files]
    try:
        report = compare_variants(variants, max_workers=workers)
    except ValueError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc

    if as_json:
        typer.echo(json.dumps(report.to_dict(), ensure_ascii=False, indent=2))
    else:
        render_batch(report, console)


@app.command("compress")
def compress_command(
    image_file: Annotated[Path, _existing_file("Image to compress")],
    output: Annotated[Path, typer.Option("--output", "-o", help="Where to write the result")],
    width: Annotated[
        int, typer.Option("--width", help="Maximum output width in pixels")
    ] = STANDARD_WIDTH,
    max_bytes: Annotated[
        int, typer.Option("--max-bytes", help="Byte ceiling for the output")
    ] = MAX_SIZE_BYTES,
    image_format: Annotated[
        str, typer.Option("--format", help="Output format: 'jpeg', 'webp' or 'png'")
    ] = "jpeg",
    quality: Annotated[int, typer.Option("--quality", help="Starting quality")] = DEFAULT_QUALITY,
    min_quality: Annotated[
        int, typer.Option("--min-quality", help="Lowest quality to try")
    ] = DEFAULT_MIN_QUALITY,
    step: Annotated[
        int, typer.Option("--step", help="Quality decrement per attempt")
    ] = DEFAULT_QUALITY_STEP,
    keep_metadata: Annotated[
        bool,
        typer.Option("--keep-metadata/--strip-metadata", help="Keep EXIF and ICC data"),
    ] = False,
) -> None:
    """Resize and re-encode an image until it fits under the byte ceiling."""
    try:
        config = CompressionConfig.from_cli(
            width=width,
            max_bytes=max_bytes,
            image_format=image_format,
            quality=quality,
            min_quality=min_quality,
            step=step,
            keep_metadata=keep_metadata,
        )
    except ValueError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc

    result = compress_image(image_file.read_bytes(), config)
    render_compression(result, console)
    if not result.success:
        raise typer.Exit(1)
    output.write_bytes(result.data)
    typer.echo(f"✅ Wrote {output}")


@app.command()
def limits() -> None:
    """Show the clipping thresholds."""
    render_limits(console)


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"mailfit version {__version__}")


def version_callback(value: bool) -> None:
    """Version callback for --version flag."""
    if value:
        typer.echo(f"mailfit version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", help="Enable debug logging")] = False,
) -> None:
    """
    mailfit - keep marketing emails under clipping and image size budgets.

    For detailed usage, run: mailfit <command> --help
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )


if __name__ == "__main__":  # pragma: no cover - executed only via `python -m`
    app()
