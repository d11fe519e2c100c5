"""mailfit: keep marketing emails under clipping and image size budgets."""

from mailfit.analysis.analyzer import (
    AnalysisOptions,
    analyze,
    compare_variants,
    quick_clip_check,
    status_for,
    validate_for_deployment,
)
from mailfit.analysis.envelope import estimate_envelope_overhead
from mailfit.images.compressor import (
    analyze_image,
    compress_data_url,
    compress_image,
    needs_optimization,
    optimization_recommendation,
)
from mailfit.measure import format_file_size, size_of
from mailfit.model.compression import CompressionConfig, CompressionResult, ImageFormat
from mailfit.model.verdict import EmailVariant, SizeStatus, SizeVerdict
from mailfit.transform.sanitize import SanitizeResult, sanitize

__version__ = "0.1.0"

__all__ = [
    "AnalysisOptions",
    "CompressionConfig",
    "CompressionResult",
    "EmailVariant",
    "ImageFormat",
    "SanitizeResult",
    "SizeStatus",
    "SizeVerdict",
    "analyze",
    "analyze_image",
    "compare_variants",
    "compress_data_url",
    "compress_image",
    "estimate_envelope_overhead",
    "format_file_size",
    "needs_optimization",
    "optimization_recommendation",
    "quick_clip_check",
    "sanitize",
    "size_of",
    "status_for",
    "validate_for_deployment",
    "__version__",
]
