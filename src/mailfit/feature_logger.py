"""Centralized decision logging for the analysis and compression pipelines.

Keeps informative debug/troubleshooting messages in one place so that the
engine modules only state what happened, not how it is phrased.
"""

from __future__ import annotations

import logging
from typing import Any

from mailfit.model.compression import CompressionConfig

logger = logging.getLogger(__name__)


def log_compression_config(config: CompressionConfig) -> None:
    """Log the compression settings at debug level.

    Args:
        config: Compression configuration about to be applied
    """
    logger.debug("Compression configuration:")
    logger.debug("  Output format: %s", config.output_format.value)
    logger.debug("  Target width: %d px", config.target_width)
    logger.debug("  Size ceiling: %d bytes", config.max_size_bytes)
    logger.debug(
        "  Quality search: %d -> %d (step %d, at most %d attempts)",
        config.quality,
        config.min_quality,
        config.quality_step,
        config.max_attempts,
    )
    logger.debug("  Strip metadata: %s", "yes" if config.strip_metadata else "no")


def log_feature_decision(
    feature: str, decision: str, context: dict[str, Any] | None = None
) -> None:
    """Log a processing decision.

    Args:
        feature: Component making the decision (e.g., "Compression", "Batch")
        decision: The decision made (e.g., "ceiling met", "recommended")
        context: Optional context information
    """
    if context:
        context_str = ", ".join(f"{k}={v}" for k, v in context.items())
        logger.info("%s: %s (%s)", feature, decision, context_str)
    else:
        logger.info("%s: %s", feature, decision)


def log_error_policy(
    feature: str, error_type: str, action: str, details: str | None = None
) -> None:
    """Log how an error was absorbed.

    Args:
        feature: Component encountering the error
        error_type: Kind of error (e.g., "decode_failed", "analysis_failed")
        action: Action taken (e.g., "safe_verdict", "failed_result")
        details: Optional additional details
    """
    if details:
        logger.warning("%s error policy: %s -> %s (%s)", feature, error_type, action, details)
    else:
        logger.warning("%s error policy: %s -> %s", feature, error_type, action)


__all__ = [
    "log_compression_config",
    "log_feature_decision",
    "log_error_policy",
]
