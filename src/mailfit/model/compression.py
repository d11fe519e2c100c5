"""Configuration and result structures for header image compression.

Defaults target a 600px wide email template and a 100KB file ceiling.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from enum import Enum
from typing import Any

from mailfit.model.limits import (
    DEFAULT_MIN_QUALITY,
    DEFAULT_QUALITY,
    DEFAULT_QUALITY_STEP,
    MAX_SIZE_BYTES,
    STANDARD_WIDTH,
)


class ImageFormat(Enum):
    """Output encodings supported for email images."""

    JPEG = "jpeg"
    WEBP = "webp"
    PNG = "png"

    @property
    def mime_type(self) -> str:
        return f"image/{self.value}"

    @property
    def pil_format(self) -> str:
        # Pillow's registered encoder names
        return self.value.upper()


@dataclass(frozen=True)
class CompressionConfig:
    """Settings for the bounded quality search.

    The loop runs at most ``max_attempts`` encodes, lowering quality by
    ``quality_step`` each time until the result fits ``max_size_bytes`` or
    ``min_quality`` is reached.
    """

    target_width: int = STANDARD_WIDTH
    max_size_bytes: int = MAX_SIZE_BYTES
    output_format: ImageFormat = ImageFormat.JPEG
    quality: int = DEFAULT_QUALITY
    min_quality: int = DEFAULT_MIN_QUALITY
    quality_step: int = DEFAULT_QUALITY_STEP
    strip_metadata: bool = True

    def __post_init__(self) -> None:
        if self.target_width < 1:
            raise ValueError(f"target_width must be positive, got {self.target_width}")
        if self.max_size_bytes < 1:
            raise ValueError(f"max_size_bytes must be positive, got {self.max_size_bytes}")
        for name in ("quality", "min_quality"):
            value = getattr(self, name)
            if not 1 <= value <= 100:
                raise ValueError(f"{name} must be between 1 and 100, got {value}")
        if self.min_quality > self.quality:
            raise ValueError(
                f"min_quality ({self.min_quality}) must not exceed quality ({self.quality})"
            )
        if self.quality_step < 1:
            raise ValueError(f"quality_step must be at least 1, got {self.quality_step}")

    @property
    def max_attempts(self) -> int:
        """Upper bound on encode iterations: ceil((quality - min) / step) + 1."""
        span = self.quality - self.min_quality
        return -(-span // self.quality_step) + 1

    @classmethod
    def from_cli(
        cls,
        *,
        width: int = STANDARD_WIDTH,
        max_bytes: int = MAX_SIZE_BYTES,
        image_format: str = "jpeg",
        quality: int = DEFAULT_QUALITY,
        min_quality: int = DEFAULT_MIN_QUALITY,
        step: int = DEFAULT_QUALITY_STEP,
        keep_metadata: bool = False,
    ) -> CompressionConfig:
        """Build a config from CLI option values.

        Raises:
            ValueError: If the format name or any numeric setting is invalid
        """
        try:
            output_format = ImageFormat(image_format.lower())
        except ValueError as exc:
            valid_values = [fmt.value for fmt in ImageFormat]
            raise ValueError(
                f"Invalid image format '{image_format}'. Valid values: {valid_values}"
            ) from exc

        return cls(
            target_width=width,
            max_size_bytes=max_bytes,
            output_format=output_format,
            quality=quality,
            min_quality=min_quality,
            quality_step=step,
            strip_metadata=not keep_metadata,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "target_width": self.target_width,
            "max_size_bytes": self.max_size_bytes,
            "output_format": self.output_format.value,
            "quality": self.quality,
            "min_quality": self.min_quality,
            "quality_step": self.quality_step,
            "strip_metadata": self.strip_metadata,
        }


@dataclass(frozen=True)
class ImageDimensions:
    width: int
    height: int


@dataclass(frozen=True)
class CompressionResult:
    """Outcome of one compression call.

    ``success`` is False only when the input could not be decoded. An unmet
    size ceiling still succeeds and carries ``warning``.
    """

    success: bool
    data: bytes
    mime_type: str
    original_size_bytes: int
    final_size_bytes: int
    compression_ratio: float
    percent_reduction: float
    quality_used: int
    format_used: ImageFormat
    dimensions: ImageDimensions
    processing_time_ms: int
    attempts: int = 0
    warning: str | None = None
    error: str | None = None

    @property
    def base64_data(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    @property
    def data_url(self) -> str:
        if not self.data:
            return ""
        return f"data:{self.mime_type};base64,{self.base64_data}"

    def to_dict(self) -> dict[str, Any]:
        """Serializable view; raw bytes are left out."""
        data: dict[str, Any] = {
            "success": self.success,
            "mime_type": self.mime_type,
            "original_size_bytes": self.original_size_bytes,
            "final_size_bytes": self.final_size_bytes,
            "compression_ratio": self.compression_ratio,
            "percent_reduction": self.percent_reduction,
            "quality_used": self.quality_used,
            "format_used": self.format_used.value,
            "dimensions": {"width": self.dimensions.width, "height": self.dimensions.height},
            "processing_time_ms": self.processing_time_ms,
            "attempts": self.attempts,
        }
        if self.warning is not None:
            data["warning"] = self.warning
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class ImageAnalysis:
    width: int
    height: int
    format: str
    size_bytes: int
    needs_optimization: bool
    recommended_format: ImageFormat
    recommended_width: int


@dataclass(frozen=True)
class OptimizationRecommendation:
    needs_optimization: bool
    current_size_kb: float
    estimated_size_kb: float
    recommendation: str


__all__ = [
    "ImageFormat",
    "CompressionConfig",
    "ImageDimensions",
    "CompressionResult",
    "ImageAnalysis",
    "OptimizationRecommendation",
]
