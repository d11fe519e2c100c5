"""Header image compression under a fixed byte ceiling.

The image is decoded once, resized once to the template width (never
upscaled), then re-encoded with decreasing quality until it fits. The search
is bounded by ``CompressionConfig.max_attempts`` so it always terminates; an
unmet ceiling yields a best-effort image with a warning rather than an error.
Only undecodable input produces ``success=False``.
"""

from __future__ import annotations

import io
import logging
import time
from typing import Any

from PIL import Image, ImageOps, UnidentifiedImageError

from mailfit.errors import ImageDecodeError, InvalidDataUrlError
from mailfit.feature_logger import log_compression_config, log_error_policy, log_feature_decision
from mailfit.images.data_url import parse_data_url
from mailfit.measure import round_half_up
from mailfit.model.compression import (
    CompressionConfig,
    CompressionResult,
    ImageAnalysis,
    ImageDimensions,
    ImageFormat,
    OptimizationRecommendation,
)
from mailfit.model.limits import MAX_SIZE_BYTES, MAX_WIDTH, TARGET_SIZE_BYTES, WIDE_WIDTH

logger = logging.getLogger(__name__)

_JPEG_BACKGROUND = (255, 255, 255)
_COPIED_METADATA_KEYS = ("exif", "icc_profile")
_METADATA_KEYS = (*_COPIED_METADATA_KEYS, "xmp")
# Typical output/input ratios used for the pre-compression estimate
_PNG_ESTIMATE_RATIO = 0.15
_DEFAULT_ESTIMATE_RATIO = 0.5


def _decode(data: bytes) -> Image.Image:
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as exc:
        raise ImageDecodeError(len(data), exc) from exc
    return image


def _has_alpha(image: Image.Image) -> bool:
    return image.mode in ("RGBA", "LA", "PA") or (
        image.mode == "P" and "transparency" in image.info
    )


def _prepare(image: Image.Image, output_format: ImageFormat) -> Image.Image:
    """Convert to a mode the target encoder accepts."""
    if output_format is ImageFormat.JPEG:
        if _has_alpha(image):
            rgba = image.convert("RGBA")
            background = Image.new("RGB", rgba.size, _JPEG_BACKGROUND)
            background.paste(rgba, mask=rgba.getchannel("A"))
            return background
        if image.mode not in ("RGB", "L"):
            return image.convert("RGB")
        return image
    if _has_alpha(image):
        return image if image.mode == "RGBA" else image.convert("RGBA")
    return image if image.mode == "RGB" else image.convert("RGB")


def _png_colors(quality: int) -> int:
    return max(2, min(256, round(256 * quality / 100)))


def _encode(
    image: Image.Image,
    output_format: ImageFormat,
    quality: int,
    metadata: dict[str, Any],
) -> bytes:
    buffer = io.BytesIO()
    pil_format = output_format.pil_format
    if output_format is ImageFormat.JPEG:
        image.save(buffer, pil_format, quality=quality, optimize=True, subsampling=2, **metadata)
    elif output_format is ImageFormat.WEBP:
        image.save(buffer, pil_format, quality=quality, method=6, **metadata)
    else:
        palette = image.quantize(colors=_png_colors(quality), method=Image.Quantize.FASTOCTREE)
        palette.save(buffer, pil_format, optimize=True, **metadata)
    return buffer.getvalue()


def _target_dimensions(width: int, height: int, target_width: int) -> ImageDimensions:
    new_width = min(width, target_width)
    new_height = max(1, round_half_up(new_width * height / width)) if width else 0
    return ImageDimensions(width=new_width, height=new_height)


def _failed_result(
    original_size: int, config: CompressionConfig, started: float, message: str
) -> CompressionResult:
    return CompressionResult(
        success=False,
        data=b"",
        mime_type="",
        original_size_bytes=original_size,
        final_size_bytes=0,
        compression_ratio=0.0,
        percent_reduction=0.0,
        quality_used=0,
        format_used=config.output_format,
        dimensions=ImageDimensions(width=0, height=0),
        processing_time_ms=int((time.perf_counter() - started) * 1000),
        error=message,
    )


def compress_image(data: bytes, config: CompressionConfig | None = None) -> CompressionResult:
    """Resize and re-encode ``data`` until it fits ``config.max_size_bytes``.

    Args:
        data: Encoded source image (PNG, JPEG, WebP, anything Pillow reads)
        config: Compression settings; defaults to a 600px JPEG under 100KB

    Returns:
        ``CompressionResult``; ``success`` is False only for undecodable input
    """
    config = config or CompressionConfig()
    started = time.perf_counter()
    original_size = len(data)
    log_compression_config(config)

    try:
        source = _decode(data)
    except ImageDecodeError as exc:
        log_error_policy("Compression", "decode_failed", "failed_result", str(exc))
        return _failed_result(original_size, config, started, str(exc))

    source_format = (source.format or "").lower()
    metadata: dict[str, Any] = {}
    if config.strip_metadata:
        # Bake EXIF orientation into the pixels before the tag is dropped
        image = ImageOps.exif_transpose(source)
        # Explicit empty values; some encoders fall back to image.info otherwise
        metadata["exif"] = b""
        metadata["icc_profile"] = None
    else:
        image = source
        for key in _COPIED_METADATA_KEYS:
            value = source.info.get(key)
            if value:
                metadata[key] = value

    target = _target_dimensions(image.width, image.height, config.target_width)
    if (target.width, target.height) != image.size:
        image = image.resize((target.width, target.height), Image.Resampling.LANCZOS)
    prepared = _prepare(image, config.output_format)

    quality = config.quality
    attempts = 0
    while True:
        encoded = _encode(prepared, config.output_format, quality, metadata)
        attempts += 1
        logger.debug("Attempt %d: quality %d -> %d bytes", attempts, quality, len(encoded))
        if (
            len(encoded) > config.max_size_bytes
            and quality > config.min_quality
            and attempts < config.max_attempts
        ):
            quality = max(config.min_quality, quality - config.quality_step)
            continue
        break

    # Re-encoding an already compact file in the same format can grow it
    unchanged_geometry = (target.width, target.height) == source.size
    carries_metadata = any(source.info.get(key) for key in _METADATA_KEYS)
    if (
        source_format == config.output_format.value
        and unchanged_geometry
        and not (config.strip_metadata and carries_metadata)
        and len(encoded) > original_size
    ):
        log_feature_decision(
            "Compression", "kept source bytes", {"encoded": len(encoded), "source": original_size}
        )
        encoded = data

    final_size = len(encoded)
    warning: str | None = None
    if final_size > config.max_size_bytes:
        warning = (
            f"Could not compress below {config.max_size_bytes} bytes. "
            f"Final size: {final_size} bytes at quality {quality}"
        )
        logger.warning("%s", warning)
    else:
        log_feature_decision(
            "Compression",
            "ceiling met",
            {"bytes": final_size, "quality": quality, "attempts": attempts},
        )

    return CompressionResult(
        success=True,
        data=encoded,
        mime_type=config.output_format.mime_type,
        original_size_bytes=original_size,
        final_size_bytes=final_size,
        compression_ratio=round(original_size / final_size, 2) if final_size else 0.0,
        percent_reduction=(
            round((original_size - final_size) / original_size * 100, 1) if original_size else 0.0
        ),
        quality_used=quality,
        format_used=config.output_format,
        dimensions=target,
        processing_time_ms=int((time.perf_counter() - started) * 1000),
        attempts=attempts,
        warning=warning,
    )


def compress_data_url(data_url: str, config: CompressionConfig | None = None) -> CompressionResult:
    """Compress an image given as a base64 data URL."""
    config = config or CompressionConfig()
    started = time.perf_counter()
    try:
        _, data = parse_data_url(data_url)
    except InvalidDataUrlError as exc:
        log_error_policy("Compression", "invalid_data_url", "failed_result", str(exc))
        return _failed_result(0, config, started, str(exc))
    return compress_image(data, config)


def analyze_image(data: bytes) -> ImageAnalysis:
    """Inspect an image without re-encoding it.

    Raises:
        ImageDecodeError: If the bytes are not a readable image
    """
    image = _decode(data)
    width, height = image.size
    size_bytes = len(data)
    return ImageAnalysis(
        width=width,
        height=height,
        format=(image.format or "unknown").lower(),
        size_bytes=size_bytes,
        needs_optimization=size_bytes > TARGET_SIZE_BYTES or width > MAX_WIDTH,
        # Generated header art is photographic, JPEG wins regardless of source
        recommended_format=ImageFormat.JPEG,
        recommended_width=min(width, WIDE_WIDTH),
    )


def needs_optimization(data: bytes) -> bool:
    """True when the image is over the target size or too wide, or unreadable."""
    try:
        return analyze_image(data).needs_optimization
    except ImageDecodeError:
        return True


def optimization_recommendation(data: bytes) -> OptimizationRecommendation:
    try:
        analysis = analyze_image(data)
    except ImageDecodeError as exc:
        return OptimizationRecommendation(
            needs_optimization=True,
            current_size_kb=0.0,
            estimated_size_kb=0.0,
            recommendation=f"Unable to analyze image: {exc}",
        )

    current_kb = round(analysis.size_bytes / 1024, 1)
    ratio = _PNG_ESTIMATE_RATIO if analysis.format == "png" else _DEFAULT_ESTIMATE_RATIO
    estimated_kb = round(analysis.size_bytes * ratio / 1024, 1)

    if not analysis.needs_optimization:
        text = "Image is already optimized for email delivery."
    elif analysis.size_bytes > MAX_SIZE_BYTES * 10:
        text = (
            f"Image is {current_kb}KB. Will convert to "
            f"{analysis.recommended_format.value.upper()} and resize to "
            f"{analysis.recommended_width}px width. Estimated final size: ~{estimated_kb}KB."
        )
    else:
        text = f"Image is {current_kb}KB. Light optimization recommended to ensure email deliverability."

    return OptimizationRecommendation(
        needs_optimization=analysis.needs_optimization,
        current_size_kb=current_kb,
        estimated_size_kb=estimated_kb,
        recommendation=text,
    )


__all__ = [
    "compress_image",
    "compress_data_url",
    "analyze_image",
    "needs_optimization",
    "optimization_recommendation",
]
