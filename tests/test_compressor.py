from __future__ import annotations

import io
from collections.abc import Callable

import pytest
from PIL import Image, ImageCms

from mailfit.errors import ImageDecodeError
from mailfit.images.compressor import (
    analyze_image,
    compress_data_url,
    compress_image,
    needs_optimization,
    optimization_recommendation,
)
from mailfit.images.data_url import to_data_url
from mailfit.model.compression import CompressionConfig, ImageFormat

JPEG_MAGIC = b"\xff\xd8"
PNG_MAGIC = b"\x89PNG\r\n\x1a\n"
CAMERA_MAKE_TAG = 0x010F
SRGB_PROFILE = ImageCms.ImageCmsProfile(ImageCms.createProfile("sRGB")).tobytes()


def _open(data: bytes) -> Image.Image:
    image = Image.open(io.BytesIO(data))
    image.load()
    return image


class TestCompressImage:
    def test_defaults_resize_to_template_width(self, gradient_image: Callable[..., bytes]) -> None:
        source = gradient_image()
        result = compress_image(source)

        assert result.success
        assert result.format_used is ImageFormat.JPEG
        assert result.mime_type == "image/jpeg"
        assert result.data.startswith(JPEG_MAGIC)
        assert (result.dimensions.width, result.dimensions.height) == (600, 338)
        assert _open(result.data).size == (600, 338)
        assert result.final_size_bytes == len(result.data) <= 102_400
        assert result.quality_used == 85
        assert result.attempts == 1
        assert result.warning is None
        assert result.original_size_bytes == len(source)

    def test_unreachable_ceiling_is_best_effort(self, noise_image: Callable[..., bytes]) -> None:
        result = compress_image(noise_image(), CompressionConfig(max_size_bytes=1000))

        assert result.success
        assert result.quality_used == 40
        assert result.attempts == 10
        assert result.final_size_bytes > 1000
        assert result.warning is not None
        assert result.warning.startswith("Could not compress below 1000 bytes")
        assert "at quality 40" in result.warning

    def test_attempts_bounded_by_step(self, noise_image: Callable[..., bytes]) -> None:
        config = CompressionConfig(max_size_bytes=1000, quality=85, min_quality=42, quality_step=10)
        result = compress_image(noise_image(400, 400), config)

        assert result.attempts == config.max_attempts == 6
        assert result.quality_used == 42

    def test_never_upscales(self, gradient_image: Callable[..., bytes]) -> None:
        result = compress_image(gradient_image(300, 200))
        assert (result.dimensions.width, result.dimensions.height) == (300, 200)
        assert _open(result.data).size == (300, 200)

    def test_custom_width(self, gradient_image: Callable[..., bytes]) -> None:
        result = compress_image(gradient_image(1400, 700), CompressionConfig(target_width=700))
        assert (result.dimensions.width, result.dimensions.height) == (700, 350)

    @pytest.mark.parametrize("data", [b"", b"not an image at all"])
    def test_undecodable_input_fails(self, data: bytes) -> None:
        result = compress_image(data)
        assert result.success is False
        assert result.data == b""
        assert result.error is not None
        assert result.error.startswith("Failed to decode image")
        assert result.original_size_bytes == len(data)

    def test_alpha_flattened_for_jpeg(self, gradient_image: Callable[..., bytes]) -> None:
        result = compress_image(gradient_image(200, 100, mode="RGBA"))
        assert result.success
        assert _open(result.data).mode == "RGB"

    def test_webp_output(self, gradient_image: Callable[..., bytes]) -> None:
        result = compress_image(gradient_image(), CompressionConfig(output_format=ImageFormat.WEBP))
        assert result.success
        assert result.mime_type == "image/webp"
        assert result.data[:4] == b"RIFF"
        assert result.data[8:12] == b"WEBP"

    def test_png_output(self, gradient_image: Callable[..., bytes]) -> None:
        result = compress_image(
            gradient_image(mode="RGBA"), CompressionConfig(output_format=ImageFormat.PNG)
        )
        assert result.success
        assert result.data.startswith(PNG_MAGIC)
        assert _open(result.data).size == (600, 338)

    def test_metadata_stripped_by_default(self, gradient_image: Callable[..., bytes]) -> None:
        exif = Image.Exif()
        exif[CAMERA_MAKE_TAG] = "TestCam"
        source = gradient_image(800, 400, fmt="JPEG", exif=exif.tobytes())
        assert _open(source).getexif().get(CAMERA_MAKE_TAG) == "TestCam"

        stripped = compress_image(source)
        assert CAMERA_MAKE_TAG not in _open(stripped.data).getexif()

        kept = compress_image(source, CompressionConfig(strip_metadata=False))
        assert _open(kept.data).getexif().get(CAMERA_MAKE_TAG) == "TestCam"

    def test_source_kept_when_reencode_would_grow(self, noise_image: Callable[..., bytes]) -> None:
        source = noise_image(300, 300, fmt="JPEG", quality=30)
        result = compress_image(source)

        assert result.success
        assert result.final_size_bytes <= result.original_size_bytes
        assert result.data == source
        assert result.percent_reduction == 0.0
        assert result.compression_ratio == 1.0

    def test_stripping_wins_over_keeping_source_bytes(
        self, noise_image: Callable[..., bytes]
    ) -> None:
        exif = Image.Exif()
        exif[CAMERA_MAKE_TAG] = "TestCam"
        source = noise_image(300, 300, fmt="JPEG", quality=30, exif=exif.tobytes())

        stripped = compress_image(source)
        assert stripped.data != source
        assert CAMERA_MAKE_TAG not in _open(stripped.data).getexif()

        kept = compress_image(source, CompressionConfig(strip_metadata=False))
        assert kept.data == source
        assert _open(kept.data).getexif().get(CAMERA_MAKE_TAG) == "TestCam"

    @pytest.mark.parametrize("width", [1200, 300])
    def test_png_icc_profile_stripped(
        self, gradient_image: Callable[..., bytes], width: int
    ) -> None:
        source = gradient_image(width, 200, fmt="PNG", icc_profile=SRGB_PROFILE)
        assert _open(source).info.get("icc_profile")
        config = CompressionConfig(output_format=ImageFormat.PNG)

        stripped = compress_image(source, config)
        assert stripped.data != source
        assert "icc_profile" not in _open(stripped.data).info

    def test_png_icc_profile_kept_on_request(self, gradient_image: Callable[..., bytes]) -> None:
        source = gradient_image(1200, 200, fmt="PNG", icc_profile=SRGB_PROFILE)
        config = CompressionConfig(output_format=ImageFormat.PNG, strip_metadata=False)

        result = compress_image(source, config)
        assert _open(result.data).info.get("icc_profile") == SRGB_PROFILE

    def test_height_rounds_half_up(self, gradient_image: Callable[..., bytes]) -> None:
        # 600 * 673 / 1200 = 336.5
        result = compress_image(gradient_image(1200, 673))
        assert (result.dimensions.width, result.dimensions.height) == (600, 337)
        assert _open(result.data).size == (600, 337)

    @pytest.mark.parametrize("output_format", list(ImageFormat))
    def test_encoded_with_matching_codec(
        self, gradient_image: Callable[..., bytes], output_format: ImageFormat
    ) -> None:
        result = compress_image(gradient_image(), CompressionConfig(output_format=output_format))
        assert _open(result.data).format == output_format.pil_format

    def test_to_dict(self, gradient_image: Callable[..., bytes]) -> None:
        data = compress_image(gradient_image(300, 200)).to_dict()
        assert data["success"] is True
        assert data["format_used"] == "jpeg"
        assert data["dimensions"] == {"width": 300, "height": 200}
        assert "data" not in data


class TestCompressDataUrl:
    def test_valid_data_url(self, gradient_image: Callable[..., bytes]) -> None:
        url = to_data_url(gradient_image(), "image/png")
        result = compress_data_url(url)
        assert result.success
        assert result.data_url.startswith("data:image/jpeg;base64,")

    def test_invalid_data_url(self) -> None:
        result = compress_data_url("https://example.com/hero.png")
        assert result.success is False
        assert result.error is not None
        assert result.error.startswith("Invalid data URL")


class TestAnalyzeImage:
    def test_wide_image_needs_optimization(self, gradient_image: Callable[..., bytes]) -> None:
        analysis = analyze_image(gradient_image())
        assert analysis.format == "png"
        assert (analysis.width, analysis.height) == (1200, 675)
        assert analysis.needs_optimization
        assert analysis.recommended_width == 700
        assert analysis.recommended_format is ImageFormat.JPEG

    def test_small_image_is_fine(self, gradient_image: Callable[..., bytes]) -> None:
        data = gradient_image(300, 200)
        analysis = analyze_image(data)
        assert not analysis.needs_optimization
        assert analysis.recommended_width == 300
        assert not needs_optimization(data)

    def test_large_file_needs_optimization(self, noise_image: Callable[..., bytes]) -> None:
        # 400x400 random RGB cannot compress below the 80KB target
        assert needs_optimization(noise_image(400, 400))

    def test_undecodable_raises(self) -> None:
        with pytest.raises(ImageDecodeError) as exc_info:
            analyze_image(b"junk")
        assert exc_info.value.size_bytes == 4

    def test_undecodable_needs_optimization(self) -> None:
        assert needs_optimization(b"junk")


class TestRecommendation:
    def test_already_optimized(self, gradient_image: Callable[..., bytes]) -> None:
        recommendation = optimization_recommendation(gradient_image(300, 200))
        assert not recommendation.needs_optimization
        assert recommendation.recommendation == "Image is already optimized for email delivery."

    def test_light_optimization(self, gradient_image: Callable[..., bytes]) -> None:
        recommendation = optimization_recommendation(gradient_image())
        assert recommendation.needs_optimization
        assert "Light optimization recommended" in recommendation.recommendation

    def test_heavy_optimization(self, noise_image: Callable[..., bytes]) -> None:
        data = noise_image(800, 800)
        recommendation = optimization_recommendation(data)
        assert recommendation.needs_optimization
        assert "Will convert to JPEG and resize to 700px width" in recommendation.recommendation
        assert recommendation.current_size_kb == round(len(data) / 1024, 1)
        assert recommendation.estimated_size_kb == round(len(data) * 0.15 / 1024, 1)

    def test_unreadable(self) -> None:
        recommendation = optimization_recommendation(b"junk")
        assert recommendation.needs_optimization
        assert recommendation.recommendation.startswith("Unable to analyze image")
