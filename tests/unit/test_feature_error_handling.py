"""Tests for centralized decision logging and error policies."""

from __future__ import annotations

import logging
from collections.abc import Callable

import pytest

from mailfit.analysis import analyzer
from mailfit.analysis.analyzer import analyze
from mailfit.errors import ImageDecodeError, InvalidDataUrlError, MailfitError
from mailfit.feature_logger import (
    log_compression_config,
    log_error_policy,
    log_feature_decision,
)
from mailfit.images.compressor import compress_image
from mailfit.model.compression import CompressionConfig, ImageFormat


class TestFeatureLogger:
    """Test the centralized feature logging utilities."""

    def test_log_compression_config(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test compression configuration logging."""
        config = CompressionConfig(output_format=ImageFormat.WEBP, quality_step=10)

        with caplog.at_level(logging.DEBUG):
            log_compression_config(config)

        assert "Compression configuration:" in caplog.text
        assert "Output format: webp" in caplog.text
        assert "Target width: 600 px" in caplog.text
        assert "Quality search: 85 -> 40 (step 10, at most 6 attempts)" in caplog.text
        assert "Strip metadata: yes" in caplog.text

    def test_log_feature_decision(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO):
            log_feature_decision("Batch", "recommended", {"id": "b"})
            log_feature_decision("Compression", "kept source bytes")

        assert "Batch: recommended (id=b)" in caplog.text
        assert "Compression: kept source bytes" in caplog.text

    def test_log_error_policy(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            log_error_policy("Analysis", "analysis_failed", "safe_verdict", "boom")
            log_error_policy("Compression", "decode_failed", "failed_result")

        assert "Analysis error policy: analysis_failed -> safe_verdict (boom)" in caplog.text
        assert "Compression error policy: decode_failed -> failed_result" in caplog.text


class TestErrorPolicies:
    def test_analysis_failure_is_logged(
        self, caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def boom(html: str) -> None:
            raise RuntimeError("bad scan")

        monkeypatch.setattr(analyzer, "classify_source", boom)
        with caplog.at_level(logging.WARNING):
            verdict = analyze("<p>x</p>")

        assert not verdict.success
        assert "Size analysis failed" in caplog.text
        assert "analysis_failed -> safe_verdict (bad scan)" in caplog.text

    def test_decode_failure_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            result = compress_image(b"junk")

        assert not result.success
        assert "decode_failed -> failed_result" in caplog.text

    def test_unmet_ceiling_is_logged(
        self, caplog: pytest.LogCaptureFixture, noise_image: Callable[..., bytes]
    ) -> None:
        config = CompressionConfig(max_size_bytes=500, min_quality=75)
        with caplog.at_level(logging.WARNING):
            result = compress_image(noise_image(200, 200), config)

        assert result.warning is not None
        assert "Could not compress below 500 bytes" in caplog.text


class TestCustomExceptions:
    def test_image_decode_error(self) -> None:
        cause = OSError("truncated")
        error = ImageDecodeError(12, cause)

        assert isinstance(error, MailfitError)
        assert error.size_bytes == 12
        assert error.cause is cause
        assert str(error) == "Failed to decode image (12 bytes): truncated"

    def test_image_decode_error_without_cause(self) -> None:
        assert str(ImageDecodeError(0)) == "Failed to decode image (0 bytes)"

    def test_invalid_data_url_error(self) -> None:
        error = InvalidDataUrlError("missing payload")
        assert error.reason == "missing payload"
        assert str(error) == "Invalid data URL: missing payload"
