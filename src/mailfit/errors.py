"""Exception types raised by mailfit.

Analysis never raises these to callers; they surface from the image and data
URL helpers, where a malformed input is the only hard failure.
"""

from __future__ import annotations


class MailfitError(Exception):
    """Base class for all mailfit errors."""


class ImageDecodeError(MailfitError):
    """Raised when image bytes cannot be decoded."""

    def __init__(self, size_bytes: int, cause: Exception | None = None) -> None:
        self.size_bytes = size_bytes
        self.cause = cause
        message = f"Failed to decode image ({size_bytes} bytes)"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class InvalidDataUrlError(MailfitError):
    """Raised when a string is not a base64 ``data:`` URL."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid data URL: {reason}")


__all__ = ["MailfitError", "ImageDecodeError", "InvalidDataUrlError"]
