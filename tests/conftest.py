import io
import logging
import os
import sys
from collections.abc import Callable
from pathlib import Path

import pytest
from PIL import Image

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))


@pytest.fixture
def isolate_logging():
    """Isolate logging configuration between tests.

    The CLI callback calls ``logging.basicConfig(force=True)``; this keeps that
    from leaking into other tests.
    """
    original_handlers = logging.root.handlers[:]
    original_level = logging.root.level

    logging.root.handlers.clear()
    logging.root.addHandler(logging.NullHandler())

    yield

    logging.root.handlers.clear()
    logging.root.handlers.extend(original_handlers)
    logging.root.setLevel(original_level)


def _encode(image: Image.Image, fmt: str, **params: object) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, fmt, **params)
    return buffer.getvalue()


@pytest.fixture
def gradient_image() -> Callable[..., bytes]:
    """Factory for smooth, highly compressible images."""

    def _make(width: int = 1200, height: int = 675, fmt: str = "PNG", mode: str = "RGB", **params: object) -> bytes:
        image = Image.linear_gradient("L").resize((width, height)).convert(mode)
        return _encode(image, fmt, **params)

    return _make


@pytest.fixture
def noise_image() -> Callable[..., bytes]:
    """Factory for random-noise images that resist compression."""

    def _make(width: int = 800, height: int = 800, fmt: str = "PNG", **params: object) -> bytes:
        image = Image.frombytes("RGB", (width, height), os.urandom(width * height * 3))
        return _encode(image, fmt, **params)

    return _make


@pytest.fixture
def office_html() -> str:
    return (
        '<html xmlns:o="urn:schemas-microsoft-com:office:office">'
        "<!--[if gte mso 9]><xml><w:WordDocument><w:View>Normal</w:View></w:WordDocument></xml><![endif]-->"
        '<p class="MsoNormal" style="mso-line-height-rule:exactly;color:#333333">'
        "Spring sale starts today<o:p></o:p></p>"
        "</html>"
    )


@pytest.fixture
def docs_html() -> str:
    return (
        '<b id="docs-internal-guid-1a2b3c"><p dir="ltr" class="c3">'
        '<span class="c12" data-smartmail="gmail_signature">Hello</span></p></b>'
    )
