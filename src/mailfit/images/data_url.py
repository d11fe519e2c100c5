from __future__ import annotations

import base64
import binascii
import re

from mailfit.errors import InvalidDataUrlError

_DATA_URL_RE = re.compile(r"^data:([^;,]+);base64,(.+)$", re.DOTALL)


def parse_data_url(data_url: str) -> tuple[str, bytes]:
    """Split a base64 ``data:`` URL into its MIME type and decoded bytes.

    Raises:
        InvalidDataUrlError: If the URL is not base64 encoded or the payload
            does not decode
    """

    match = _DATA_URL_RE.match(data_url.strip())
    if not match:
        raise InvalidDataUrlError("expected 'data:<mime>;base64,<payload>'")
    mime_type, payload = match.group(1), match.group(2)
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidDataUrlError(f"payload is not valid base64 ({exc})") from exc
    return mime_type, data


def to_data_url(data: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"
