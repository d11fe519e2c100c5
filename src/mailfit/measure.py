from __future__ import annotations

import math


def size_of(text: str) -> int:
    """Return the UTF-8 encoded length of ``text`` in bytes.

    Character count is never a substitute: a single emoji is four bytes.
    """

    return len(text.encode("utf-8"))


def size_in_kb(num_bytes: int) -> float:
    return round(num_bytes / 1024, 2)


def format_file_size(num_bytes: int) -> str:
    """Human-readable size: bytes below 1KB, KB below 1MB, MB above."""
    if num_bytes < 1024:
        return f"{num_bytes} B"
    if num_bytes < 1024 * 1024:
        return f"{num_bytes / 1024:.1f} KB"
    return f"{num_bytes / (1024 * 1024):.2f} MB"


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3)."""
    return math.floor(value + 0.5)
