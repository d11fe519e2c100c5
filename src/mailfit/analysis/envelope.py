from __future__ import annotations

from mailfit.measure import round_half_up, size_of

BASE_HEADER_BYTES = 2048
TRACKING_FOOTER_BYTES = 500
SUBJECT_EXPANSION = 1.3
PREHEADER_EXPANSION = 1.2


def estimate_envelope_overhead(subject: str | None = None, preheader: str | None = None) -> int:
    """Approximate transport bytes added on top of the raw HTML.

    A linear model: fixed headers, encoded subject and preheader, and a
    tracking/footer allowance. It is not a MIME encoder; callers needing the
    exact wire size must measure the real message.
    """

    overhead = float(BASE_HEADER_BYTES)
    if subject:
        overhead += size_of(subject) * SUBJECT_EXPANSION
    if preheader:
        overhead += size_of(preheader) * PREHEADER_EXPANSION
    overhead += TRACKING_FOOTER_BYTES
    return round_half_up(overhead)
