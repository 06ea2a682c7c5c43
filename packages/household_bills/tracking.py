"""Tracking identifiers for bill splits.

Format: ``YYYY-MonthName-Kind`` (e.g. ``2025-July-Electricity``). The id goes
into payment-request notes so incoming payments can be matched back to the
bill they settle.
"""

from __future__ import annotations

import calendar
import re
from typing import NamedTuple

_MONTHS = tuple(calendar.month_name)[1:]
_TRACKING_RE = re.compile(
    r"\b(\d{4})-(" + "|".join(_MONTHS) + r")-([A-Za-z0-9]+)\b",
    re.IGNORECASE,
)


class TrackingId(NamedTuple):
    year: int
    month: int
    kind: str


def _kind_token(kind: str) -> str:
    words = [w for w in re.split(r"[^A-Za-z0-9]+", kind) if w]
    if not words:
        raise ValueError(f"tracking kind has no usable characters: {kind!r}")
    return "".join(w[:1].upper() + w[1:] for w in words)


def generate_tracking_id(month: int, year: int, kind: str) -> str:
    if not 1 <= month <= 12:
        raise ValueError(f"month out of range: {month}")
    return f"{year:04d}-{_MONTHS[month - 1]}-{_kind_token(kind)}"


def extract_tracking_id(text: str | None) -> str | None:
    """Return the first tracking id found in free text, or ``None``."""

    if not text:
        return None
    m = _TRACKING_RE.search(text)
    return m.group(0) if m else None


def parse_tracking_id(tracking_id: str | None) -> TrackingId | None:
    if not tracking_id:
        return None
    m = _TRACKING_RE.fullmatch(tracking_id.strip())
    if not m:
        return None
    month_lookup = {name.lower(): i for i, name in enumerate(_MONTHS, start=1)}
    return TrackingId(
        year=int(m.group(1)),
        month=month_lookup[m.group(2).lower()],
        kind=m.group(3).lower(),
    )


__all__ = ["TrackingId", "generate_tracking_id", "extract_tracking_id", "parse_tracking_id"]
