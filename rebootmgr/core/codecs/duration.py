"""
Duration codec — wall-clock spans to and from their compact text form.

Encoded form is ``HHhMMm`` (``01h30m``). Hours are not wrapped at 24
and seconds are dropped, so only whole-minute spans round-trip;
``is_whole_minutes`` tells the two apart.

Accepted input forms:
    90          bare integer, seconds
    1h30m       any ordered combination of d/h/m/s units (``min`` for m)
    01:30       HH:MM
    01:30:15    HH:MM:SS
    PT1H30M     ISO 8601 duration (days, hours, minutes, seconds)
"""

from __future__ import annotations

import re
from datetime import timedelta

from rebootmgr.core.codecs.result import Decoded, DecodeOutcome
from rebootmgr.core.models.window import DEFAULT_WINDOW_DURATION

_UNITS_RE = re.compile(
    r"""
    ^
    (?:(?P<d>\d+)\s*d\s*)?
    (?:(?P<h>\d+)\s*h\s*)?
    (?:(?P<m>\d+)\s*m(?:in)?\s*)?
    (?:(?P<s>\d+)\s*s)?
    $
    """,
    re.IGNORECASE | re.VERBOSE | re.ASCII,
)

_CLOCK_RE = re.compile(r"^(?P<h>\d+):(?P<m>\d{2})(?::(?P<s>\d{2}))?$", re.ASCII)

_ISO_RE = re.compile(
    r"^P(?:(?P<d>\d+)D)?(?:T(?:(?P<h>\d+)H)?(?:(?P<m>\d+)M)?(?:(?P<s>\d+)S)?)?$",
    re.IGNORECASE | re.ASCII,
)


def encode_duration(duration: timedelta) -> str:
    """Compact text for a duration.

    Raises:
        ValueError: For negative durations.
    """
    total = int(duration.total_seconds())
    if total < 0:
        raise ValueError(f"negative duration {duration!r}")
    hours, rest = divmod(total, 3600)
    return f"{hours:02d}h{rest // 60:02d}m"


def is_whole_minutes(duration: timedelta) -> bool:
    """True if ``duration`` survives ``encode_duration`` unchanged."""
    return duration % timedelta(minutes=1) == timedelta(0)


def decode_duration(text: str | None) -> Decoded[timedelta]:
    """Parse a duration, falling back to one hour."""
    if text is None:
        return Decoded(DEFAULT_WINDOW_DURATION, DecodeOutcome.ABSENT)

    seconds = _parse_seconds(text.strip())
    if seconds is None:
        return Decoded(DEFAULT_WINDOW_DURATION, DecodeOutcome.INVALID)
    try:
        return Decoded(timedelta(seconds=seconds), DecodeOutcome.OK)
    except OverflowError:
        return Decoded(DEFAULT_WINDOW_DURATION, DecodeOutcome.INVALID)


def _parse_seconds(text: str) -> int | None:
    if not text:
        return None

    if text.isascii() and text.isdigit():
        return int(text)

    match = _CLOCK_RE.match(text)
    if match:
        minutes = int(match["m"])
        seconds = int(match["s"] or 0)
        if minutes > 59 or seconds > 59:
            return None
        return int(match["h"]) * 3600 + minutes * 60 + seconds

    match = _UNITS_RE.match(text) or _ISO_RE.match(text)
    if match is None or not any(match.groupdict().values()):
        return None

    parts = {k: int(v) for k, v in match.groupdict().items() if v is not None}
    return (
        parts.get("d", 0) * 86400
        + parts.get("h", 0) * 3600
        + parts.get("m", 0) * 60
        + parts.get("s", 0)
    )
