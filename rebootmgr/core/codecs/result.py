"""
Decode result shared by all codecs.

Every codec falls back to a documented default when a value cannot be
decoded. The outcome tells callers *why* the default was used, since
"not configured" and "configured wrong" deserve different log levels.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Generic, NamedTuple, TypeVar

T = TypeVar("T")


class DecodeOutcome(StrEnum):
    """How a decoded value was obtained."""

    OK = "ok"
    ABSENT = "absent"  # input was None, default used
    INVALID = "invalid"  # input was empty or unrecognised, default used


class Decoded(NamedTuple, Generic[T]):
    """A decoded value plus the outcome that produced it."""

    value: T
    outcome: DecodeOutcome

    @property
    def ok(self) -> bool:
        return self.outcome is DecodeOutcome.OK
