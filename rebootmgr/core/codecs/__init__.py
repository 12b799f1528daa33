"""
Codecs — canonical enumerations and durations to and from text.

    from rebootmgr.core.codecs import decode_strategy, encode_duration
"""

from rebootmgr.core.codecs.duration import decode_duration, encode_duration, is_whole_minutes
from rebootmgr.core.codecs.enums import (
    DEFAULT_METHOD,
    DEFAULT_STATUS,
    DEFAULT_STRATEGY,
    decode_method,
    decode_status,
    decode_strategy,
    describe_method,
    describe_status,
    encode_method,
    encode_status,
    encode_strategy,
    strategy_names,
)
from rebootmgr.core.codecs.result import Decoded, DecodeOutcome

__all__ = [
    "DEFAULT_METHOD",
    "DEFAULT_STATUS",
    "DEFAULT_STRATEGY",
    "DecodeOutcome",
    "Decoded",
    "decode_duration",
    "decode_method",
    "decode_status",
    "decode_strategy",
    "describe_method",
    "describe_status",
    "encode_duration",
    "encode_method",
    "encode_status",
    "encode_strategy",
    "is_whole_minutes",
    "strategy_names",
]
