"""
Enumeration codecs — strategy, method and status to and from text.

Decoding is case-insensitive and accepts the canonical spelling plus a
legacy alias with ``_`` in place of ``-``. Encoding always produces the
canonical spelling.
"""

from __future__ import annotations

from rebootmgr.core.codecs.result import Decoded, DecodeOutcome
from rebootmgr.core.models.enums import RebootMethod, RebootStatus, RebootStrategy

# ── Strategy ────────────────────────────────────────────────────────

DEFAULT_STRATEGY = RebootStrategy.BEST_EFFORT

_STRATEGY_NAMES: dict[RebootStrategy, str] = {
    RebootStrategy.BEST_EFFORT: "best-effort",
    RebootStrategy.INSTANTLY: "instantly",
    RebootStrategy.MAINT_WINDOW: "maint-window",
    RebootStrategy.OFF: "off",
}

_STRATEGY_ALIASES: dict[str, RebootStrategy] = {
    "best_effort": RebootStrategy.BEST_EFFORT,
    "maint_window": RebootStrategy.MAINT_WINDOW,
}


def encode_strategy(strategy: RebootStrategy) -> str:
    """Canonical text for a strategy.

    Raises:
        ValueError: For ``RebootStrategy.UNKNOWN``, which has no text form.
    """
    try:
        return _STRATEGY_NAMES[strategy]
    except KeyError:
        raise ValueError(f"strategy {strategy!r} has no text form") from None


def decode_strategy(text: str | None) -> Decoded[RebootStrategy]:
    """Parse a strategy name, falling back to best-effort."""
    return _decode(text, _STRATEGY_NAMES, _STRATEGY_ALIASES, DEFAULT_STRATEGY)


def strategy_names() -> list[str]:
    """Canonical names of every settable strategy."""
    return list(_STRATEGY_NAMES.values())


# ── Method ──────────────────────────────────────────────────────────

DEFAULT_METHOD = RebootMethod.HARD

_METHOD_NAMES: dict[RebootMethod, str] = {
    RebootMethod.HARD: "reboot",
    RebootMethod.SOFT: "soft-reboot",
}

_METHOD_ALIASES: dict[str, RebootMethod] = {
    "hard": RebootMethod.HARD,
    "soft": RebootMethod.SOFT,
    "soft_reboot": RebootMethod.SOFT,
}


def encode_method(method: RebootMethod) -> str:
    """Canonical text for a reboot method.

    Raises:
        ValueError: For ``RebootMethod.UNKNOWN``.
    """
    try:
        return _METHOD_NAMES[method]
    except KeyError:
        raise ValueError(f"method {method!r} has no text form") from None


def decode_method(text: str | None) -> Decoded[RebootMethod]:
    return _decode(text, _METHOD_NAMES, _METHOD_ALIASES, DEFAULT_METHOD)


def describe_method(method: RebootMethod | None) -> str:
    """Operator wording for a method; never fails."""
    if method is None or method not in _METHOD_NAMES:
        return "unknown reboot"
    return _METHOD_NAMES[method]


# ── Status ──────────────────────────────────────────────────────────

DEFAULT_STATUS = RebootStatus.NOT_REQUESTED

_STATUS_NAMES: dict[RebootStatus, str] = {
    RebootStatus.NOT_REQUESTED: "not-requested",
    RebootStatus.REQUESTED: "requested",
    RebootStatus.WAITING_WINDOW: "waiting-window",
}

_STATUS_ALIASES: dict[str, RebootStatus] = {
    "not_requested": RebootStatus.NOT_REQUESTED,
    "waiting_window": RebootStatus.WAITING_WINDOW,
}


def encode_status(status: RebootStatus) -> str:
    return _STATUS_NAMES[status]


def decode_status(text: str | None) -> Decoded[RebootStatus]:
    return _decode(text, _STATUS_NAMES, _STATUS_ALIASES, DEFAULT_STATUS)


def describe_status(status: RebootStatus, method: RebootMethod | None = None) -> str:
    """Operator text for a status.

    The wording of a pending request depends on whether it is a soft
    reboot, so the text is a function of both values.
    """
    soft = method == RebootMethod.SOFT
    if status == RebootStatus.NOT_REQUESTED:
        return "Reboot not requested"
    if status == RebootStatus.REQUESTED:
        return "Soft-reboot requested" if soft else "Reboot requested"
    if status == RebootStatus.WAITING_WINDOW:
        prefix = "Soft-reboot requested" if soft else "Reboot requested"
        return f"{prefix}, waiting for maintenance window"
    raise ValueError(f"unknown reboot status {status!r}")


# ── Shared ──────────────────────────────────────────────────────────


def _decode(text, names, aliases, default):  # type: ignore[no-untyped-def]
    if text is None:
        return Decoded(default, DecodeOutcome.ABSENT)

    key = text.strip().lower()
    for member, name in names.items():
        if key == name:
            return Decoded(member, DecodeOutcome.OK)
    if key in aliases:
        return Decoded(aliases[key], DecodeOutcome.OK)

    return Decoded(default, DecodeOutcome.INVALID)
