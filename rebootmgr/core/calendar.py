"""
Calendar expressions — syntax check for maintenance window starts.

The expression is opaque to the rest of the package: matching "now"
against it belongs to the scheduler. This module only decides whether
a string is a well-formed recurring calendar expression, in the
systemd ``OnCalendar=`` style::

    03:30
    Mon..Fri 22:00
    Sat,Sun *-*-* 04:00:00
    *-*-01 02:30
    weekly

Callers receive it as a plain callable (``CalendarParser``) so another
engine can be swapped in without touching the resolver or the client.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

CalendarParser = Callable[[str], str]

SHORTCUTS = frozenset({
    "minutely", "hourly", "daily", "weekly", "monthly",
    "quarterly", "semiannually", "yearly", "annually",
})

_WEEKDAYS = {
    "mon": 0, "monday": 0,
    "tue": 1, "tuesday": 1,
    "wed": 2, "wednesday": 2,
    "thu": 3, "thursday": 3,
    "fri": 4, "friday": 4,
    "sat": 5, "saturday": 5,
    "sun": 6, "sunday": 6,
}

_TIMEZONES = frozenset({"utc"})


class CalendarError(ValueError):
    """Raised for a malformed calendar expression."""


def parse_calendar(expression: str) -> str:
    """Validate a calendar expression and return its normalised form.

    Raises:
        CalendarError: If the expression is empty or malformed.
    """
    tokens = expression.split()
    if not tokens:
        raise CalendarError("empty calendar expression")

    if len(tokens) == 1 and tokens[0].lower() in SHORTCUTS:
        return tokens[0].lower()

    rest = list(tokens)
    if rest[-1].lower() in _TIMEZONES:
        rest.pop()

    components = 0
    if rest and rest[0][0].isalpha():
        _check_weekdays(rest.pop(0))
        components += 1

    seen_date = seen_time = False
    for token in rest:
        if ":" in token and not seen_time:
            _check_time(token)
            seen_time = True
        elif "-" in token and not seen_date and not seen_time:
            _check_date(token)
            seen_date = True
        else:
            raise CalendarError(f"unexpected component {token!r}")
        components += 1

    if components == 0:
        raise CalendarError(f"no date or time in {expression!r}")

    return " ".join(tokens)


def is_valid_calendar(expression: str) -> bool:
    try:
        parse_calendar(expression)
    except CalendarError:
        return False
    return True


# ── Components ──────────────────────────────────────────────────────


def _check_weekdays(token: str) -> None:
    for item in token.split(","):
        bounds = item.split("..") if ".." in item else item.split("-")
        if len(bounds) > 2 or not all(b.lower() in _WEEKDAYS for b in bounds):
            raise CalendarError(f"invalid weekday {item!r}")


def _check_date(token: str) -> None:
    fields = token.split("-")
    if len(fields) == 3:
        _check_field(fields[0], 1970, 2199, "year")
        fields = fields[1:]
    if len(fields) != 2:
        raise CalendarError(f"invalid date {token!r}")
    _check_field(fields[0], 1, 12, "month")
    _check_field(fields[1], 1, 31, "day")


def _check_time(token: str) -> None:
    fields = token.split(":")
    if len(fields) not in (2, 3):
        raise CalendarError(f"invalid time {token!r}")
    _check_field(fields[0], 0, 23, "hour")
    _check_field(fields[1], 0, 59, "minute")
    if len(fields) == 3:
        _check_field(fields[2], 0, 59, "second")


def _check_field(text: str, low: int, high: int, name: str) -> None:
    """One date/time field: ``*``, a value, a range ``a..b``, a list, each with an optional ``/step``."""
    if not text:
        raise CalendarError(f"empty {name}")

    for item in text.split(","):
        value, _, step = item.partition("/")
        if step and (not _is_number(step) or int(step) == 0):
            raise CalendarError(f"invalid {name} repetition {item!r}")
        if value == "*":
            continue
        bounds = value.split("..")
        if len(bounds) > 2:
            raise CalendarError(f"invalid {name} range {item!r}")
        for bound in bounds:
            if not _is_number(bound) or not low <= int(bound) <= high:
                raise CalendarError(f"invalid {name} {item!r}")


def _is_number(text: str) -> bool:
    # str.isdigit() also accepts superscripts and other non-ASCII digits
    return text.isascii() and text.isdigit()
