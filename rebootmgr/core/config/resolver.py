"""
Configuration resolver — merge layered sources into effective settings.

Layers are merged key by key: for each key, the highest-priority layer
defining it wins. A key absent from every layer is unset, which is not
an error. Having no configuration at all yields best-effort strategy
and no maintenance window.

After the merge:
    - an empty ``window-start`` counts as unset;
    - ``window-duration`` without ``window-start`` is discarded;
    - the strategy is decoded, falling back to best-effort;
    - the window start is checked by the calendar parser. A bad start
      drops the window, a bad duration falls back to one hour.

Only a malformed layer aborts resolution. Bad values are logged and
reported through the result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from rebootmgr.core.calendar import CalendarError, CalendarParser, parse_calendar
from rebootmgr.core.codecs import Decoded, DecodeOutcome, decode_duration, decode_strategy
from rebootmgr.core.config.layers import discover_layers, read_layer
from rebootmgr.core.config.paths import (
    KEY_STRATEGY,
    KEY_WINDOW_DURATION,
    KEY_WINDOW_START,
    KNOWN_KEYS,
    ConfigPaths,
)
from rebootmgr.core.models.enums import RebootStrategy
from rebootmgr.core.models.window import MaintenanceWindow

logger = logging.getLogger(__name__)


@dataclass
class ResolvedConfig:
    """Effective configuration, ready to seed a ControlState."""

    strategy: Decoded[RebootStrategy]
    window: MaintenanceWindow | None = None

    # Merged raw values and the layer each one came from
    raw: dict[str, str] = field(default_factory=dict)
    sources: dict[str, Path] = field(default_factory=dict)

    # Values that were present but could not be used
    problems: list[str] = field(default_factory=list)


class ConfigResolver:
    """Resolve the ``rebootmgr`` group across all configuration layers.

    Args:
        paths: Configuration trees (default: from environment).
        calendar: Validates window start expressions.
    """

    def __init__(
        self,
        paths: ConfigPaths | None = None,
        calendar: CalendarParser = parse_calendar,
    ) -> None:
        self.paths = paths or ConfigPaths.from_env()
        self.calendar = calendar

    def merge(self) -> tuple[dict[str, str], dict[str, Path]]:
        """Merge the known keys of every layer, later layers winning.

        Raises:
            SourceMalformedError: If any present layer is malformed.
        """
        merged: dict[str, str] = {}
        sources: dict[str, Path] = {}

        for path in discover_layers(self.paths):
            layer = read_layer(path)
            if layer is None:
                continue
            for key in KNOWN_KEYS:
                if key in layer.values:
                    merged[key] = layer.values[key]
                    sources[key] = path

        return merged, sources

    def resolve(self) -> ResolvedConfig:
        """Merge all layers and decode the result.

        Raises:
            SourceMalformedError: If any present layer is malformed.
        """
        raw, sources = self.merge()
        problems: list[str] = []

        if not raw.get(KEY_WINDOW_START, "").strip():
            raw.pop(KEY_WINDOW_START, None)
            if raw.pop(KEY_WINDOW_DURATION, None) is not None:
                logger.info("Ignoring window-duration from %s: no window-start set",
                            sources.pop(KEY_WINDOW_DURATION))
            sources.pop(KEY_WINDOW_START, None)

        strategy = decode_strategy(raw.get(KEY_STRATEGY))
        if strategy.outcome is DecodeOutcome.INVALID:
            msg = f"Invalid strategy '{raw[KEY_STRATEGY]}' in {sources[KEY_STRATEGY]}"
            logger.error("%s, using best-effort", msg)
            problems.append(msg)
        elif strategy.outcome is DecodeOutcome.ABSENT:
            logger.info("No reboot strategy configured, using best-effort")

        window = self._resolve_window(raw, sources, problems)

        if strategy.value == RebootStrategy.MAINT_WINDOW and window is None:
            logger.warning("Strategy is maint-window but no maintenance window is configured")

        resolved = ResolvedConfig(
            strategy=strategy,
            window=window,
            raw=raw,
            sources=sources,
            problems=problems,
        )
        logger.info(
            "Resolved configuration: strategy=%s window=%s",
            strategy.value.name.lower(),
            f"{window.start} ({window.duration})" if window else "none",
        )
        return resolved

    def _resolve_window(
        self,
        raw: dict[str, str],
        sources: dict[str, Path],
        problems: list[str],
    ) -> MaintenanceWindow | None:
        start = raw.get(KEY_WINDOW_START)
        if start is None:
            return None

        try:
            self.calendar(start)
        except CalendarError as e:
            msg = f"Cannot parse window-start '{start}' in {sources[KEY_WINDOW_START]}: {e}"
            logger.error("%s", msg)
            problems.append(msg)
            return None

        duration = decode_duration(raw.get(KEY_WINDOW_DURATION))
        if duration.outcome is DecodeOutcome.INVALID:
            msg = (f"Cannot parse window-duration '{raw[KEY_WINDOW_DURATION]}' "
                   f"in {sources[KEY_WINDOW_DURATION]}")
            logger.error("%s, using %s", msg, duration.value)
            problems.append(msg)

        return MaintenanceWindow(start=start, duration=duration.value)


def resolve_config(
    paths: ConfigPaths | None = None,
    calendar: CalendarParser = parse_calendar,
) -> ResolvedConfig:
    """Resolve configuration with a one-off resolver."""
    return ConfigResolver(paths, calendar).resolve()
