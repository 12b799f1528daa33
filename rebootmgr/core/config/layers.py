"""
Configuration layers — discovery, parsing and rendering of layer files.

A layer is a group-scoped ``key=value`` text file::

    # comment
    [rebootmgr]
    strategy=maint-window
    window-start=03:30
    window-duration=1h

Only keys of the requested group are kept. A missing file is simply
not a layer; a file that exists but cannot be read or parsed raises
SourceMalformedError.
"""

from __future__ import annotations

import configparser
import io
import logging
from dataclasses import dataclass, field
from pathlib import Path

from rebootmgr.core.config.paths import DROPIN_SUFFIX, GROUP, ConfigPaths
from rebootmgr.core.errors import SourceMalformedError

logger = logging.getLogger(__name__)

# "[DEFAULT]" is an ordinary group in layer files
_NO_DEFAULTS = "\x00defaults"


@dataclass
class ConfigLayer:
    """Key/value pairs read from one layer file."""

    path: Path
    values: dict[str, str] = field(default_factory=dict)


def discover_layers(paths: ConfigPaths) -> list[Path]:
    """Candidate layer files, lowest priority first.

    Main files come first (vendor, then administrator), followed by the
    drop-ins of both trees ordered by file name. An administrator
    drop-in shadows a vendor drop-in of the same name.
    """
    candidates = list(paths.main_files)

    dropins: dict[str, Path] = {}
    for directory in paths.dropin_dirs:
        for path in _list_dropins(directory):
            dropins[path.name] = path
    candidates.extend(dropins[name] for name in sorted(dropins))
    return candidates


def read_layer(path: Path, group: str = GROUP) -> ConfigLayer | None:
    """Read one layer file, or None if it does not exist."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug("No configuration layer at %s", path)
        return None
    except UnicodeDecodeError as e:
        raise SourceMalformedError(path, f"not valid UTF-8 ({e.reason})") from e
    except OSError as e:
        raise SourceMalformedError(path, e.strerror or str(e)) from e

    layer = ConfigLayer(path=path, values=parse_layer(text, path, group))
    logger.debug("Read layer %s: %s", path, sorted(layer.values))
    return layer


def parse_layer(text: str, path: Path, group: str = GROUP) -> dict[str, str]:
    """Parse layer text, returning the keys of ``group``."""
    parser = _new_parser()
    try:
        parser.read_string(text, source=str(path))
    except configparser.MissingSectionHeaderError as e:
        raise SourceMalformedError(path, "key outside of any group", e.lineno) from e
    except configparser.ParsingError as e:
        raise SourceMalformedError(path, "expected 'key=value'", _first_error_line(e)) from e
    except configparser.Error as e:
        raise SourceMalformedError(path, e.message) from e

    if not parser.has_section(group):
        return {}
    return {key: _unquote(value) for key, value in parser.items(group, raw=True)}


def render_layer(values: dict[str, str], group: str = GROUP, header: str | None = None) -> str:
    """Layer text for ``values`` under a single group header."""
    parser = _new_parser()
    parser.add_section(group)
    for key, value in values.items():
        parser.set(group, key, value)

    out = io.StringIO()
    if header:
        out.write(f"# {header}\n")
    parser.write(out, space_around_delimiters=False)
    return out.getvalue()


def _new_parser() -> configparser.ConfigParser:
    parser = configparser.ConfigParser(
        interpolation=None,
        strict=False,
        delimiters=("=",),
        comment_prefixes=("#",),
        default_section=_NO_DEFAULTS,
    )
    parser.optionxform = str  # type: ignore[assignment,method-assign]
    return parser


def _first_error_line(error: configparser.ParsingError) -> int | None:
    if error.errors:
        return error.errors[0][0]
    return None


def _list_dropins(directory: Path) -> list[Path]:
    try:
        entries = list(directory.iterdir())
    except FileNotFoundError:
        return []
    except OSError as e:
        raise SourceMalformedError(directory, e.strerror or str(e)) from e
    return [p for p in entries if p.suffix == DROPIN_SUFFIX and p.is_file()]


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value
