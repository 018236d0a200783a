"""
Dashboard-variable interpolation for compiled SQL.

Recognised forms: ``$name``, ``${name}``, ``${name:format}`` and
``[[name]]`` / ``[[name:format]]``.  The default format is ``sqlstring``:
strings become single-quoted literals with embedded quotes doubled, numbers
render bare, and multi-value variables become a comma-separated list of
such items.  Use ``${name:raw}`` to splice any value in unquoted.

Variables that are not in scope are left in the text untouched, so
catalog names such as ``V$TABLES`` survive interpolation.
"""
from __future__ import annotations

import re
from typing import Any, Callable, Mapping

from neo_datasource.core.logging import get_logger

logger = get_logger(__name__)

Substitute = Callable[[str, Mapping[str, Any]], str]

DEFAULT_FORMAT = "sqlstring"

_VAR_RE = re.compile(
    r"\$(\w+)"
    r"|\[\[(\w+?)(?::(\w+))?\]\]"
    r"|\$\{(\w+)(?::(\w+))?\}"
)


def _sql_string(value: Any) -> str:
    # bool is an int subclass but has no bare SQL spelling here
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return "'" + str(value).replace("'", "''") + "'"


def _as_list(value: Any) -> list[Any]:
    return list(value) if isinstance(value, (list, tuple)) else [value]


_FORMATTERS: dict[str, Callable[[Any], str]] = {
    "sqlstring": lambda v: ",".join(_sql_string(x) for x in _as_list(v)),
    "raw": lambda v: ",".join(str(x) for x in _as_list(v)),
    "csv": lambda v: ",".join(str(x) for x in _as_list(v)),
    "singlequote": lambda v: ",".join("'" + str(x).replace("'", "\\'") + "'" for x in _as_list(v)),
    "doublequote": lambda v: ",".join('"' + str(x).replace('"', '\\"') + '"' for x in _as_list(v)),
}


def _resolve(scoped_vars: Mapping[str, Any], name: str) -> tuple[bool, Any]:
    if name not in scoped_vars:
        return False, None
    entry = scoped_vars[name]
    # Dashboard variables arrive as {"text": ..., "value": ...}.
    if isinstance(entry, Mapping) and "value" in entry:
        return True, entry["value"]
    return True, entry


def format_value(value: Any, fmt: str | None = None) -> str:
    formatter = _FORMATTERS.get(fmt or DEFAULT_FORMAT)
    if formatter is None:
        logger.warning("Unknown variable format %r -- using %s", fmt, DEFAULT_FORMAT)
        formatter = _FORMATTERS[DEFAULT_FORMAT]
    return formatter(value)


def interpolate(text: str, scoped_vars: Mapping[str, Any] | None = None) -> str:
    """Replace in-scope variable references in *text*."""
    if not scoped_vars:
        return text

    def _replace(m: re.Match) -> str:
        name = m.group(1) or m.group(2) or m.group(4)
        fmt = m.group(3) or m.group(5)
        found, value = _resolve(scoped_vars, name)
        if not found:
            return m.group(0)
        return format_value(value, fmt)

    return _VAR_RE.sub(_replace, text)
