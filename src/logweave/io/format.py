"""Entry serialization: JSON lines via orjson and a human-readable console line."""

from __future__ import annotations

import traceback
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

import orjson

from logweave.foundation.errors import JsonDict

_OPTIONS = orjson.OPT_NON_STR_KEYS


def error_dict(exc: BaseException) -> JsonDict:
    """Structured view of an exception: name, message and formatted stack."""
    stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)) if exc.__traceback__ else None
    return {"name": type(exc).__name__, "message": str(exc), "stack": stack}


def _default(value: Any) -> Any:
    match value:
        case BaseException():
            return error_dict(value)
        case Mapping():
            return dict(value)
        case set() | frozenset():
            return list(value)
        case bytes() | bytearray():
            return bytes(value).decode("utf-8", errors="replace")
        case _:
            return str(value)


def _sanitize(value: Any, seen: set[int]) -> Any:
    """Replace reference cycles with "[Circular]" so the value becomes serializable."""
    if isinstance(value, Mapping | list | tuple | set | frozenset):
        if id(value) in seen:
            return "[Circular]"
        seen = seen | {id(value)}
        if isinstance(value, Mapping):
            return {k: _sanitize(v, seen) for k, v in value.items()}
        return [_sanitize(v, seen) for v in value]
    return value


def to_json(value: Any) -> bytes:
    """Serialize with orjson, tolerating cycles and non-JSON types."""
    try:
        return orjson.dumps(value, default=_default, option=_OPTIONS)
    except orjson.JSONEncodeError:
        return orjson.dumps(_sanitize(value, set()), default=_default, option=_OPTIONS)


def format_json(entry: Mapping[str, Any]) -> str:
    """One JSON object per entry, no trailing newline."""
    return to_json(dict(entry)).decode()


# ─────────────────────────────────────────────────────────────────────────────
# Pretty
# ─────────────────────────────────────────────────────────────────────────────


_COLORS = {"reset": "\033[0m", "bold": "\033[1m", "dim": "\033[2m", "red": "\033[31m", "green": "\033[32m",
           "yellow": "\033[33m", "blue": "\033[34m", "magenta": "\033[35m", "cyan": "\033[36m",
           "white": "\033[37m", "gray": "\033[90m"}
_NO_COLORS = {k: "" for k in _COLORS}
LEVEL_COLORS = {"trace": "gray", "debug": "cyan", "info": "blue", "warn": "yellow", "error": "red", "fatal": "magenta"}

_HIDDEN = frozenset({"level", "message", "time", "err"})


def format_time(ms: int | float) -> str:
    """HH:MM:SS.mmm (UTC)."""
    return datetime.fromtimestamp(ms / 1000, tz=UTC).strftime("%H:%M:%S.%f")[:-3]


def _format_value(v: object, c: Mapping[str, str]) -> str:
    match v:
        case str(): return f'{c["yellow"]}"{v}"{c["reset"]}'
        case bool(): return f'{c["blue"]}{str(v).lower()}{c["reset"]}'
        case int() | float(): return f'{c["blue"]}{v}{c["reset"]}'
        case Mapping() | list() | tuple(): return f'{c["dim"]}{to_json(v).decode()}{c["reset"]}'
        case _: return f'{c["white"]}{v!r}{c["reset"]}'


def format_pretty(entry: Mapping[str, Any], *, colors: bool = False, timestamp: bool = True) -> str:
    """``HH:MM:SS.mmm LEVEL message key=value ...`` with optional ANSI colors."""
    c = _COLORS if colors else _NO_COLORS
    level = str(entry.get("level", ""))
    parts: list[str] = []
    if timestamp and (t := entry.get("time")) is not None:
        parts.append(f"{c['gray']}{format_time(t)}{c['reset']}")
    parts.append(f"{c[LEVEL_COLORS.get(level, 'white')]}{level.upper():<5}{c['reset']}")
    if message := entry.get("message"):
        parts.append(f"{c['bold']}{message}{c['reset']}")
    parts += [f"{c['cyan']}{k}{c['reset']}={_format_value(v, c)}"
              for k, v in entry.items() if k not in _HIDDEN]
    line = " ".join(parts)
    if isinstance(err := entry.get("err"), Mapping) and err.get("stack"):
        line += f"\n{c['red']}{err['stack'].rstrip()}{c['reset']}"
    return line
