"""Log levels and the level registry.

Levels form a total order by numeric rank. Lookups accept a level name
(case-insensitive, with ``warning`` and ``critical`` aliases), a Level member,
or a registered integer rank. Comparisons always go through ranks.

Example:
    >>> levels = LevelRegistry()
    >>> levels.is_enabled("warn", minimum="info")
    True
    >>> levels.is_enabled("debug", minimum="info")
    False
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from enum import IntEnum
from types import MappingProxyType

from .errors import ConfigurationError


class Level(IntEnum):
    """Standard severities, ranked."""
    TRACE = 10
    DEBUG = 20
    INFO = 30
    WARN = 40
    ERROR = 50
    FATAL = 60

    @property
    def label(self) -> str:
        return self.name.lower()


DEFAULT_LEVEL = "info"
LevelLike = str | int

_ALIASES = {"warning": "warn", "critical": "fatal"}


class LevelRegistry:
    """Ordered set of named severities.

    Custom registries must declare names with strictly increasing ranks; the
    declaration order is the severity order.
    """

    __slots__ = ("_ranks", "_names")

    def __init__(self, levels: Mapping[str, int] | None = None) -> None:
        levels = levels if levels is not None else {lvl.label: int(lvl) for lvl in Level}
        if not levels:
            raise ConfigurationError("At least one level is required", "levels")
        ranks: dict[str, int] = {}
        prev: int | None = None
        for raw, rank in levels.items():
            name = raw.lower()
            if not name or name in ranks:
                raise ConfigurationError(f"Duplicate or empty level name: {raw!r}", "levels")
            if prev is not None and rank <= prev:
                raise ConfigurationError(
                    f"Level ranks must be strictly increasing: {raw!r}={rank} follows {prev}", "levels")
            ranks[name], prev = rank, rank
        self._ranks = MappingProxyType(ranks)
        self._names = MappingProxyType({r: n for n, r in ranks.items()})

    @property
    def names(self) -> tuple[str, ...]:
        """Level names, least to most severe."""
        return tuple(self._ranks)

    def resolve(self, level: LevelLike) -> str:
        """Canonical name for a name, Level member or rank. Raises ConfigurationError if unknown."""
        if isinstance(level, Level):
            level = level.label
        if isinstance(level, bool):
            raise ConfigurationError(f"Invalid log level: {level!r}", "level")
        if isinstance(level, int):
            if level in self._names:
                return self._names[level]
            raise ConfigurationError(f"Invalid log level: {level}", "level")
        if isinstance(level, str):
            name = level.strip().lower()
            if name in self._ranks:
                return name
            if (alias := _ALIASES.get(name)) in self._ranks:
                return alias  # type: ignore[return-value]
        raise ConfigurationError(f"Invalid log level: {level!r}", "level")

    name = resolve

    def rank(self, level: LevelLike) -> int:
        return self._ranks[self.resolve(level)]

    def is_enabled(self, level: LevelLike, minimum: LevelLike) -> bool:
        """True iff ``rank(level) >= rank(minimum)``."""
        return self.rank(level) >= self.rank(minimum)

    def __contains__(self, level: object) -> bool:
        try:
            self.resolve(level)  # type: ignore[arg-type]
        except ConfigurationError:
            return False
        return True

    def __iter__(self) -> Iterator[str]:
        return iter(self._ranks)

    def __len__(self) -> int:
        return len(self._ranks)

    def __repr__(self) -> str:
        return f"LevelRegistry({dict(self._ranks)!r})"
