"""Verbosity gate deciding whether a debug call is emitted.

Purpose
-------
Hold the global verbosity and the installed module overrides and answer
``allows(level, module)`` on the hot path without taking a lock.

System Role
-----------
Configuration changes build a new immutable :class:`_GateSnapshot` and swap a
single attribute reference. Readers load that reference once per call, so an
in-flight check sees either the old or the new configuration in full, never
a partially applied override set.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from threading import Lock
from typing import Iterable

from .errors import ConfigurationError
from .patterns import ModuleOverride, normalize_module


@dataclass(frozen=True)
class _GateSnapshot:
    global_level: int
    overrides: tuple[ModuleOverride, ...]
    # Per-module thresholds, filled lazily; dict item assignment is atomic.
    cache: dict[str, int] = field(default_factory=dict, compare=False)

    def threshold(self, module: str) -> int:
        cached = self.cache.get(module)
        if cached is not None:
            return cached
        best: ModuleOverride | None = None
        for override in self.overrides:
            # ``>=`` lets the later install win ties.
            if override.matches(module) and (best is None or override.rank >= best.rank):
                best = override
        value = self.global_level if best is None else best.level
        self.cache[module] = value
        return value


def _check_level(level: int) -> int:
    if isinstance(level, bool) or not isinstance(level, int) or level < 0:
        raise ConfigurationError(f"Verbosity must be a non-negative integer, got {level!r}")
    return level


class VerbosityGate:
    """Global and per-module verbosity thresholds.

    Examples
    --------
    >>> gate = VerbosityGate(global_level=0)
    >>> gate.set_overrides([("handlers.py", 2)])
    >>> gate.allows(2, "/srv/app/handlers.py"), gate.allows(3, "/srv/app/handlers.py")
    (True, False)
    >>> gate.allows(1, "/srv/app/other.py")
    False
    """

    def __init__(self, *, global_level: int = 0, overrides: Iterable[tuple[str, int]] = ()) -> None:
        self._write_lock = Lock()
        compiled = tuple(ModuleOverride.create(pattern, level) for pattern, level in overrides)
        self._snapshot = _GateSnapshot(_check_level(global_level), compiled)

    @property
    def global_level(self) -> int:
        """Return the verbosity applied to modules without an override."""

        return self._snapshot.global_level

    @property
    def overrides(self) -> tuple[ModuleOverride, ...]:
        """Return the installed overrides in install order."""

        return self._snapshot.overrides

    def allows(self, level: int, module: str) -> bool:
        """Return ``True`` when a call at ``level`` from ``module`` is emitted."""

        snapshot = self._snapshot
        if level <= snapshot.global_level and not snapshot.overrides:
            return True
        return level <= snapshot.threshold(normalize_module(module))

    def set_global_level(self, level: int) -> None:
        """Replace the global verbosity atomically."""

        _check_level(level)
        with self._write_lock:
            self._snapshot = _GateSnapshot(level, self._snapshot.overrides)

    def set_overrides(self, overrides: Iterable[tuple[str, int]]) -> None:
        """Replace every module override atomically.

        All patterns are compiled before anything is installed; an invalid
        pattern leaves the previous configuration in place.
        """

        compiled = tuple(ModuleOverride.create(pattern, level) for pattern, level in overrides)
        with self._write_lock:
            self._snapshot = _GateSnapshot(self._snapshot.global_level, compiled)


__all__ = ["VerbosityGate"]
