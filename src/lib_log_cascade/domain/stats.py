"""Per-severity output counters."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from .severity import Severity


@dataclass(slots=True)
class OutputStats:
    """Lines and bytes emitted at one severity (cascaded copies excluded)."""

    lines: int = 0
    bytes: int = 0


@dataclass(slots=True)
class SeverityStats:
    """Counters for every severity; mutated only under the router lock."""

    _counters: dict[Severity, OutputStats] = field(default_factory=lambda: {severity: OutputStats() for severity in Severity})

    def record(self, severity: Severity, size: int) -> None:
        counter = self._counters[severity]
        counter.lines += 1
        counter.bytes += size

    def snapshot(self) -> Mapping[Severity, OutputStats]:
        """Return a read-only copy of the counters."""

        return MappingProxyType({severity: OutputStats(stat.lines, stat.bytes) for severity, stat in self._counters.items()})

    def __getitem__(self, severity: Severity) -> OutputStats:
        return self._counters[severity]


__all__ = ["OutputStats", "SeverityStats"]
