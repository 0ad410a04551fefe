"""Severity tiers with cascading visibility.

Purpose
-------
Model the four ordered severities a record can carry. A record logged at a
tier is written to the file of that tier and of every lower tier, so the Info
log is a superset of all others.

Contents
--------
* :class:`Severity` enum with ordering, header characters and name parsing.

System Role
-----------
Shared by the router (cascade order), the sinks (file naming) and the
stdlib bridge (target validation).
"""

from __future__ import annotations

import logging
from enum import Enum

from .errors import ConfigurationError


class Severity(Enum):
    """Ordered logging severities; larger values are more urgent."""

    INFO = 0
    WARNING = 1
    ERROR = 2
    FATAL = 3

    @property
    def char(self) -> str:
        """Return the single-character tag that opens every header line."""

        return self.name[0]

    def cascade(self) -> tuple["Severity", ...]:
        """Return this severity and every lower one, most severe first.

        >>> [s.name for s in Severity.ERROR.cascade()]
        ['ERROR', 'WARNING', 'INFO']
        """

        return tuple(member for member in reversed(Severity) if member.value <= self.value)

    def to_python_level(self) -> int:
        """Return the :mod:`logging` constant closest to this severity."""

        return _PYTHON_LEVELS[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.value < other.value

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.value <= other.value

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.value > other.value

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.value >= other.value

    @classmethod
    def from_name(cls, name: str) -> "Severity":
        """Parse ``name`` case-insensitively.

        >>> Severity.from_name("warning") is Severity.WARNING
        True
        """

        normalized = name.strip().upper()
        try:
            return cls[normalized]
        except KeyError as exc:
            raise ConfigurationError(f"Unknown severity: {name!r}") from exc

    @classmethod
    def from_python_level(cls, level: int) -> "Severity":
        """Map a stdlib logging level onto the closest severity tier."""

        if level >= logging.CRITICAL:
            return cls.FATAL
        if level >= logging.ERROR:
            return cls.ERROR
        if level >= logging.WARNING:
            return cls.WARNING
        return cls.INFO


_PYTHON_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
    Severity.FATAL: logging.CRITICAL,
}


__all__ = ["Severity"]
