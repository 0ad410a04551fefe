"""Domain record describing one log call.

Purpose
-------
Carry everything the header formatter needs for a single emission. Records
are built per call and never persisted as structures; only their rendered
bytes reach disk.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .errors import ConfigurationError
from .severity import Severity


@dataclass(slots=True, frozen=True)
class LogRecord:
    """Immutable view of a log call.

    Attributes
    ----------
    severity:
        Tier the record was logged at.
    timestamp:
        Wall-clock time of the call, in local time.
    pid:
        Process id rendered in the header.
    module:
        Source file identity of the call site.
    line:
        Source line of the call site.
    message:
        Rendered message text.
    """

    severity: Severity
    timestamp: datetime
    pid: int
    module: str
    line: int
    message: str

    def __post_init__(self) -> None:
        if self.line < 0:
            raise ValueError("line must not be negative")

    @property
    def location(self) -> str:
        """Return ``basename:line`` as matched against trace locations."""

        return f"{module_basename(self.module)}:{self.line}"


def module_basename(module: str) -> str:
    """Return the file name part of a module identity on any platform."""

    return module.replace("\\", "/").rsplit("/", 1)[-1]


def parse_trace_location(text: str) -> str | None:
    """Validate a ``file.py:line`` trace location and return it normalised.

    An empty value clears the location and yields ``None``. Directory parts
    are dropped because records are matched by file name and line only.

    >>> parse_trace_location("/srv/app/handlers.py:234")
    'handlers.py:234'
    >>> parse_trace_location("")
    >>> parse_trace_location("handlers.py")
    Traceback (most recent call last):
    ...
    lib_log_cascade.domain.errors.ConfigurationError: Trace location must look like file.py:234, got 'handlers.py'
    """

    if not text:
        return None
    file_part, sep, line_part = text.rpartition(":")
    if not sep or not file_part or not line_part.isdigit():
        raise ConfigurationError(f"Trace location must look like file.py:234, got {text!r}")
    name = module_basename(file_part)
    if not name:
        raise ConfigurationError(f"Trace location must look like file.py:234, got {text!r}")
    return f"{name}:{int(line_part)}"


__all__ = ["LogRecord", "module_basename", "parse_trace_location"]
