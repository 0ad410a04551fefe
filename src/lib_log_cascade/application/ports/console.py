"""Console port describing standard-error emission.

Purpose
-------
Give the router a narrow seam for everything that goes to the terminal:
records copied to stderr, best-effort fallback output when a file write
fails, and stack dumps on fatal records.

Contents
--------
* :class:`ConsolePort` – runtime-checkable protocol with ``emit`` and
  ``report``.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from lib_log_cascade.domain.severity import Severity


@runtime_checkable
class ConsolePort(Protocol):
    """Render rendered log lines to an interactive console."""

    def emit(self, severity: Severity, data: bytes) -> None:
        """Write the already formatted ``data`` for a record at ``severity``."""

    def report(self, text: str) -> None:
        """Write an unformatted diagnostic line produced by the core itself."""


__all__ = ["ConsolePort"]
