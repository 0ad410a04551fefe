"""Exceptions raised by the logging core."""

from __future__ import annotations

from pathlib import Path


class ConfigurationError(ValueError):
    """Invalid configuration value detected while configuring the core.

    Raised synchronously by the call that received the value (severity names,
    interval text, module patterns, trace locations) so mistakes surface at
    start-up rather than on a later write.
    """


class LogWriteError(OSError):
    """Opening or writing a log file failed."""

    def __init__(self, message: str, *, severity: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.severity = severity
        self.path = path


__all__ = ["ConfigurationError", "LogWriteError"]
