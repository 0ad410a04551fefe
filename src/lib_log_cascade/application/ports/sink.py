"""Ports for per-severity log sinks and header rendering."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable

from lib_log_cascade.domain.record import LogRecord


@runtime_checkable
class SinkPort(Protocol):
    """Destination receiving the bytes of one severity tier.

    Implementations are only called while the router's lock is held, so they
    need no locking of their own.
    """

    def write(self, data: bytes, now: datetime) -> None:
        """Append ``data``; ``now`` drives time-based rotation."""

    def flush(self) -> None:
        """Push buffered bytes to durable storage."""

    def close(self) -> None:
        """Flush and release the underlying resource."""


@runtime_checkable
class FormatterPort(Protocol):
    """Render a :class:`LogRecord` into the bytes written to every sink."""

    def format(self, record: LogRecord) -> bytes: ...


__all__ = ["FormatterPort", "SinkPort"]
