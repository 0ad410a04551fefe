"""Protocols the application layer depends on."""

from __future__ import annotations

from .console import ConsolePort
from .sink import FormatterPort, SinkPort
from .time import ClockPort

__all__ = ["ClockPort", "ConsolePort", "FormatterPort", "SinkPort"]
