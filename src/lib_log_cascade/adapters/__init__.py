"""Adapter implementations for the ports used by the logging core.

Purpose
-------
Collect the concrete file, console and stdlib integrations in one place so
the runtime can import them without reaching into submodules.
"""

from __future__ import annotations

from .console.rich_console import RichConsoleAdapter
from .header import HeaderFormatter, file_banner
from .pointer import CurrentPointer, resolve_pointer
from .retention import RetentionSweeper, SweepReport, gzip_file
from .rotating_sink import RotatingSink
from .stdlib_bridge import StandardLogHandler, copy_standard_log_to, remove_bridge

__all__ = [
    "CurrentPointer",
    "HeaderFormatter",
    "RetentionSweeper",
    "RichConsoleAdapter",
    "RotatingSink",
    "StandardLogHandler",
    "SweepReport",
    "copy_standard_log_to",
    "file_banner",
    "gzip_file",
    "remove_bridge",
    "resolve_pointer",
]
