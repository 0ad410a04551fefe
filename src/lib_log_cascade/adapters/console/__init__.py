"""Console adapters for standard-error output."""

from __future__ import annotations

from .rich_console import RichConsoleAdapter

__all__ = ["RichConsoleAdapter"]
