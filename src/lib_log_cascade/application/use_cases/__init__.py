"""Application use cases orchestrating the logging core."""

from __future__ import annotations

from .route import SeverityRouter, format_all_stacks, format_stack
from .shutdown import create_shutdown

__all__ = ["SeverityRouter", "create_shutdown", "format_all_stacks", "format_stack"]
