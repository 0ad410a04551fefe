"""Public package surface of the leveled, cascading logging core.

Typical use::

    from lib_log_cascade import LoggingConfig, LoggingContext

    with LoggingContext.from_config(LoggingConfig(log_dirs=("/var/log/app",))) as context:
        log = context.logger(__file__)
        log.info("started")
        if log.v(2):
            log.v(2).info("cache size %d", len(cache))
"""

from __future__ import annotations

from .adapters import gzip_file
from .config import LoggingConfig, enable_dotenv, parse_module_spec
from .domain import ConfigurationError, Interval, LogWriteError, RotationPolicy, Severity, parse_interval
from .runtime import LoggingContext, ModuleLogger, Verbose

__all__ = [
    "ConfigurationError",
    "Interval",
    "LogWriteError",
    "LoggingConfig",
    "LoggingContext",
    "ModuleLogger",
    "RotationPolicy",
    "Severity",
    "Verbose",
    "enable_dotenv",
    "gzip_file",
    "parse_interval",
    "parse_module_spec",
]
