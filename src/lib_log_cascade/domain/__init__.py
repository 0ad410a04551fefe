"""Domain entities and value objects used by the logging core."""

from __future__ import annotations

from .errors import ConfigurationError, LogWriteError
from .filename import LogFileNamer, extract_timestamp, parse_timestamp, short_hostname
from .interval import Interval, parse_interval
from .patterns import ModuleOverride, compile_module_pattern, normalize_module, pattern_rank
from .policy import RotationPolicy
from .record import LogRecord, module_basename, parse_trace_location
from .severity import Severity
from .stats import OutputStats, SeverityStats
from .verbosity import VerbosityGate

__all__ = [
    "ConfigurationError",
    "Interval",
    "LogFileNamer",
    "LogRecord",
    "LogWriteError",
    "ModuleOverride",
    "OutputStats",
    "RotationPolicy",
    "Severity",
    "SeverityStats",
    "VerbosityGate",
    "compile_module_pattern",
    "extract_timestamp",
    "module_basename",
    "normalize_module",
    "parse_interval",
    "parse_timestamp",
    "parse_trace_location",
    "pattern_rank",
    "short_hostname",
]
