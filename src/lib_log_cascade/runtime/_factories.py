"""Factories for the concrete collaborators of a logging context."""

from __future__ import annotations

import getpass
import socket
import sys
import tempfile
from datetime import datetime
from functools import partial
from pathlib import Path
from typing import Sequence

from lib_log_cascade.adapters import HeaderFormatter, RetentionSweeper, RichConsoleAdapter, RotatingSink, file_banner
from lib_log_cascade.application.ports import ClockPort, ConsolePort, SinkPort
from lib_log_cascade.config import LoggingConfig
from lib_log_cascade.domain import LogFileNamer, Severity, short_hostname


class SystemClock(ClockPort):
    """Clock port returning naive local timestamps, as headers and file names use."""

    def now(self) -> datetime:
        return datetime.now()


def program_name(config: LoggingConfig) -> str:
    """Return the program part of log file names."""

    if config.program:
        return config.program
    return Path(sys.argv[0]).name if sys.argv and sys.argv[0] else "python"


def current_user() -> str:
    """Return the login name with path separators made file-name safe."""

    try:
        user = getpass.getuser()
    except (KeyError, OSError):
        return "unknownuser"
    return user.replace("\\", "_").replace("/", "_") or "unknownuser"


def current_host() -> str:
    """Return the short host name."""

    return short_hostname(socket.gethostname()) or "unknownhost"


def resolve_log_dirs(config: LoggingConfig) -> tuple[Path, ...]:
    """Return the configured directories or the system temporary directory."""

    return config.log_dirs or (Path(tempfile.gettempdir()),)


def create_console(config: LoggingConfig) -> ConsolePort:
    """Build the Rich console adapter honouring the colour switches."""

    return RichConsoleAdapter(force_color=config.force_color, no_color=config.no_color)


def create_sinks(
    config: LoggingConfig,
    *,
    namer: LogFileNamer,
    log_dirs: Sequence[Path],
    pid: int,
    sweeper: RetentionSweeper,
) -> dict[Severity, SinkPort]:
    """Return one rotating sink per severity, or none for stderr-only logging."""

    if config.only_log_to_stderr:
        return {}
    policy = config.policy()
    banner = partial(_banner, host=namer.host)
    return {
        severity: RotatingSink(
            severity=severity,
            namer=namer,
            log_dirs=log_dirs,
            policy=policy,
            pid=pid,
            banner=banner,
            sweeper=sweeper,
        )
        for severity in Severity
    }


def _banner(created: datetime, *, host: str) -> bytes:
    return file_banner(created, host)


def create_formatter() -> HeaderFormatter:
    """Return the header formatter stripping ``sys.path`` roots."""

    return HeaderFormatter()


__all__ = [
    "SystemClock",
    "create_console",
    "create_formatter",
    "create_sinks",
    "current_host",
    "current_user",
    "program_name",
    "resolve_log_dirs",
]
