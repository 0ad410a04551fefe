"""Runtime composition helpers wiring domain, application and adapters.

Purpose
-------
Translate a :class:`LoggingConfig` into the live collaborators of one
:class:`LoggingContext`. Keeping the wiring here leaves the context class a
thin façade and lets tests swap the console, clock and process hooks.

System Role
-----------
The only place that knows which adapter implements which port.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from lib_log_cascade.adapters import RetentionSweeper
from lib_log_cascade.application.ports import ClockPort, ConsolePort
from lib_log_cascade.application.use_cases.route import DiagnosticHook, FailureHandler, SeverityRouter, TerminateHandler
from lib_log_cascade.config import LoggingConfig
from lib_log_cascade.domain import LogFileNamer, VerbosityGate

from ._factories import (
    SystemClock,
    create_console,
    create_formatter,
    create_sinks,
    current_host,
    current_user,
    program_name,
    resolve_log_dirs,
)


@dataclass(slots=True, frozen=True)
class ContextParts:
    """Collaborators assembled for one logging context."""

    config: LoggingConfig
    router: SeverityRouter
    sweeper: RetentionSweeper
    namer: LogFileNamer
    log_dirs: tuple[Path, ...]


def build_context_parts(
    config: LoggingConfig,
    *,
    console: ConsolePort | None = None,
    clock: ClockPort | None = None,
    terminate: TerminateHandler | None = None,
    on_failure: FailureHandler | None = None,
    diagnostic: DiagnosticHook = None,
    pid: int | None = None,
    host: str | None = None,
    user: str | None = None,
) -> ContextParts:
    """Assemble router, sinks and sweeper from ``config``."""

    process_id = os.getpid() if pid is None else pid
    namer = LogFileNamer(
        program=program_name(config),
        host=host if host is not None else current_host(),
        user=user if user is not None else current_user(),
    )
    log_dirs = resolve_log_dirs(config)
    sweeper = RetentionSweeper(log_dirs=log_dirs, namer=namer, policy=config.policy(), diagnostic=diagnostic)
    sinks = create_sinks(config, namer=namer, log_dirs=log_dirs, pid=process_id, sweeper=sweeper)
    gate = VerbosityGate(global_level=config.verbosity, overrides=config.module_overrides)
    router = SeverityRouter(
        gate=gate,
        formatter=create_formatter(),
        sinks=sinks,
        console=console if console is not None else create_console(config),
        clock=clock if clock is not None else SystemClock(),
        pid=process_id,
        also_to_stderr=config.also_log_to_stderr,
        stderr_threshold=config.stderr_threshold,
        trace_location=config.trace_location,
        terminate=terminate,
        on_failure=on_failure,
        diagnostic=diagnostic,
    )
    return ContextParts(config=config, router=router, sweeper=sweeper, namer=namer, log_dirs=tuple(log_dirs))


__all__ = ["ContextParts", "build_context_parts"]
