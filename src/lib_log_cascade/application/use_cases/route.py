"""Severity routing use case.

Purpose
-------
Turn one log call into bytes in every file it cascades into. This is the
only place that touches sinks, and it does so under a single lock.

Contents
--------
* :class:`SeverityRouter` – gating, rendering, cascading, fatal handling.
* :func:`format_stack` / :func:`format_all_stacks` – stack renderings that
  keep ``file.py:line`` visible so traces can be grepped like headers.

System Role
-----------
Sits between the :class:`ModuleLogger` façade and the adapters. The router
depends only on ports (sinks, formatter, console, clock) and domain objects,
so tests drive it with in-memory fakes and a frozen clock.

Alignment Notes
---------------
* Debug calls (``level > 0``) are dropped before any work when the
  :class:`VerbosityGate` rejects them.
* The line is rendered once; the target sink receives it first, then each
  lower tier, most severe first.
* A trace location match appends a stack trace to the INFO copy only.
* Records at ERROR and above flush the sinks they were written to.
* A failing sink does not stop the cascade: the remaining tiers are still
  written, the record is diverted to stderr and ``on_failure`` runs with the
  first error once the lock is released.
* FATAL records run ``terminate`` after every sink was written and flushed.
"""

from __future__ import annotations

import logging
import os
import sys
import threading
import traceback
from types import FrameType, MappingProxyType
from typing import Any, Callable, Mapping, TypeVar

from lib_log_cascade.application.ports.console import ConsolePort
from lib_log_cascade.application.ports.sink import FormatterPort, SinkPort
from lib_log_cascade.application.ports.time import ClockPort
from lib_log_cascade.domain.errors import LogWriteError
from lib_log_cascade.domain.record import LogRecord, module_basename, parse_trace_location
from lib_log_cascade.domain.severity import Severity
from lib_log_cascade.domain.stats import SeverityStats
from lib_log_cascade.domain.verbosity import VerbosityGate

LOGGER = logging.getLogger(__name__)

FATAL_EXIT_CODE = 255
EXIT_CODE = 1
FAILURE_EXIT_CODE = 2

TerminateHandler = Callable[[int], None]
FailureHandler = Callable[[OSError], None]
DiagnosticHook = Callable[[str, dict[str, Any]], None] | None
T = TypeVar("T")


def _render_frames(frames: traceback.StackSummary) -> str:
    lines = []
    for frame in frames:
        lines.append(f"  {frame.filename}:{frame.lineno} in {frame.name}\n")
        if frame.line:
            lines.append(f"    {frame.line}\n")
    return "".join(lines)


def format_stack(frame: FrameType | None = None) -> str:
    """Return the stack ending at ``frame`` (the caller when omitted).

    Examples
    --------
    >>> format_stack().startswith("stack of thread MainThread:")
    True
    """

    if frame is None:
        frame = sys._getframe(1)
    return f"stack of thread {threading.current_thread().name}:\n" + _render_frames(traceback.extract_stack(frame))


def format_all_stacks() -> str:
    """Return the stacks of every live thread, current thread first."""

    names = {thread.ident: thread.name for thread in threading.enumerate()}
    current = threading.get_ident()
    frames = sys._current_frames()
    ordered = sorted(frames.items(), key=lambda item: item[0] != current)
    parts = []
    for ident, frame in ordered:
        parts.append(f"\nthread {names.get(ident, '?')} ({ident}):\n")
        parts.append(_render_frames(traceback.extract_stack(frame)))
    return "".join(parts)


class SeverityRouter:
    """Route log calls into cascading per-severity sinks.

    Parameters
    ----------
    gate:
        Verbosity gate consulted for debug calls.
    formatter:
        Renders a record into the bytes shared by every sink.
    sinks:
        One sink per severity. Missing tiers are simply skipped, which is how
        ``only_log_to_stderr`` is expressed.
    console:
        Standard-error output and fallback path.
    clock:
        Source of record timestamps.
    pid:
        Process id rendered into headers.
    also_to_stderr:
        Copy every record to the console as well.
    stderr_threshold:
        Records at or above this severity are copied to the console.
    trace_location:
        Optional ``file.py:line`` whose records carry a stack trace.
    terminate:
        Called with the exit status after a FATAL record; defaults to flushing
        and ending the process.
    on_failure:
        Called with the error after a file could not be opened or written;
        defaults to reporting it, flushing and exiting with status 2.
    stats:
        Counters updated for every emitted record.
    diagnostic:
        Optional ``(event, payload)`` hook told about write failures.
    """

    def __init__(
        self,
        *,
        gate: VerbosityGate,
        formatter: FormatterPort,
        sinks: Mapping[Severity, SinkPort],
        console: ConsolePort,
        clock: ClockPort,
        pid: int,
        also_to_stderr: bool = False,
        stderr_threshold: Severity = Severity.ERROR,
        trace_location: str = "",
        terminate: TerminateHandler | None = None,
        on_failure: FailureHandler | None = None,
        stats: SeverityStats | None = None,
        diagnostic: DiagnosticHook = None,
    ) -> None:
        self.gate = gate
        self._formatter = formatter
        self._sinks = dict(sinks)
        self._console = console
        self._clock = clock
        self._pid = pid
        self._also_to_stderr = also_to_stderr
        self._stderr_threshold = stderr_threshold
        self._trace_location = parse_trace_location(trace_location)
        self._terminate = terminate if terminate is not None else self._exit_process
        self._on_failure = on_failure if on_failure is not None else self._fail_process
        self.stats = stats if stats is not None else SeverityStats()
        self._diagnostic = diagnostic
        self._lock = threading.Lock()
        self._local = threading.local()
        self._closed = False

    @property
    def closed(self) -> bool:
        """Return ``True`` once :meth:`close` ran; records then go to stderr."""

        return self._closed

    @property
    def sinks(self) -> Mapping[Severity, SinkPort]:
        """Return the sinks keyed by severity (read-only view)."""

        return MappingProxyType(self._sinks)

    @property
    def trace_location(self) -> str | None:
        """Return the active ``file.py:line`` trace location, if any."""

        return self._trace_location

    def set_trace_location(self, text: str) -> None:
        """Install (or clear with ``""``) the trace location."""

        self._trace_location = parse_trace_location(text)

    def set_stderr_threshold(self, severity: Severity) -> None:
        """Change the severity from which records are copied to stderr."""

        self._stderr_threshold = severity

    def verbose(self, level: int, module: str) -> bool:
        """Return ``True`` when a debug call at ``level`` from ``module`` is emitted."""

        return self.gate.allows(level, module)

    def emit(
        self,
        severity: Severity,
        message: str,
        *,
        module: str,
        line: int,
        level: int = 0,
        frame: FrameType | None = None,
        exit_mode: bool = False,
    ) -> bool:
        """Emit one record and return ``True`` when it was not gated away.

        Parameters
        ----------
        severity:
            Tier of the record.
        message:
            Fully rendered message text.
        module:
            Source file identity of the call site.
        line:
            Source line of the call site.
        level:
            Verbosity of a debug call; ``0`` marks an ordinary call.
        frame:
            Call-site frame, used for trace-location stacks.
        exit_mode:
            With FATAL, end the process with status 1 and skip the stack dump
            of every thread.
        """

        if level > 0 and not self.gate.allows(level, module):
            return False

        record = LogRecord(severity, self._clock.now(), self._pid, module, line, message)
        data = self._formatter.format(record)

        if getattr(self._local, "busy", False):
            # Emitted from inside the router (e.g. a stdlib warning raised during rotation).
            self._console.emit(severity, data)
            return True

        trace = b""
        location = self._trace_location
        if location is not None and f"{module_basename(module)}:{line}" == location:
            trace = format_stack(frame).encode("utf-8", errors="backslashreplace")
        stacks = b""
        if severity is Severity.FATAL and not exit_mode:
            stacks = format_all_stacks().encode("utf-8", errors="backslashreplace")

        self._local.busy = True
        try:
            with self._lock:
                failure = self._write_locked(record, data, trace, stacks)
        finally:
            self._local.busy = False

        if failure is not None:
            self._report_failure(failure)
        if severity is Severity.FATAL:
            self._terminate(EXIT_CODE if exit_mode else FATAL_EXIT_CODE)
        return True

    def run_exclusive(self, action: Callable[[], T]) -> T:
        """Run ``action`` while holding the sink lock.

        Records emitted by ``action`` on this thread go to stderr.
        """

        self._local.busy = True
        try:
            with self._lock:
                return action()
        finally:
            self._local.busy = False

    def flush(self) -> None:
        """Flush every open sink to durable storage."""

        with self._lock:
            failure = self._flush_locked(self._sinks.values())
        if failure is not None:
            self._report_failure(failure)

    def close(self) -> None:
        """Flush and close every sink; later records go to stderr only."""

        failure: OSError | None = None
        with self._lock:
            if self._closed:
                return
            self._closed = True
            for sink in self._sinks.values():
                try:
                    sink.close()
                except OSError as exc:
                    failure = failure or exc
        if failure is not None:
            self._console.report(f"log: closing files failed: {failure}")

    def _write_locked(self, record: LogRecord, data: bytes, trace: bytes, stacks: bytes) -> OSError | None:
        severity = record.severity
        self.stats.record(severity, len(data))
        if self._closed or not self._sinks:
            self._console.emit(severity, data + trace + stacks)
            return None
        if self._also_to_stderr or severity >= self._stderr_threshold:
            self._console.emit(severity, data)

        failure: OSError | None = None
        written: list[SinkPort] = []
        for tier in severity.cascade():
            sink = self._sinks.get(tier)
            if sink is None:
                continue
            payload = data + trace if tier is Severity.INFO else data
            try:
                sink.write(payload, record.timestamp)
                if stacks:
                    sink.write(stacks, record.timestamp)
            except OSError as exc:
                if failure is None:
                    failure = exc
                    if not (self._also_to_stderr or severity >= self._stderr_threshold):
                        self._console.emit(severity, data)
                continue
            written.append(sink)

        if severity >= Severity.ERROR:
            flush_failure = self._flush_locked(written)
            failure = failure or flush_failure
        return failure

    def _flush_locked(self, sinks: Any) -> OSError | None:
        failure: OSError | None = None
        for sink in sinks:
            try:
                sink.flush()
            except OSError as exc:
                failure = failure or exc
        return failure

    def _report_failure(self, error: OSError) -> None:
        LOGGER.debug("log write failed: %s", error)
        if self._diagnostic is not None:
            payload: dict[str, Any] = {"error": str(error)}
            if isinstance(error, LogWriteError):
                payload["severity"] = error.severity
                payload["path"] = str(error.path) if error.path is not None else None
            self._diagnostic("write_failed", payload)
        self._on_failure(error)

    def _flush_quietly(self) -> None:
        with self._lock:
            failure = self._flush_locked(self._sinks.values())
        if failure is not None:
            self._console.report(f"log: flush failed: {failure}")

    def _exit_process(self, code: int) -> None:
        self._flush_quietly()
        os._exit(code)

    def _fail_process(self, error: OSError) -> None:
        self._console.report(f"log: exiting because of error: {error}")
        self._flush_quietly()
        os._exit(FAILURE_EXIT_CODE)


__all__ = [
    "DiagnosticHook",
    "FailureHandler",
    "SeverityRouter",
    "TerminateHandler",
    "format_all_stacks",
    "format_stack",
]
