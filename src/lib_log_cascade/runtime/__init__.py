"""Runtime façade owning one logging context.

Purpose
-------
Expose the stable entry point host applications use instead of importing the
inner layers directly: build a :class:`LoggingContext` from a
:class:`LoggingConfig`, hand out :class:`ModuleLogger` objects, reconfigure
verbosity at runtime and shut down deterministically.

Contents
--------
* :class:`LoggingContext` – explicit, isolated logging state.
* :class:`ModuleLogger` / :class:`Verbose` – call-site façade.
* :class:`SystemClock` – default clock port.

System Role
-----------
Outer shell of the clean architecture. State lives in the context object
rather than module globals, so tests and embedded libraries can run several
contexts side by side and close each one explicitly.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from types import TracebackType
from typing import Iterable, Mapping

from lib_log_cascade.adapters import SweepReport, copy_standard_log_to, remove_bridge
from lib_log_cascade.adapters.stdlib_bridge import StandardLogHandler
from lib_log_cascade.application.ports import ClockPort, ConsolePort
from lib_log_cascade.application.use_cases.route import DiagnosticHook, FailureHandler, SeverityRouter, TerminateHandler
from lib_log_cascade.application.use_cases.shutdown import create_shutdown
from lib_log_cascade.config import LoggingConfig, parse_module_spec
from lib_log_cascade.domain import Severity
from lib_log_cascade.domain.stats import OutputStats

from ._composition import ContextParts, build_context_parts
from ._factories import SystemClock
from ._logger import ModuleLogger, Verbose


class LoggingContext:
    """Live logging state built from one :class:`LoggingConfig`.

    Use :meth:`from_config` rather than the constructor. The context is a
    context manager; leaving the ``with`` block flushes and closes all files.

    Examples
    --------
    >>> import tempfile
    >>> from pathlib import Path
    >>> directory = Path(tempfile.mkdtemp())
    >>> config = LoggingConfig(log_dirs=(directory,), program="demo")
    >>> with LoggingContext.from_config(config, host="host", user="user") as context:
    ...     context.logger("app/server.py").info("listening on %d", 8080)
    >>> (directory / "demo.INFO").exists()
    True
    """

    def __init__(self, parts: ContextParts) -> None:
        self._parts = parts
        self._router = parts.router
        self._bridge: StandardLogHandler | None = None
        self._shutdown = create_shutdown(router=self._router, detach_bridge=self._detach_bridge)
        if parts.config.standard_log_target:
            self.copy_standard_log_to(parts.config.standard_log_target)

    @classmethod
    def from_config(
        cls,
        config: LoggingConfig | None = None,
        *,
        console: ConsolePort | None = None,
        clock: ClockPort | None = None,
        terminate: TerminateHandler | None = None,
        on_failure: FailureHandler | None = None,
        diagnostic: DiagnosticHook = None,
        pid: int | None = None,
        host: str | None = None,
        user: str | None = None,
    ) -> "LoggingContext":
        """Compose a context; ``config`` defaults to :meth:`LoggingConfig.from_env`.

        Parameters
        ----------
        console / clock:
            Replace the Rich stderr console and the system clock.
        terminate:
            Called with the exit status after ``fatal``/``exit`` records.
        on_failure:
            Called when a log file cannot be opened or written.
        diagnostic:
            Optional ``(event, payload)`` hook for write and sweep failures.
        pid / host / user:
            Override the identity rendered into headers and file names.
        """

        resolved = config if config is not None else LoggingConfig.from_env()
        parts = build_context_parts(
            resolved,
            console=console,
            clock=clock,
            terminate=terminate,
            on_failure=on_failure,
            diagnostic=diagnostic,
            pid=pid,
            host=host,
            user=user,
        )
        return cls(parts)

    @property
    def config(self) -> LoggingConfig:
        return self._parts.config

    @property
    def router(self) -> SeverityRouter:
        return self._router

    @property
    def stats(self) -> Mapping[Severity, OutputStats]:
        """Return lines and bytes emitted per severity so far."""

        return self._router.stats.snapshot()

    def current_file(self, severity: Severity) -> Path | None:
        """Return the file most recently opened for ``severity``, if any."""

        return getattr(self._router.sinks.get(severity), "path", None)

    def logger(self, module: str) -> ModuleLogger:
        """Return a logger bound to ``module`` (pass ``__file__`` or ``__name__``)."""

        return ModuleLogger(self._router, module)

    def set_verbosity(self, level: int) -> None:
        """Replace the global verbosity."""

        self._router.gate.set_global_level(level)

    def set_module_overrides(self, overrides: str | Iterable[tuple[str, int]]) -> None:
        """Replace every per-module override at once.

        ``overrides`` is either a ``"pattern=N,..."`` string or ``(pattern,
        level)`` pairs. Invalid input leaves the previous overrides in place.
        """

        pairs = parse_module_spec(overrides) if isinstance(overrides, str) else tuple(overrides)
        self._router.gate.set_overrides(pairs)

    def set_trace_location(self, location: str) -> None:
        """Install ``file.py:line`` as trace location; ``""`` clears it."""

        self._router.set_trace_location(location)

    def set_stderr_threshold(self, severity: Severity | str) -> None:
        """Copy records at or above ``severity`` to stderr."""

        resolved = Severity.from_name(severity) if isinstance(severity, str) else severity
        self._router.set_stderr_threshold(resolved)

    def copy_standard_log_to(self, severity_name: str) -> None:
        """Route stdlib :mod:`logging` records into ``severity_name``."""

        self._bridge = copy_standard_log_to(severity_name, self._route_standard_record)

    def sweep(self, now: datetime | None = None) -> SweepReport:
        """Apply the retention policy now instead of waiting for a rotation."""

        moment = now if now is not None else SystemClock().now()
        return self._router.run_exclusive(lambda: self._parts.sweeper.sweep(moment))

    def flush(self) -> None:
        """Make every accepted byte durable."""

        self._router.flush()

    def close(self) -> None:
        """Detach the stdlib bridge, flush and close every file."""

        self._shutdown()

    def __enter__(self) -> "LoggingContext":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _route_standard_record(self, severity: Severity, message: str, pathname: str, lineno: int) -> None:
        self._router.emit(severity, message, module=pathname, line=lineno)

    def _detach_bridge(self) -> None:
        if self._bridge is not None:
            remove_bridge()
            self._bridge = None


__all__ = ["LoggingContext", "ModuleLogger", "SystemClock", "Verbose"]
