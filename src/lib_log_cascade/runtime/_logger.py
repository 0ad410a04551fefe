"""Call-site façade bound to one module identity.

Purpose
-------
Give application code ``log.info(...)`` style calls while the router stays a
plain use case. A :class:`ModuleLogger` carries the module identity used for
verbosity gating and header rendering; the source line is read from the
caller's frame only once a record is actually emitted.

Contents
--------
* :class:`ModuleLogger` – ``info``/``warning``/``error``/``fatal``/``exit``
  plus ``v(level)``.
* :class:`Verbose` – truthy handle returned by :meth:`ModuleLogger.v`.
"""

from __future__ import annotations

import sys
from typing import Any

from lib_log_cascade.application.use_cases.route import SeverityRouter
from lib_log_cascade.domain.patterns import SOURCE_SUFFIX, normalize_module
from lib_log_cascade.domain.severity import Severity


def _identity(module: str) -> str:
    if "/" in module or "\\" in module or module.endswith((SOURCE_SUFFIX, ".pyc")):
        return module
    return normalize_module(module)


def _render(msg: object, args: tuple[Any, ...]) -> str:
    text = str(msg)
    return text % args if args else text


class ModuleLogger:
    """Logger bound to a module identity (``__file__`` or ``__name__``).

    Messages use lazy ``%``-style arguments like :mod:`logging`. Every method
    accepts ``depth`` to attribute the record to an outer caller, which helps
    logging helpers report their caller's line instead of their own.
    """

    def __init__(self, router: SeverityRouter, module: str) -> None:
        self._router = router
        self.module = _identity(module)

    def info(self, msg: object, *args: Any, depth: int = 0) -> None:
        """Log at INFO."""
        self._log(Severity.INFO, msg, args, depth)

    def warning(self, msg: object, *args: Any, depth: int = 0) -> None:
        """Log at WARNING."""
        self._log(Severity.WARNING, msg, args, depth)

    def error(self, msg: object, *args: Any, depth: int = 0) -> None:
        """Log at ERROR; the written files are flushed before returning."""
        self._log(Severity.ERROR, msg, args, depth)

    def fatal(self, msg: object, *args: Any, depth: int = 0) -> None:
        """Log at FATAL with every thread's stack, then terminate (status 255)."""
        self._log(Severity.FATAL, msg, args, depth)

    def exit(self, msg: object, *args: Any, depth: int = 0) -> None:
        """Log at FATAL without stack dumps, then terminate with status 1."""
        self._log(Severity.FATAL, msg, args, depth, exit_mode=True)

    def v(self, level: int) -> "Verbose":
        """Return a handle that logs at INFO only when ``level`` is enabled here.

        ``if log.v(2): ...`` skips building expensive messages entirely.
        """
        return Verbose(self, level, self._router.verbose(level, self.module))

    def _log(
        self,
        severity: Severity,
        msg: object,
        args: tuple[Any, ...],
        depth: int,
        *,
        level: int = 0,
        exit_mode: bool = False,
    ) -> None:
        # Frames: 0 is _log, 1 the public method, 2 its caller.
        frame = sys._getframe(2 + depth)
        self._router.emit(
            severity,
            _render(msg, args),
            module=self.module,
            line=frame.f_lineno,
            level=level,
            frame=frame,
            exit_mode=exit_mode,
        )


class Verbose:
    """Result of :meth:`ModuleLogger.v`; falsy when the level is gated off."""

    __slots__ = ("_logger", "level", "enabled")

    def __init__(self, logger: ModuleLogger, level: int, enabled: bool) -> None:
        self._logger = logger
        self.level = level
        self.enabled = enabled

    def __bool__(self) -> bool:
        return self.enabled

    def info(self, msg: object, *args: Any, depth: int = 0) -> None:
        """Log at INFO when enabled."""
        if self.enabled:
            self._logger._log(Severity.INFO, msg, args, depth, level=self.level)


__all__ = ["ModuleLogger", "Verbose"]
