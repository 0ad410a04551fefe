"""Bridge from the standard :mod:`logging` module into the severity router.

Purpose
-------
Libraries that log through :mod:`logging` should end up in the same files as
the application. :func:`copy_standard_log_to` installs a handler on the root
logger that forwards every record at one fixed severity, keeping the
originating file and line for the header.

Notes
-----
The root logger's level is left alone; records it filters out never reach the
bridge. At most one bridge is installed per logger: installing a new one
removes the previous handler first.
"""

from __future__ import annotations

import logging
from typing import Callable

from lib_log_cascade.domain.severity import Severity

RouteCallable = Callable[[Severity, str, str, int], None]


class StandardLogHandler(logging.Handler):
    """Forward stdlib records to ``route(severity, message, pathname, lineno)``."""

    def __init__(self, severity: Severity, route: RouteCallable) -> None:
        super().__init__(level=logging.NOTSET)
        self.severity = severity
        self._route = route
        self.setFormatter(logging.Formatter("%(message)s"))

    def handle(self, record: logging.LogRecord) -> bool | logging.LogRecord:  # type: ignore[override]
        """Filter and emit ``record`` without taking the handler lock.

        The router serialises writes under its own lock, and a thread holding
        that lock may log through this handler while another thread waits for
        it here.
        """

        result = self.filter(record)
        if isinstance(result, logging.LogRecord):
            record = result
        if result:
            self.emit(record)
        return result

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
        except Exception:
            self.handleError(record)
            return
        self._route(self.severity, message, record.pathname, record.lineno)


def remove_bridge(logger: logging.Logger | None = None) -> None:
    """Detach every :class:`StandardLogHandler` from ``logger`` (root by default)."""

    target = logger if logger is not None else logging.getLogger()
    for handler in list(target.handlers):
        if isinstance(handler, StandardLogHandler):
            target.removeHandler(handler)
            handler.close()


def copy_standard_log_to(name: str, route: RouteCallable, *, logger: logging.Logger | None = None) -> StandardLogHandler:
    """Route stdlib logging output into the severity named ``name``.

    Raises
    ------
    ConfigurationError
        ``name`` is not one of ``INFO``, ``WARNING``, ``ERROR`` or ``FATAL``;
        nothing is changed in that case.

    Examples
    --------
    >>> seen = []
    >>> demo = logging.getLogger("bridge.demo")
    >>> demo.propagate = False
    >>> handler = copy_standard_log_to("warning", lambda *args: seen.append(args), logger=demo)
    >>> demo.warning("disk %s", "full")
    >>> seen[0][:2]
    (<Severity.WARNING: 1>, 'disk full')
    >>> remove_bridge(demo)
    """

    severity = Severity.from_name(name)
    target = logger if logger is not None else logging.getLogger()
    remove_bridge(target)
    handler = StandardLogHandler(severity, route)
    target.addHandler(handler)
    return handler


__all__ = ["StandardLogHandler", "copy_standard_log_to", "remove_bridge"]
