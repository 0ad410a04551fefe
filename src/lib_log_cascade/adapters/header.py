"""Header rendering for log lines.

Purpose
-------
Render each record once; the router hands the same bytes to every sink the
record cascades into. New files additionally start with :func:`file_banner`.

Format
------
``<S><MM><DD> <HH>:<MM>:<SS>.<ffffff> <pid> <module>:<line>] <message>\\n``
"""

from __future__ import annotations

import os
import platform
import sys
from datetime import datetime
from typing import Iterable

from lib_log_cascade.application.ports.sink import FormatterPort
from lib_log_cascade.domain.record import LogRecord


def _normalise_root(root: str) -> str:
    path = root.replace("\\", "/").rstrip("/")
    return path + "/" if path else ""


def default_roots() -> list[str]:
    """Return the import roots stripped from module paths in headers."""

    roots = [entry or os.getcwd() for entry in sys.path]
    roots.append(os.getcwd())
    return roots


class HeaderFormatter(FormatterPort):
    """Render :class:`LogRecord` objects into header-prefixed lines.

    Parameters
    ----------
    roots:
        Directory prefixes (build roots, ``sys.path`` entries) removed from
        module paths. The longest matching prefix wins; paths outside every
        root keep their last two components.

    Examples
    --------
    >>> from datetime import datetime
    >>> from lib_log_cascade.domain.severity import Severity
    >>> formatter = HeaderFormatter(roots=["/srv/build/src"])
    >>> record = LogRecord(Severity.INFO, datetime(2006, 1, 2, 15, 4, 5, 67890), 1234,
    ...                    "/srv/build/src/app/server.py", 42, "test")
    >>> formatter.format(record)
    b'I0102 15:04:05.067890 1234 app/server.py:42] test\\n'
    """

    def __init__(self, *, roots: Iterable[str] | None = None) -> None:
        candidates = default_roots() if roots is None else list(roots)
        normalised = {_normalise_root(root) for root in candidates}
        normalised.discard("")
        normalised.discard("/")
        self._roots = sorted(normalised, key=len, reverse=True)
        self._abbreviations: dict[str, str] = {}

    def abbreviate(self, module: str) -> str:
        """Return ``module`` relative to its import root."""

        cached = self._abbreviations.get(module)
        if cached is not None:
            return cached
        path = module.replace("\\", "/")
        short = ""
        for root in self._roots:
            if path.startswith(root) and len(path) > len(root):
                short = path[len(root) :]
                break
        if not short:
            short = "/".join(path.strip("/").split("/")[-2:])
        self._abbreviations[module] = short
        return short

    def header(self, record: LogRecord) -> str:
        """Return the header prefix of ``record`` including the ``"] "``."""

        ts = record.timestamp
        return (
            f"{record.severity.char}{ts.month:02d}{ts.day:02d} "
            f"{ts.hour:02d}:{ts.minute:02d}:{ts.second:02d}.{ts.microsecond:06d} "
            f"{record.pid} {self.abbreviate(record.module)}:{record.line}] "
        )

    def format(self, record: LogRecord) -> bytes:
        """Return the complete line for ``record`` with one trailing newline."""

        text = self.header(record) + record.message
        if not text.endswith("\n"):
            text += "\n"
        return text.encode("utf-8", errors="backslashreplace")


LINE_FORMAT = "[IWEF]mmdd hh:mm:ss.uuuuuu pid file:line] msg"


def file_banner(created: datetime, host: str) -> bytes:
    """Return the banner written at the top of every new log file.

    >>> print(file_banner(datetime(2006, 1, 2, 15, 4, 5), "host").decode().splitlines()[0])
    Log file created at: 2006/01/02 15:04:05
    """

    interpreter = f"{platform.python_implementation()} {platform.python_version()}"
    lines = (
        f"Log file created at: {created:%Y/%m/%d %H:%M:%S}",
        f"Running on machine: {host}",
        f"Binary: {interpreter} for {sys.platform}/{platform.machine()}",
        f"Log line format: {LINE_FORMAT}",
    )
    return ("\n".join(lines) + "\n").encode("utf-8", errors="backslashreplace")


__all__ = ["HeaderFormatter", "LINE_FORMAT", "default_roots", "file_banner"]
