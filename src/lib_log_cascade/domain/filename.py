"""Bidirectional log file naming.

Purpose
-------
Encode ``(program, host, user, severity, timestamp, disambiguator)`` into a
file name and decode the timestamp back out of it. Rotation produces names
through :meth:`LogFileNamer.file_name`; the retention sweeper recognises its
own files through :meth:`LogFileNamer.prefix` and :func:`extract_timestamp`,
so both directions share one rule.

Format
------
``{program}.{host}.{user}.log.{SEVERITY}.{YYYYMMDD-HHMMSS}.{disambiguator}``,
optionally followed by ``.gz`` or a backup suffix. The current pointer of a
severity is named ``{program}.{SEVERITY}``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime

from .severity import Severity

TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"

_TIMESTAMP_RE = re.compile(r"\d{8}-\d{6}")
_TIMESTAMP_LEN = len("20060102-150405")


def short_hostname(hostname: str) -> str:
    """Return ``hostname`` without its domain part.

    >>> short_hostname("host.example.com")
    'host'
    >>> short_hostname("")
    ''
    """

    return hostname.split(".", 1)[0]


def format_timestamp(moment: datetime) -> str:
    """Render ``moment`` the way it appears in file names."""

    return moment.strftime(TIMESTAMP_FORMAT)


def extract_timestamp(file_name: str, prefix: str) -> str:
    """Return the ``YYYYMMDD-HHMMSS`` part of ``file_name`` or ``""``.

    The name must start with ``prefix`` and continue with a severity name and
    a complete timestamp. Anything after the timestamp (disambiguator,
    ``.gz``, backup suffixes) is ignored.

    >>> p = "prog.host.user.log."
    >>> extract_timestamp(p + "WARNING.20171202-210922.13848.gz", p)
    '20171202-210922'
    >>> extract_timestamp(p + "WARNING.20171202-21092", p)
    ''
    >>> extract_timestamp("WARNING.20171202-210922.1", p)
    ''
    """

    if not file_name.startswith(prefix):
        return ""
    severity, _, tail = file_name[len(prefix) :].partition(".")
    if severity not in Severity.__members__:
        return ""
    timestamp = tail[:_TIMESTAMP_LEN]
    if not _TIMESTAMP_RE.fullmatch(timestamp):
        return ""
    if len(tail) > _TIMESTAMP_LEN and tail[_TIMESTAMP_LEN] != ".":
        return ""
    return timestamp


def parse_timestamp(file_name: str, prefix: str) -> datetime | None:
    """Return the decoded timestamp of ``file_name`` or ``None``."""

    text = extract_timestamp(file_name, prefix)
    if not text:
        return None
    try:
        return datetime.strptime(text, TIMESTAMP_FORMAT)
    except ValueError:
        return None


@dataclass(slots=True, frozen=True)
class LogFileNamer:
    """Naming rule for one process identity.

    Attributes
    ----------
    program:
        Base name of the running program.
    host:
        Short host name.
    user:
        Login name of the process owner.
    """

    program: str
    host: str
    user: str

    def prefix(self) -> str:
        """Return the prefix shared by every log file of this identity."""

        return f"{self.program}.{self.host}.{self.user}.log."

    def file_name(self, severity: Severity, moment: datetime, disambiguator: int) -> str:
        """Return the name of a log file opened at ``moment``.

        >>> namer = LogFileNamer("prog", "host", "user")
        >>> namer.file_name(Severity.INFO, datetime(2017, 12, 2, 13, 21, 13), 2841)
        'prog.host.user.log.INFO.20171202-132113.2841'
        """

        return f"{self.prefix()}{severity.name}.{format_timestamp(moment)}.{disambiguator}"

    def pointer_name(self, severity: Severity) -> str:
        """Return the stable name of the current pointer for ``severity``."""

        return f"{self.program}.{severity.name}"

    def pointer_names(self) -> frozenset[str]:
        """Return the pointer names of every severity."""

        return frozenset(self.pointer_name(severity) for severity in Severity)


__all__ = [
    "LogFileNamer",
    "TIMESTAMP_FORMAT",
    "extract_timestamp",
    "format_timestamp",
    "parse_timestamp",
    "short_hostname",
]
