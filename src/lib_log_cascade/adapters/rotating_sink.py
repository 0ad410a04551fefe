"""Per-severity log file with size and calendar rotation.

Purpose
-------
Own the open file of one severity tier, count the bytes written to it and
swap it for a fresh file when the :class:`RotationPolicy` says so.

Contents
--------
* :class:`RotatingSink` – lazily opened, self-rotating file sink.

System Role
-----------
Implements :class:`lib_log_cascade.application.ports.sink.SinkPort`. The
router calls every method while holding its single lock, so measuring,
deciding, rotating and writing form one atomic step per record. A sink object
lives for the whole context; rotation replaces the file inside it.

Lifecycle
---------
``closed`` → first :meth:`write` opens a file → each rotation closes it and
opens the next generation → :meth:`close` ends it. Opening a generation
means: create the file exclusively, write the banner, repoint the current
pointer, and (on rotation only) run the retention sweeper.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Callable, Sequence

from lib_log_cascade.application.ports.sink import SinkPort
from lib_log_cascade.domain.errors import LogWriteError
from lib_log_cascade.domain.filename import LogFileNamer
from lib_log_cascade.domain.interval import Interval
from lib_log_cascade.domain.policy import RotationPolicy
from lib_log_cascade.domain.severity import Severity

from .pointer import CurrentPointer
from .retention import RetentionSweeper

LOGGER = logging.getLogger(__name__)

BannerFactory = Callable[[datetime], bytes]


class RotatingSink(SinkPort):
    """File sink for one severity tier.

    Parameters
    ----------
    severity:
        Tier whose records (and cascaded copies) land in this file.
    namer:
        File naming rule of the process.
    log_dirs:
        Candidate directories, tried in order until a file can be created.
    policy:
        Shared rotation limits.
    pid:
        Process id; first disambiguator tried for a new file name.
    banner:
        Optional factory for the text written at the top of each file.
    sweeper:
        Optional retention sweeper run after every rotation.
    use_symlink:
        ``False`` forces manifest-file pointers.

    Attributes
    ----------
    nbytes:
        Bytes written to the current file, banner included.
    created:
        Time the current file was opened; ``None`` while closed.
    path:
        Location of the current file; ``None`` while closed.
    """

    def __init__(
        self,
        *,
        severity: Severity,
        namer: LogFileNamer,
        log_dirs: Sequence[Path],
        policy: RotationPolicy,
        pid: int,
        banner: BannerFactory | None = None,
        sweeper: RetentionSweeper | None = None,
        use_symlink: bool = True,
    ) -> None:
        if not log_dirs:
            raise ValueError("at least one log directory is required")
        self.severity = severity
        self._namer = namer
        self._log_dirs = [Path(directory) for directory in log_dirs]
        self._policy = policy
        self._pid = pid
        self._banner = banner
        self._sweeper = sweeper
        self._use_symlink = use_symlink
        self._file: BinaryIO | None = None
        self.nbytes = 0
        self.created: datetime | None = None
        self.path: Path | None = None

    @property
    def is_open(self) -> bool:
        """Return ``True`` while a file is attached."""

        return self._file is not None

    def should_rotate(self, pending_len: int, now: datetime) -> bool:
        """Decide whether writing ``pending_len`` more bytes needs a new file.

        Calendar rotation takes precedence: with an interval configured the
        file rotates once ``now`` reaches the first boundary after
        :attr:`created`. Otherwise the file rotates when it already holds at
        least ``min_size`` bytes and the pending write would push it past
        ``max_size``.
        """

        if self.created is None:
            return False
        policy = self._policy
        if policy.interval is not Interval.NEVER:
            boundary = policy.interval.next_boundary(self.created)
            return boundary is not None and now >= boundary
        if policy.max_size > 0:
            return self.nbytes >= policy.min_size and self.nbytes + pending_len > policy.max_size
        return False

    def write(self, data: bytes, now: datetime) -> None:
        """Append ``data``, opening or rotating the file first when needed."""

        if self._file is None:
            self._open(now)
        elif self.should_rotate(len(data), now):
            self.rotate(now)
        handle = self._file
        if handle is None:
            raise LogWriteError(f"no open {self.severity.name} log file", severity=self.severity.name, path=self.path)
        try:
            handle.write(data)
        except OSError as exc:
            raise LogWriteError(f"write to {self.path} failed: {exc}", severity=self.severity.name, path=self.path) from exc
        self.nbytes += len(data)

    def rotate(self, now: datetime) -> None:
        """Close the current file and start the next generation at ``now``."""

        self._release()
        self._open(now)
        if self._sweeper is not None and self._sweeper.enabled:
            self._sweeper.sweep(now)

    def flush(self) -> None:
        """Flush buffered bytes and ``fsync`` the file."""

        if self._file is None:
            return
        try:
            self._file.flush()
            os.fsync(self._file.fileno())
        except OSError as exc:
            raise LogWriteError(f"flush of {self.path} failed: {exc}", severity=self.severity.name, path=self.path) from exc

    def close(self) -> None:
        """Flush and close the file; later calls are no-ops."""

        if self._file is None:
            return
        try:
            self.flush()
        finally:
            self._release()

    def _release(self) -> None:
        handle, self._file = self._file, None
        if handle is None:
            return
        try:
            handle.close()
        except OSError as exc:
            LOGGER.warning("closing %s failed: %s", self.path, exc)

    def _open(self, now: datetime) -> None:
        failures: list[str] = []
        for directory in self._log_dirs:
            try:
                path, handle = self._create(directory, now)
            except OSError as exc:
                failures.append(f"{directory}: {exc}")
                continue
            self._attach(directory, path, handle, now)
            return
        raise LogWriteError(
            f"cannot create {self.severity.name} log file ({'; '.join(failures)})",
            severity=self.severity.name,
        )

    def _create(self, directory: Path, now: datetime) -> tuple[Path, BinaryIO]:
        disambiguator = self._pid
        while True:
            path = directory / self._namer.file_name(self.severity, now, disambiguator)
            try:
                return path, open(path, "xb")
            except FileExistsError:
                disambiguator += 1

    def _attach(self, directory: Path, path: Path, handle: BinaryIO, now: datetime) -> None:
        self._file = handle
        self.path = path
        self.created = now
        self.nbytes = 0
        if self._banner is not None:
            banner = self._banner(now)
            try:
                handle.write(banner)
            except OSError as exc:
                raise LogWriteError(f"write to {path} failed: {exc}", severity=self.severity.name, path=path) from exc
            self.nbytes = len(banner)
        pointer = CurrentPointer(directory, self._namer.pointer_name(self.severity), use_symlink=self._use_symlink)
        try:
            pointer.update(path)
        except OSError as exc:
            LOGGER.warning("updating pointer %s failed: %s", pointer.path, exc)


__all__ = ["RotatingSink"]
