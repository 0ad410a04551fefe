"""Retention sweep and compression for rotated log files.

Purpose
-------
Enforce the age, total-size and compression limits of :class:`RotationPolicy`
on the files a process has rotated away from, without touching anything it
does not own.

Contents
--------
* :func:`gzip_file` – compress one file in place, keeping the original on
  failure.
* :class:`RetentionSweeper` – directory scan and policy enforcement.
* :class:`SweepReport` – what a sweep deleted, compressed and skipped.

System Role
-----------
Runs synchronously at the end of every rotation (inside the router lock) and
on demand from the operator CLI. Each directory is listed once; entries are
classified as foreign (other programs, hosts or users), current (a pointer or
a pointer's target) or candidate. Only candidates are ever deleted or
compressed, and a failure on one file never stops the sweep.
"""

from __future__ import annotations

import gzip
import logging
import os
import shutil
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterable, Sequence

from lib_log_cascade.domain.filename import LogFileNamer, parse_timestamp
from lib_log_cascade.domain.policy import RotationPolicy

from .pointer import resolve_pointer

LOGGER = logging.getLogger(__name__)

GZIP_SUFFIX = ".gz"
PARTIAL_SUFFIX = ".tmp"

DiagnosticHook = Callable[[str, dict[str, Any]], None] | None


def gzip_file(path: str | os.PathLike[str]) -> Path:
    """Compress ``path`` into ``path + ".gz"`` and remove the original.

    The archive is written under a temporary name and only renamed into place
    once it has been closed successfully. On any failure the partial archive
    is removed, the original stays intact and the error propagates.

    Returns
    -------
    Path
        Location of the finished archive.
    """

    source = Path(path)
    target = source.with_name(source.name + GZIP_SUFFIX)
    partial = source.with_name(target.name + PARTIAL_SUFFIX)
    try:
        with source.open("rb") as reader, gzip.open(partial, "wb") as writer:
            shutil.copyfileobj(reader, writer)
        if partial.stat().st_size == 0:
            raise OSError(f"compressed archive for {source} is empty")
        os.replace(partial, target)
    except BaseException:
        try:
            partial.unlink()
        except FileNotFoundError:
            pass
        raise
    source.unlink()
    return target


@dataclass(slots=True, frozen=True)
class _Candidate:
    path: Path
    timestamp: datetime
    size: int


@dataclass(slots=True)
class SweepReport:
    """Outcome of one sweep."""

    deleted: list[Path] = field(default_factory=list)
    compressed: list[Path] = field(default_factory=list)
    failed: list[tuple[Path, str]] = field(default_factory=list)


class RetentionSweeper:
    """Apply a :class:`RotationPolicy` to the log directories of one process.

    Parameters
    ----------
    log_dirs:
        Directories to sweep; each is handled independently.
    namer:
        Naming rule of this process; its prefix defines ownership.
    policy:
        Age, size and compression limits.
    diagnostic:
        Optional ``(event, payload)`` callback told about every per-file
        failure (event ``"sweep_failed"``).
    """

    def __init__(
        self,
        *,
        log_dirs: Sequence[Path],
        namer: LogFileNamer,
        policy: RotationPolicy,
        diagnostic: DiagnosticHook = None,
    ) -> None:
        self._log_dirs = [Path(directory) for directory in log_dirs]
        self._namer = namer
        self._policy = policy
        self._diagnostic = diagnostic

    @property
    def enabled(self) -> bool:
        """Return ``True`` when the policy asks for any retention work."""

        policy = self._policy
        return bool(policy.max_age) or policy.max_total_size > 0 or policy.compress

    def sweep(self, now: datetime) -> SweepReport:
        """Enforce the policy on every directory relative to ``now``."""

        report = SweepReport()
        for directory in self._log_dirs:
            self._sweep_directory(directory, now, report)
        return report

    def _sweep_directory(self, directory: Path, now: datetime, report: SweepReport) -> None:
        try:
            with os.scandir(directory) as listing:
                entries = list(listing)
        except OSError as exc:
            self._fail(report, directory, exc)
            return

        candidates = self._classify(directory, entries)
        survivors = self._expire(candidates, now, report)
        survivors = self._cap_total_size(survivors, report)
        if self._policy.compress:
            self._compress(survivors, report)

    def _classify(self, directory: Path, entries: Iterable[os.DirEntry[str]]) -> list[_Candidate]:
        pointer_names = self._namer.pointer_names()
        protected: set[str] = set()
        for entry in entries:
            if entry.name in pointer_names:
                target = resolve_pointer(Path(entry.path))
                if target is not None:
                    protected.add(target.name)

        prefix = self._namer.prefix()
        candidates: list[_Candidate] = []
        for entry in entries:
            name = entry.name
            if not name.startswith(prefix) or name in protected or name in pointer_names:
                continue
            if name.endswith(PARTIAL_SUFFIX):
                continue
            timestamp = parse_timestamp(name, prefix)
            if timestamp is None:
                continue
            try:
                if not entry.is_file(follow_symlinks=False):
                    continue
                size = entry.stat(follow_symlinks=False).st_size
            except OSError:
                continue
            candidates.append(_Candidate(directory / name, timestamp, size))
        return candidates

    def _expire(self, candidates: list[_Candidate], now: datetime, report: SweepReport) -> list[_Candidate]:
        if not self._policy.max_age:
            return candidates
        cutoff = now - self._policy.max_age
        survivors: list[_Candidate] = []
        for candidate in candidates:
            if candidate.timestamp < cutoff:
                self._delete(candidate, report)
            else:
                survivors.append(candidate)
        return survivors

    def _cap_total_size(self, candidates: list[_Candidate], report: SweepReport) -> list[_Candidate]:
        newest_first = sorted(candidates, key=lambda item: (item.timestamp, item.path.name), reverse=True)
        limit = self._policy.max_total_size
        if limit <= 0:
            return newest_first
        survivors: list[_Candidate] = []
        total = 0
        exceeded = False
        for candidate in newest_first:
            if not exceeded and total + candidate.size <= limit:
                total += candidate.size
                survivors.append(candidate)
                continue
            exceeded = True
            self._delete(candidate, report)
        return survivors

    def _compress(self, candidates: list[_Candidate], report: SweepReport) -> None:
        for candidate in candidates:
            if candidate.path.name.endswith(GZIP_SUFFIX):
                continue
            try:
                report.compressed.append(gzip_file(candidate.path))
            except FileNotFoundError:
                continue
            except OSError as exc:
                self._fail(report, candidate.path, exc)

    def _delete(self, candidate: _Candidate, report: SweepReport) -> None:
        try:
            candidate.path.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            self._fail(report, candidate.path, exc)
            return
        report.deleted.append(candidate.path)

    def _fail(self, report: SweepReport, path: Path, exc: OSError) -> None:
        report.failed.append((path, str(exc)))
        LOGGER.warning("retention sweep skipped %s: %s", path, exc)
        if self._diagnostic is not None:
            self._diagnostic("sweep_failed", {"path": str(path), "error": str(exc)})


__all__ = ["RetentionSweeper", "SweepReport", "gzip_file"]
