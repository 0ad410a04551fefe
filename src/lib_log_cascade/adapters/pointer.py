"""Stable "current file" pointers per severity.

Purpose
-------
Operators tail ``{program}.{SEVERITY}`` instead of hunting for the newest
timestamped file. The pointer is a relative symlink; on filesystems or
platforms without symlink support it degrades to a tiny manifest file of the
same name holding the target's file name. Rotation and retention treat both
forms identically through :func:`resolve_pointer`.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

LOGGER = logging.getLogger(__name__)

MANIFEST_MAX_BYTES = 4096


def resolve_pointer(link: Path) -> Path | None:
    """Return the file ``link`` points at, or ``None`` when it is unusable."""

    try:
        if link.is_symlink():
            return link.parent / os.readlink(link)
        if not link.is_file() or link.stat().st_size > MANIFEST_MAX_BYTES:
            return None
        target = link.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError):
        return None
    if not target or "/" in target or "\\" in target:
        return None
    return link.parent / target


class CurrentPointer:
    """Pointer named ``name`` inside ``directory``.

    Parameters
    ----------
    directory:
        Log directory holding both the pointer and its targets.
    name:
        Fixed pointer name, independent of timestamps.
    use_symlink:
        Try a symlink first; ``False`` forces the manifest form.
    """

    def __init__(self, directory: Path, name: str, *, use_symlink: bool = True) -> None:
        self.path = Path(directory) / name
        self._use_symlink = use_symlink

    def update(self, target: Path) -> None:
        """Repoint at ``target``.

        The old pointer is removed before the new one is created: readers may
        briefly find no pointer, but never one naming a stale file.
        """

        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        if self._use_symlink:
            try:
                os.symlink(target.name, self.path)
                return
            except (OSError, NotImplementedError) as exc:
                LOGGER.debug("symlink %s unavailable (%s); writing manifest pointer", self.path, exc)
                self._use_symlink = False
        self.path.write_text(target.name + "\n", encoding="utf-8")

    def resolve(self) -> Path | None:
        """Return the current target file, if any."""

        return resolve_pointer(self.path)


__all__ = ["CurrentPointer", "resolve_pointer"]
