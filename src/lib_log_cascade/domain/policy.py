"""Process-wide rotation and retention policy."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from .interval import Interval


@dataclass(slots=True, frozen=True)
class RotationPolicy:
    """Read-only limits shared by every sink and the retention sweeper.

    Attributes
    ----------
    min_size:
        Size floor in bytes below which size-based rotation never fires.
    max_size:
        Size cap in bytes; ``0`` disables size-based rotation.
    interval:
        Calendar rotation period. Size-based rotation only applies when this
        is :attr:`Interval.NEVER`.
    max_age:
        Rotated files older than this are deleted; zero keeps them forever.
    max_total_size:
        Cap on the combined size of a directory's log files; ``0`` disables it.
    compress:
        Gzip rotated files that survive the retention limits.
    """

    min_size: int = 0
    max_size: int = 1024 * 1024 * 1800
    interval: Interval = Interval.NEVER
    max_age: timedelta = timedelta(0)
    max_total_size: int = 0
    compress: bool = False

    def __post_init__(self) -> None:
        for name in ("min_size", "max_size", "max_total_size"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")
        if self.max_age < timedelta(0):
            raise ValueError("max_age must not be negative")


__all__ = ["RotationPolicy"]
