"""Wall-clock rotation intervals.

Contents
--------
* :class:`Interval` enum and :meth:`Interval.next_boundary`.
* :func:`parse_interval` for textual configuration values.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum

from .errors import ConfigurationError


class Interval(Enum):
    """Calendar period after which a log file is rotated."""

    NEVER = "never"
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    def next_boundary(self, created: datetime) -> datetime | None:
        """Return the first period boundary strictly after ``created``.

        Boundaries are the top of the hour, midnight, Monday midnight and the
        first day of the month respectively. ``NEVER`` has no boundary.

        >>> Interval.DAILY.next_boundary(datetime(2017, 12, 4, 0, 0))
        datetime.datetime(2017, 12, 5, 0, 0)
        >>> Interval.MONTHLY.next_boundary(datetime(2017, 12, 4, 13, 30))
        datetime.datetime(2018, 1, 1, 0, 0)
        """

        if self is Interval.NEVER:
            return None
        if self is Interval.HOURLY:
            return created.replace(minute=0, second=0, microsecond=0) + timedelta(hours=1)
        midnight = created.replace(hour=0, minute=0, second=0, microsecond=0)
        if self is Interval.DAILY:
            return midnight + timedelta(days=1)
        if self is Interval.WEEKLY:
            return midnight + timedelta(days=7 - midnight.weekday())
        if midnight.month == 12:
            return midnight.replace(year=midnight.year + 1, month=1, day=1)
        return midnight.replace(month=midnight.month + 1, day=1)


# Hourly rotation is reachable programmatically only.
_PARSEABLE = {
    "never": Interval.NEVER,
    "daily": Interval.DAILY,
    "weekly": Interval.WEEKLY,
    "monthly": Interval.MONTHLY,
}


def parse_interval(text: str) -> Interval:
    """Parse a single interval token, ignoring case.

    >>> parse_interval("WeekLY")
    <Interval.WEEKLY: 'weekly'>
    >>> parse_interval("daily weekly")
    Traceback (most recent call last):
    ...
    lib_log_cascade.domain.errors.ConfigurationError: Unknown rotation interval: 'daily weekly'
    """

    try:
        return _PARSEABLE[text.lower()]
    except KeyError as exc:
        raise ConfigurationError(f"Unknown rotation interval: {text!r}") from exc


__all__ = ["Interval", "parse_interval"]
