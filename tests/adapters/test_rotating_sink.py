from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path

import pytest

from lib_log_cascade.adapters.pointer import resolve_pointer
from lib_log_cascade.adapters.retention import RetentionSweeper
from lib_log_cascade.adapters.rotating_sink import RotatingSink
from lib_log_cascade.domain.errors import LogWriteError
from lib_log_cascade.domain.filename import LogFileNamer
from lib_log_cascade.domain.interval import Interval
from lib_log_cascade.domain.policy import RotationPolicy
from lib_log_cascade.domain.severity import Severity

# 2017-12-04 is a Monday.
START = datetime(2017, 12, 4)
NAMER = LogFileNamer("prog", "host", "user")
KIB = 1024
MIB = 1024 * 1024


def _sink(directories: list[Path], policy: RotationPolicy, **kwargs: object) -> RotatingSink:
    return RotatingSink(
        severity=kwargs.pop("severity", Severity.INFO),  # type: ignore[arg-type]
        namer=NAMER,
        log_dirs=directories,
        policy=policy,
        pid=kwargs.pop("pid", 4242),  # type: ignore[arg-type]
        **kwargs,  # type: ignore[arg-type]
    )


@pytest.mark.parametrize(
    "nbytes, now, min_size, max_size, interval, expected",
    [
        pytest.param(0, START, 0, 0, Interval.NEVER, False, id="empty log no rotation"),
        pytest.param(0, START, 0, 0, Interval.HOURLY, False, id="empty log with hourly rotation"),
        pytest.param(0, START, 0, MIB, Interval.NEVER, False, id="empty log with size rotation"),
        pytest.param(1234, START + timedelta(minutes=45), 0, 0, Interval.HOURLY, False, id="hourly before the hour"),
        pytest.param(1234, START + timedelta(minutes=65), 0, 0, Interval.HOURLY, True, id="hourly after the hour"),
        pytest.param(KIB, START, 512 * KIB, MIB, Interval.NEVER, False, id="size below min size"),
        pytest.param(765 * KIB, START, 512 * KIB, MIB, Interval.NEVER, False, id="size between min and max"),
        pytest.param(MIB - 100, START, 512 * KIB, MIB, Interval.NEVER, True, id="size above max"),
        pytest.param(1234, START + timedelta(hours=23), 0, 0, Interval.DAILY, False, id="daily before midnight"),
        pytest.param(1234, START + timedelta(hours=25), 0, 0, Interval.DAILY, True, id="daily after midnight"),
        pytest.param(1234, START + timedelta(days=6, hours=23), 0, 0, Interval.WEEKLY, False, id="weekly before monday"),
        pytest.param(1234, START + timedelta(days=7, hours=1), 0, 0, Interval.WEEKLY, True, id="weekly after monday"),
        pytest.param(1234, START + timedelta(days=14), 0, 0, Interval.MONTHLY, False, id="monthly mid month"),
        pytest.param(1234, START + timedelta(days=30), 0, 0, Interval.MONTHLY, True, id="monthly next month"),
    ],
)
def test_should_rotate(
    tmp_path: Path,
    nbytes: int,
    now: datetime,
    min_size: int,
    max_size: int,
    interval: Interval,
    expected: bool,
) -> None:
    sink = _sink([tmp_path], RotationPolicy(min_size=min_size, max_size=max_size, interval=interval))
    sink.nbytes = nbytes
    sink.created = START

    assert sink.should_rotate(123, now) is expected


def test_interval_rotation_ignores_size_limits(tmp_path: Path) -> None:
    sink = _sink([tmp_path], RotationPolicy(max_size=10, interval=Interval.DAILY))
    sink.nbytes = 10 * MIB
    sink.created = START

    assert sink.should_rotate(123, START + timedelta(hours=1)) is False


def test_closed_sink_never_asks_to_rotate(tmp_path: Path) -> None:
    sink = _sink([tmp_path], RotationPolicy(max_size=1))

    assert sink.should_rotate(10, START) is False
    assert not sink.is_open


def test_first_write_opens_file_writes_banner_and_pointer(tmp_path: Path) -> None:
    sink = _sink([tmp_path], RotationPolicy(), banner=lambda now: b"banner\n")

    sink.write(b"line\n", START)
    sink.close()

    assert sink.path == tmp_path / "prog.host.user.log.INFO.20171204-000000.4242"
    assert sink.path.read_bytes() == b"banner\nline\n"
    assert sink.nbytes == len(b"banner\nline\n")
    assert resolve_pointer(tmp_path / "prog.INFO") == sink.path


def test_size_rotation_starts_a_new_generation(tmp_path: Path) -> None:
    sink = _sink([tmp_path], RotationPolicy(max_size=512))

    sink.write(b"x\n", START)
    first = sink.path
    sink.write(b"y" * 600, START + timedelta(seconds=1))
    second = sink.path
    sink.close()

    assert first != second
    assert first is not None and first.read_bytes() == b"x\n"
    assert second is not None and second.read_bytes() == b"y" * 600
    assert second.name.endswith(".20171204-000001.4242")
    assert sink.nbytes == 600
    assert resolve_pointer(tmp_path / "prog.INFO") == second


def test_same_second_rotation_increments_disambiguator(tmp_path: Path) -> None:
    sink = _sink([tmp_path], RotationPolicy(max_size=4), pid=7)

    sink.write(b"abc\n", START)
    sink.write(b"def\n", START)
    sink.close()

    names = sorted(path.name for path in tmp_path.iterdir() if path.name.startswith(NAMER.prefix()))
    assert names == [
        "prog.host.user.log.INFO.20171204-000000.7",
        "prog.host.user.log.INFO.20171204-000000.8",
    ]


def test_unusable_directory_falls_back_to_the_next(tmp_path: Path) -> None:
    missing = tmp_path / "missing"
    usable = tmp_path / "usable"
    usable.mkdir()
    sink = _sink([missing, usable], RotationPolicy())

    sink.write(b"line\n", START)
    sink.close()

    assert sink.path is not None and sink.path.parent == usable


def test_open_failure_in_every_directory_raises_log_write_error(tmp_path: Path) -> None:
    sink = _sink([tmp_path / "a", tmp_path / "b"], RotationPolicy(), severity=Severity.ERROR)

    with pytest.raises(LogWriteError) as excinfo:
        sink.write(b"line\n", START)

    assert excinfo.value.severity == "ERROR"
    assert "cannot create ERROR log file" in str(excinfo.value)


def test_rotation_runs_the_retention_sweeper(tmp_path: Path) -> None:
    stale = tmp_path / "prog.host.user.log.INFO.20170101-000000.1"
    stale.write_bytes(b"old")
    policy = RotationPolicy(max_size=4, max_age=timedelta(days=30))
    sweeper = RetentionSweeper(log_dirs=[tmp_path], namer=NAMER, policy=policy)
    sink = _sink([tmp_path], policy, sweeper=sweeper)

    sink.write(b"abc\n", START)
    assert stale.exists()
    sink.write(b"def\n", START + timedelta(seconds=1))
    sink.close()

    assert not stale.exists()


def test_close_is_idempotent(tmp_path: Path) -> None:
    sink = _sink([tmp_path], RotationPolicy())
    sink.write(b"line\n", START)

    sink.close()
    sink.close()
    sink.flush()

    assert not sink.is_open


def test_constructor_requires_a_directory() -> None:
    with pytest.raises(ValueError):
        _sink([], RotationPolicy())


def test_write_without_an_open_file_raises_log_write_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    sink = _sink([tmp_path], RotationPolicy())
    monkeypatch.setattr(sink, "_open", lambda now: None)

    with pytest.raises(LogWriteError, match="no open INFO log file"):
        sink.write(b"line\n", START)

    assert sink.nbytes == 0
