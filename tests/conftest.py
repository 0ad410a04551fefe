from __future__ import annotations

from datetime import datetime, timedelta
from io import StringIO
from typing import Callable

import pytest
from rich.console import Console

from lib_log_cascade.adapters.header import HeaderFormatter
from lib_log_cascade.application.use_cases.route import SeverityRouter
from lib_log_cascade.domain.severity import Severity
from lib_log_cascade.domain.verbosity import VerbosityGate

FROZEN_NOW = datetime(2006, 1, 2, 15, 4, 5, 67890)
FROZEN_PID = 1234


class FrozenClock:
    def __init__(self, moment: datetime = FROZEN_NOW) -> None:
        self.moment = moment

    def now(self) -> datetime:
        return self.moment

    def advance(self, delta: timedelta) -> None:
        self.moment += delta


class MemorySink:
    def __init__(self, *, fail: bool = False) -> None:
        self.writes: list[bytes] = []
        self.flushes = 0
        self.closed = False
        self.fail = fail

    def write(self, data: bytes, now: datetime) -> None:
        if self.fail:
            raise OSError("disk full")
        self.writes.append(data)

    def flush(self) -> None:
        self.flushes += 1

    def close(self) -> None:
        self.closed = True

    @property
    def text(self) -> str:
        return b"".join(self.writes).decode("utf-8")


class RecordingConsole:
    def __init__(self) -> None:
        self.lines: list[tuple[Severity, bytes]] = []
        self.reports: list[str] = []

    def emit(self, severity: Severity, data: bytes) -> None:
        self.lines.append((severity, data))

    def report(self, text: str) -> None:
        self.reports.append(text)


@pytest.fixture
def record_console() -> Console:
    return Console(file=StringIO(), record=True, width=200)


@pytest.fixture
def frozen_clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def memory_sinks() -> dict[Severity, MemorySink]:
    return {severity: MemorySink() for severity in Severity}


@pytest.fixture
def recording_console() -> RecordingConsole:
    return RecordingConsole()


@pytest.fixture
def terminations() -> list[int]:
    return []


@pytest.fixture
def failures() -> list[OSError]:
    return []


@pytest.fixture
def make_router(
    memory_sinks: dict[Severity, MemorySink],
    recording_console: RecordingConsole,
    frozen_clock: FrozenClock,
    terminations: list[int],
    failures: list[OSError],
) -> Callable[..., SeverityRouter]:
    def factory(**overrides: object) -> SeverityRouter:
        options: dict[str, object] = {
            "gate": VerbosityGate(),
            "formatter": HeaderFormatter(roots=["/srv/build/src"]),
            "sinks": memory_sinks,
            "console": recording_console,
            "clock": frozen_clock,
            "pid": FROZEN_PID,
            "terminate": terminations.append,
            "on_failure": failures.append,
        }
        options.update(overrides)
        return SeverityRouter(**options)  # type: ignore[arg-type]

    return factory
