from __future__ import annotations

import logging
import threading
import time
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from lib_log_cascade import LoggingConfig, LoggingContext
from lib_log_cascade.adapters import resolve_pointer
from lib_log_cascade.domain import ConfigurationError, Severity


@pytest.fixture
def make_context(tmp_path: Path, recording_console, frozen_clock):
    created: list[LoggingContext] = []
    terminations: list[int] = []

    def factory(**config_fields: object) -> LoggingContext:
        fields: dict[str, object] = {"log_dirs": (tmp_path,), "program": "demo"}
        fields.update(config_fields)
        context = LoggingContext.from_config(
            LoggingConfig(**fields),  # type: ignore[arg-type]
            console=recording_console,
            clock=frozen_clock,
            terminate=terminations.append,
            pid=4321,
            host="host",
            user="user",
        )
        created.append(context)
        return context

    factory.terminations = terminations  # type: ignore[attr-defined]
    yield factory
    for context in created:
        context.close()


def _read(path: Path | None) -> str:
    assert path is not None
    return path.read_text(encoding="utf-8")


def test_warning_creates_info_and_warning_files_only(make_context, tmp_path: Path) -> None:
    context = make_context()
    log = context.logger("app/server.py")

    log.warning("disk at %d%%", 91)
    context.flush()

    info = context.current_file(Severity.INFO)
    warning = context.current_file(Severity.WARNING)
    assert info is not None and info.name == "demo.host.user.log.INFO.20060102-150405.4321"
    assert warning is not None and warning.name.startswith("demo.host.user.log.WARNING.20060102-150405.")
    assert context.current_file(Severity.ERROR) is None
    assert "W0102 15:04:05.067890 4321 app/server.py:" in _read(info)
    assert "] disk at 91%\n" in _read(warning)
    assert list(tmp_path.glob("demo.host.user.log.ERROR.*")) == []


def test_new_files_start_with_a_banner_and_pointer(make_context, tmp_path: Path) -> None:
    context = make_context()

    context.logger("app/server.py").info("hello")
    context.flush()

    path = context.current_file(Severity.INFO)
    text = _read(path)
    assert text.startswith("Log file created at: 2006/01/02 15:04:05\nRunning on machine: host\n")
    assert "Log line format: [IWEF]mmdd hh:mm:ss.uuuuuu pid file:line] msg\n" in text
    assert resolve_pointer(tmp_path / "demo.INFO") == path


def test_line_numbers_come_from_the_caller(make_context) -> None:
    context = make_context()
    log = context.logger("app/server.py")

    def helper() -> None:
        log.info("from helper", depth=1)

    line = helper.__code__.co_firstlineno + 4
    helper()
    context.flush()

    assert f"app/server.py:{line}] from helper\n" in _read(context.current_file(Severity.INFO))


def test_dotted_module_names_become_paths(make_context) -> None:
    context = make_context(verbosity=0, module_overrides=(("server.py", 2),))
    log = context.logger("app.server")

    assert log.module == "/app/server.py"
    assert bool(log.v(2)) is True
    assert bool(log.v(3)) is False


def test_verbosity_can_be_changed_at_runtime(make_context) -> None:
    context = make_context()
    log = context.logger("app/db/pool.py")

    log.v(1).info("hidden")
    context.set_verbosity(1)
    log.v(1).info("shown")
    context.set_module_overrides("db/*=3")
    log.v(3).info("deep")
    context.set_module_overrides([])
    log.v(3).info("hidden again")
    context.flush()

    text = _read(context.current_file(Severity.INFO))
    assert "hidden" not in text
    assert "] shown\n" in text
    assert "] deep\n" in text


def test_invalid_overrides_keep_the_previous_ones(make_context) -> None:
    context = make_context(module_overrides=(("db/*", 2),))

    with pytest.raises(ConfigurationError):
        context.set_module_overrides("db/*=x")

    assert context.router.gate.allows(2, "/app/db/pool.py") is True


def test_fatal_writes_every_file_then_terminates(make_context) -> None:
    context = make_context()

    context.logger("app/server.py").fatal("giving up")

    assert make_context.terminations == [255]
    for severity in Severity:
        text = _read(context.current_file(severity))
        assert "F0102 15:04:05.067890 4321 app/server.py:" in text
        assert "thread MainThread" in text


def test_exit_terminates_with_status_one(make_context) -> None:
    context = make_context()

    context.logger("app/server.py").exit("usage")

    assert make_context.terminations == [1]
    assert "thread MainThread" not in _read(context.current_file(Severity.FATAL))


def test_stderr_only_mode_creates_no_files(make_context, tmp_path: Path, recording_console) -> None:
    context = make_context(only_log_to_stderr=True)

    context.logger("app/server.py").info("console only")

    assert list(tmp_path.iterdir()) == []
    assert context.current_file(Severity.INFO) is None
    assert recording_console.lines[0][1].endswith(b"] console only\n")


def test_stderr_threshold_accepts_names(make_context, recording_console) -> None:
    context = make_context()
    context.set_stderr_threshold("warning")

    context.logger("app/server.py").warning("copied")

    assert [severity for severity, _ in recording_console.lines] == [Severity.WARNING]


def test_trace_location_adds_a_stack_to_the_info_file(make_context) -> None:
    context = make_context()
    log = context.logger(__file__)

    def emit() -> None:
        log.info("traced")

    context.set_trace_location(f"{Path(__file__).name}:{emit.__code__.co_firstlineno + 1}")
    emit()
    context.flush()

    assert "stack of thread" in _read(context.current_file(Severity.INFO))


def test_standard_logging_is_copied_while_the_context_is_open(make_context) -> None:
    context = make_context(standard_log_target="WARNING")
    stdlib_logger = logging.getLogger("tests.runtime.bridge")

    stdlib_logger.warning("from %s", "stdlib")
    context.close()
    stdlib_logger.warning("after close")

    text = _read(context.current_file(Severity.WARNING))
    assert "] from stdlib\n" in text
    assert "after close" not in text
    assert not any(type(handler).__name__ == "StandardLogHandler" for handler in logging.getLogger().handlers)


def test_stats_count_emitted_records(make_context) -> None:
    context = make_context()
    log = context.logger("app/server.py")

    log.info("one")
    log.error("two")

    assert context.stats[Severity.INFO].lines == 1
    assert context.stats[Severity.ERROR].lines == 1
    assert context.stats[Severity.FATAL].lines == 0


def test_sweep_deletes_expired_rotated_files(make_context, tmp_path: Path) -> None:
    stale = tmp_path / "demo.host.user.log.INFO.20050101-000000.1"
    stale.write_text("old\n", encoding="utf-8")
    context = make_context(max_age=timedelta(days=7))
    context.logger("app/server.py").info("current")

    report = context.sweep(datetime(2006, 1, 2, 15, 4, 5))

    assert report.deleted == [stale]
    assert not stale.exists()
    assert context.current_file(Severity.INFO).exists()


def test_close_is_idempotent_and_later_records_reach_stderr(make_context, recording_console) -> None:
    context = make_context()

    with context:
        context.logger("app/server.py").info("inside")
    context.close()
    context.logger("app/server.py").info("outside")

    assert context.router.closed is True
    assert recording_console.lines[-1][1].endswith(b"] outside\n")


def test_bridge_does_not_deadlock_with_internal_warnings(make_context, recording_console) -> None:
    context = make_context(standard_log_target="INFO")
    holder_ready = threading.Event()

    def hold_router() -> None:
        holder_ready.set()
        # Give the other thread time to enter the bridge and block on the router.
        time.sleep(0.2)
        logging.getLogger("lib_log_cascade.adapters.retention").warning("during sweep")

    def log_from_library() -> None:
        holder_ready.wait(5)
        logging.getLogger("tests.runtime.library").warning("from library")

    holder = threading.Thread(target=lambda: context.router.run_exclusive(hold_router), daemon=True)
    library = threading.Thread(target=log_from_library, daemon=True)
    holder.start()
    library.start()
    holder.join(5)
    library.join(5)

    assert not holder.is_alive()
    assert not library.is_alive()
    context.flush()
    assert "] from library\n" in _read(context.current_file(Severity.INFO))
    assert any(data.endswith(b"] during sweep\n") for _, data in recording_console.lines)
