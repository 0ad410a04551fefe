"""CLI behaviour coverage for the maintenance commands."""

from __future__ import annotations

import gzip
from pathlib import Path

import pytest
from click.testing import CliRunner

from lib_log_cascade import __init__conf__
from lib_log_cascade import cli as cli_mod

_LOG_VARIABLES = ("LOG_DIR", "LOG_PROGRAM", "LOG_TO_STDERR", "LOG_VERBOSITY", "LOG_STD_TARGET", "LOG_USE_DOTENV")


@pytest.fixture(autouse=True)
def _clean_log_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for variable in _LOG_VARIABLES:
        monkeypatch.delenv(variable, raising=False)


def _info_text() -> str:
    lines: list[str] = []
    __init__conf__.print_info(lines.append)
    return "\n".join(lines) + "\n"


def test_cli_without_subcommand_prints_info() -> None:
    result = CliRunner().invoke(cli_mod.cli, [])

    assert result.exit_code == 0
    assert result.output == _info_text()


def test_cli_info_command_prints_info() -> None:
    result = CliRunner().invoke(cli_mod.cli, ["info"])

    assert result.exit_code == 0
    assert result.output == _info_text()


def test_cli_version_option() -> None:
    result = CliRunner().invoke(cli_mod.cli, ["--version"])

    assert result.exit_code == 0
    assert result.output.strip() == __init__conf__.version


def test_cli_log_writes_a_record_and_prints_the_file(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli_mod.cli, ["log", "--log-dir", str(tmp_path), "--program", "cli", "hello from the shell"])

    assert result.exit_code == 0, result.output
    written = Path(result.output.strip().splitlines()[-1])
    assert written.parent == tmp_path
    assert written.name.startswith("cli.")
    assert ".log.INFO." in written.name
    assert "] hello from the shell\n" in written.read_text(encoding="utf-8")


def test_cli_log_warning_cascades_into_info(tmp_path: Path) -> None:
    result = CliRunner().invoke(
        cli_mod.cli,
        ["log", "--severity", "warning", "--log-dir", str(tmp_path), "--program", "cli", "careful"],
    )

    assert result.exit_code == 0, result.output
    info_files = list(tmp_path.glob("cli.*.log.INFO.*"))
    warning_files = list(tmp_path.glob("cli.*.log.WARNING.*"))
    assert len(info_files) == len(warning_files) == 1
    assert info_files[0].read_text(encoding="utf-8").splitlines()[-1].startswith("W")


def test_cli_log_refuses_fatal(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli_mod.cli, ["log", "--severity", "fatal", "--log-dir", str(tmp_path), "boom"])

    assert result.exit_code == 2
    assert list(tmp_path.iterdir()) == []


def test_cli_compress_replaces_files_with_archives(tmp_path: Path) -> None:
    source = tmp_path / "app.host.user.log.INFO.20060102-150405.1"
    source.write_text("I0102 15:04:05.067890 1 a.py:1] hi\n", encoding="utf-8")

    result = CliRunner().invoke(cli_mod.cli, ["compress", str(source)])

    assert result.exit_code == 0
    archive = Path(result.output.strip())
    assert archive.name == source.name + ".gz"
    assert not source.exists()
    assert gzip.decompress(archive.read_bytes()).startswith(b"I0102")


def test_cli_sweep_deletes_expired_files(tmp_path: Path) -> None:
    stale = tmp_path / "app.host.user.log.INFO.20050101-000000.1"
    stale.write_text("old\n", encoding="utf-8")
    foreign = tmp_path / "notes.txt"
    foreign.write_text("keep\n", encoding="utf-8")

    result = CliRunner().invoke(
        cli_mod.cli,
        ["sweep", "--log-dir", str(tmp_path), "--program", "app", "--host", "host", "--user", "user", "--max-age", "7d"],
    )

    assert result.exit_code == 0, result.output
    assert f"deleted {stale}" in result.output
    assert not stale.exists()
    assert foreign.exists()


def test_cli_sweep_rejects_bad_limits(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli_mod.cli, ["sweep", "--log-dir", str(tmp_path), "--program", "app", "--max-age", "soon"])

    assert result.exit_code == 2
    assert "duration" in result.output


def test_main_returns_zero_for_version(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = cli_mod.main(["--version"])

    assert exit_code == 0
    assert capsys.readouterr().out.strip() == __init__conf__.version


def test_main_reports_usage_errors(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = cli_mod.main(["sweep"])

    assert exit_code == 2
    assert "--log-dir" in capsys.readouterr().err
