"""Operator command line for the logging core.

Purpose
-------
Give operators the maintenance tasks that otherwise only run inside a
logging process: applying retention to a log directory, compressing rotated
files by hand and writing a test record.

Contents
--------
* :func:`cli` - Click group with the ``--use-dotenv`` toggle.
* ``info`` / ``sweep`` / ``compress`` / ``log`` subcommands.
* :func:`main` - test-friendly runner used by ``python -m`` and the script.

System Role
-----------
Presentation layer only: every command delegates to the adapters or to a
:class:`LoggingContext` and translates :class:`ConfigurationError` into a
Click usage error.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Sequence

import click

from . import __init__conf__
from . import config as log_config
from .adapters import RetentionSweeper, gzip_file
from .config import LoggingConfig, parse_duration, parse_size
from .domain import ConfigurationError, LogFileNamer, RotationPolicy, Severity
from .runtime import LoggingContext
from .runtime._factories import current_host, current_user

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_ORDINARY_SEVERITIES = [severity.name for severity in Severity if severity is not Severity.FATAL]


@click.group(invoke_without_command=True, context_settings=CLICK_CONTEXT_SETTINGS)
@click.version_option(version=__init__conf__.version, prog_name=__init__conf__.shell_command, message="%(version)s")
@click.option(
    "--use-dotenv/--no-use-dotenv",
    default=None,
    help=f"Load the nearest .env before reading LOG_* variables (default: ${log_config.DOTENV_ENV_VAR}).",
)
@click.pass_context
def cli(ctx: click.Context, use_dotenv: bool | None) -> None:
    """Maintain log files written by lib_log_cascade."""

    if log_config.should_use_dotenv(explicit=use_dotenv):
        log_config.enable_dotenv()
    if ctx.invoked_subcommand is None:
        __init__conf__.print_info(click.echo)


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print package metadata."""

    __init__conf__.print_info(click.echo)


@cli.command("sweep", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option(
    "--log-dir",
    "log_dirs",
    multiple=True,
    required=True,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Directory to sweep; repeat for several.",
)
@click.option("--program", required=True, help="Program name the log files were written by.")
@click.option("--host", default=None, help="Short host name in the file names (default: this host).")
@click.option("--user", default=None, help="User name in the file names (default: current user).")
@click.option("--max-age", default="0", show_default=True, help="Delete files older than this (e.g. 7d, 12h).")
@click.option("--max-total-size", default="0", show_default=True, help="Cap on the total size per directory (e.g. 500M).")
@click.option("--compress", is_flag=True, help="Gzip surviving rotated files.")
def cli_sweep(
    log_dirs: tuple[Path, ...],
    program: str,
    host: str | None,
    user: str | None,
    max_age: str,
    max_total_size: str,
    compress: bool,
) -> None:
    """Apply age, size and compression limits to rotated log files.

    Files that any ``PROGRAM.SEVERITY`` pointer refers to are never touched.
    """

    try:
        policy = RotationPolicy(max_age=parse_duration(max_age), max_total_size=parse_size(max_total_size), compress=compress)
    except ConfigurationError as exc:
        raise click.BadParameter(str(exc)) from exc
    namer = LogFileNamer(program=program, host=host or current_host(), user=user or current_user())
    sweeper = RetentionSweeper(log_dirs=log_dirs, namer=namer, policy=policy)
    report = sweeper.sweep(datetime.now())
    for path in report.deleted:
        click.echo(f"deleted {path}")
    for path in report.compressed:
        click.echo(f"compressed {path}")
    for path, error in report.failed:
        click.echo(f"failed {path}: {error}", err=True)
    if report.failed:
        raise SystemExit(1)


@cli.command("compress", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path))
def cli_compress(paths: tuple[Path, ...]) -> None:
    """Gzip each PATH in place, removing the original once the archive is complete."""

    for path in paths:
        try:
            archive = gzip_file(path)
        except OSError as exc:
            raise click.ClickException(f"compressing {path} failed: {exc}") from exc
        click.echo(str(archive))


@cli.command("log", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option(
    "--severity",
    type=click.Choice(_ORDINARY_SEVERITIES, case_sensitive=False),
    default="INFO",
    show_default=True,
)
@click.option(
    "--log-dir",
    "log_dirs",
    multiple=True,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Directory for the log files (default: $LOG_DIR or the temp dir).",
)
@click.option("--program", default=None, help="Program name for the log files (default: $LOG_PROGRAM or the command name).")
@click.argument("message")
def cli_log(severity: str, log_dirs: tuple[Path, ...], program: str | None, message: str) -> None:
    """Write MESSAGE as one record, honouring every LOG_* variable."""

    try:
        config = LoggingConfig.from_env(log_dirs=log_dirs or None, program=program or None)
    except ConfigurationError as exc:
        raise click.UsageError(str(exc)) from exc
    if not config.program:
        config = config.with_overrides(program=__init__conf__.shell_command)
    with LoggingContext.from_config(config) as context:
        logger = context.logger(__file__)
        method = getattr(logger, Severity.from_name(severity).name.lower())
        method("%s", message)
        path = context.current_file(Severity.from_name(severity))
    if path is not None:
        click.echo(str(path))


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Click group in a test-friendly manner.

    Parameters
    ----------
    argv:
        Optional argument list (defaults to ``sys.argv[1:]``).

    Returns
    -------
    int
        Process exit status.

    Examples
    --------
    >>> main(["--version"])  # doctest: +ELLIPSIS
    0.1...
    0
    """

    args = list(argv) if argv is not None else None
    try:
        cli.main(args=args, prog_name=__init__conf__.shell_command, standalone_mode=False)
    except click.ClickException as error:
        error.show()
        return error.exit_code
    except click.exceptions.Exit as exit_request:
        return exit_request.exit_code
    except SystemExit as exit_request:
        return int(exit_request.code or 0)
    return 0


__all__ = ["cli", "main"]
