"""Static package metadata surfaced by the CLI ``info`` command.

Purpose
-------
Keep the distribution name, version and console-script name in one module
that both ``pyproject.toml`` readers and the CLI agree on.
"""

from __future__ import annotations

from typing import Callable

name = "lib_log_cascade"
title = "Leveled, severity-cascading file logging with rotation and retention"
version = "0.1.0"
homepage = ""
author = ""
author_email = ""
shell_command = "lib-log-cascade"


def print_info(writer: Callable[[str], None] = print) -> None:
    """Write the metadata banner through ``writer``.

    >>> lines = []
    >>> print_info(lines.append)
    >>> lines[0]
    'Info for lib_log_cascade:'
    """

    fields = (
        ("name", name),
        ("title", title),
        ("version", version),
        ("homepage", homepage),
        ("author", author),
        ("author_email", author_email),
        ("shell_command", shell_command),
    )
    pad = max(len(label) for label, _ in fields)
    writer(f"Info for {name}:")
    writer("")
    for label, value in fields:
        writer(f"    {label:<{pad}} = {value}")
