"""Rich-powered standard-error console implementing :class:`ConsolePort`.

Purpose
-------
Show log lines that are copied to stderr with a per-severity style while
keeping the bytes identical to what the files receive.

Contents
--------
* :data:`_STYLE_MAP` - default severity-to-style mapping.
* :class:`RichConsoleAdapter` - adapter constructed by the composition root.

System Role
-----------
Human-facing output for ``also_log_to_stderr``, ``only_log_to_stderr`` and
the ``stderr_threshold`` copy, plus the fallback path when a file write fails.
``force_color`` forces terminal output and ``no_color`` strips styling.
"""

from __future__ import annotations

from typing import Mapping, MutableMapping

from rich.console import Console

from lib_log_cascade.application.ports.console import ConsolePort
from lib_log_cascade.domain.severity import Severity

#: Default Rich styles keyed by :class:`Severity`.
_STYLE_MAP: Mapping[Severity, str] = {
    Severity.INFO: "",
    Severity.WARNING: "yellow",
    Severity.ERROR: "red",
    Severity.FATAL: "bold red",
}


class RichConsoleAdapter(ConsolePort):
    """Render formatted log lines on stderr through Rich."""

    def __init__(
        self,
        *,
        console: Console | None = None,
        force_color: bool = False,
        no_color: bool = False,
        styles: MutableMapping[Severity | str, str] | None = None,
    ) -> None:
        """Configure the console adapter with colour and style overrides."""
        if console is not None:
            self._console = console
        else:
            self._console = Console(stderr=True, force_terminal=force_color or None, no_color=no_color)
        self._no_color = no_color
        merged = dict(_STYLE_MAP)
        for key, value in (styles or {}).items():
            severity = Severity.from_name(key) if isinstance(key, str) else key
            merged[severity] = value
        self._style_map = merged

    def emit(self, severity: Severity, data: bytes) -> None:
        """Print the rendered line ``data`` styled for ``severity``.

        Examples
        --------
        >>> from io import StringIO
        >>> console = Console(file=StringIO(), record=True)
        >>> adapter = RichConsoleAdapter(console=console)
        >>> adapter.emit(Severity.ERROR, b"E0102 15:04:05.000000 1 a.py:1] boom\\n")
        >>> console.export_text()
        'E0102 15:04:05.000000 1 a.py:1] boom\\n'
        """
        text = data.decode("utf-8", errors="replace")
        style = "" if self._no_color else self._style_map.get(severity, "")
        self._print(text, style)

    def report(self, text: str) -> None:
        """Print a diagnostic produced by the logging core itself."""
        self._print(text if text.endswith("\n") else text + "\n", "" if self._no_color else "bold")

    def _print(self, text: str, style: str) -> None:
        self._console.print(
            text,
            style=style or None,
            end="",
            markup=False,
            highlight=False,
            emoji=False,
            soft_wrap=True,
        )


__all__ = ["RichConsoleAdapter"]
