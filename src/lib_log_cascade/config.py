"""Configuration for the logging core: dataclass, environment and ``.env``.

Purpose
-------
Collect every knob of the logging core in one immutable :class:`LoggingConfig`
and build it from ``LOG_*`` environment variables, optionally seeded from the
nearest ``.env`` file through ``python-dotenv``.

Contents
--------
* :class:`LoggingConfig` – frozen configuration with :meth:`~LoggingConfig.from_env`.
* :func:`parse_module_spec` – ``"pattern=N,pattern=N"`` override lists.
* :func:`enable_dotenv` / :func:`should_use_dotenv` – ``.env`` handling.

System Role
-----------
Configuration errors surface here, synchronously, as
:class:`ConfigurationError`; the runtime receives only validated values.
Explicit keyword overrides beat the environment, and a real environment
variable beats a ``.env`` entry.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field, replace
from datetime import timedelta
from pathlib import Path
from typing import Any, Mapping

from dotenv import find_dotenv, load_dotenv

from .domain.errors import ConfigurationError
from .domain.interval import Interval, parse_interval
from .domain.patterns import ModuleOverride
from .domain.policy import RotationPolicy
from .domain.record import parse_trace_location
from .domain.severity import Severity

DOTENV_ENV_VAR = "LOG_USE_DOTENV"
"""Environment toggle asking the CLI to load ``.env`` before configuring."""

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}

_SIZE_RE = re.compile(r"^\s*(\d+)\s*([kmg]i?b?|b)?\s*$", re.IGNORECASE)
_SIZE_FACTORS = {"": 1, "b": 1, "k": 1024, "m": 1024**2, "g": 1024**3}

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhdw]?)\s*$", re.IGNORECASE)
_DURATION_UNITS = {"": "seconds", "s": "seconds", "m": "minutes", "h": "hours", "d": "days", "w": "weeks"}

_DOTENV_LOADED: Path | None = None
_DOTENV_ATTEMPTED = False


def parse_module_spec(text: str) -> tuple[tuple[str, int], ...]:
    """Parse ``"pattern=N,pattern=N"`` into validated override pairs.

    Every pattern is compiled once here so a typo fails at configuration time.

    >>> parse_module_spec("handlers=2, db/*=1")
    (('handlers', 2), ('db/*', 1))
    >>> parse_module_spec("")
    ()
    >>> parse_module_spec("handlers")
    Traceback (most recent call last):
    ...
    lib_log_cascade.domain.errors.ConfigurationError: Module override must look like pattern=N, got 'handlers'
    """

    pairs: list[tuple[str, int]] = []
    for chunk in text.split(","):
        item = chunk.strip()
        if not item:
            continue
        pattern, sep, level_text = item.partition("=")
        pattern = pattern.strip()
        level_text = level_text.strip()
        if not sep or not pattern or not level_text.isdigit():
            raise ConfigurationError(f"Module override must look like pattern=N, got {item!r}")
        override = ModuleOverride.create(pattern, int(level_text))
        pairs.append((override.pattern, override.level))
    return tuple(pairs)


def parse_bool(value: str) -> bool:
    """Interpret common boolean spellings.

    >>> parse_bool("Yes"), parse_bool("0")
    (True, False)
    """

    normalized = value.strip().lower()
    if normalized in _TRUTHY:
        return True
    if normalized in _FALSY:
        return False
    raise ConfigurationError(f"Expected a boolean, got {value!r}")


def parse_size(value: str) -> int:
    """Parse a byte count with an optional binary ``K``/``M``/``G`` suffix.

    >>> parse_size("10M"), parse_size("512"), parse_size("2GiB")
    (10485760, 512, 2147483648)
    """

    match = _SIZE_RE.match(value)
    if match is None:
        raise ConfigurationError(f"Expected a size such as 512, 64K or 10M, got {value!r}")
    unit = (match.group(2) or "").lower()[:1]
    return int(match.group(1)) * _SIZE_FACTORS[unit]


def parse_duration(value: str) -> timedelta:
    """Parse a duration in seconds or with an ``s``/``m``/``h``/``d``/``w`` suffix.

    >>> parse_duration("7d")
    datetime.timedelta(days=7)
    >>> parse_duration("90")
    datetime.timedelta(seconds=90)
    """

    match = _DURATION_RE.match(value)
    if match is None:
        raise ConfigurationError(f"Expected a duration such as 3600, 12h or 7d, got {value!r}")
    return timedelta(**{_DURATION_UNITS[match.group(2).lower()]: int(match.group(1))})


def _parse_int(value: str, name: str) -> int:
    try:
        number = int(value.strip())
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from exc
    if number < 0:
        raise ConfigurationError(f"{name} must not be negative, got {value!r}")
    return number


def _parse_dirs(value: str) -> tuple[Path, ...]:
    return tuple(Path(part) for part in value.split(os.pathsep) if part.strip())


_ENV_FIELDS: Mapping[str, tuple[str, Any]] = {
    "LOG_VERBOSITY": ("verbosity", lambda value: _parse_int(value, "LOG_VERBOSITY")),
    "LOG_VMODULE": ("module_overrides", parse_module_spec),
    "LOG_DIR": ("log_dirs", _parse_dirs),
    "LOG_ALSO_TO_STDERR": ("also_log_to_stderr", parse_bool),
    "LOG_TO_STDERR": ("only_log_to_stderr", parse_bool),
    "LOG_STDERR_THRESHOLD": ("stderr_threshold", Severity.from_name),
    "LOG_MIN_SIZE": ("min_size", parse_size),
    "LOG_MAX_SIZE": ("max_size", parse_size),
    "LOG_ROTATION_INTERVAL": ("rotation_interval", parse_interval),
    "LOG_MAX_AGE": ("max_age", parse_duration),
    "LOG_MAX_TOTAL_SIZE": ("max_total_size", parse_size),
    "LOG_COMPRESS": ("compress", parse_bool),
    "LOG_BACKTRACE_AT": ("trace_location", lambda value: value.strip()),
    "LOG_STD_TARGET": ("standard_log_target", lambda value: value.strip()),
    "LOG_PROGRAM": ("program", lambda value: value.strip()),
    "LOG_NO_COLOR": ("no_color", parse_bool),
    "LOG_FORCE_COLOR": ("force_color", parse_bool),
}


@dataclass(slots=True, frozen=True)
class LoggingConfig:
    """Validated configuration of one logging context.

    Attributes
    ----------
    verbosity:
        Global debug level; ``v(level)`` calls at or below it are emitted.
    module_overrides:
        ``(pattern, level)`` pairs overriding ``verbosity`` per source file.
    log_dirs:
        Existing directories tried in order; empty means the system temp dir.
    also_log_to_stderr:
        Copy every record to stderr in addition to the files.
    only_log_to_stderr:
        Write to stderr only; no files are created.
    stderr_threshold:
        Records at or above this severity are copied to stderr.
    min_size / max_size:
        Size-based rotation limits in bytes.
    rotation_interval:
        Calendar rotation; overrides size-based rotation when not ``NEVER``.
    max_age / max_total_size / compress:
        Retention limits applied after each rotation.
    trace_location:
        ``file.py:line`` whose records get a stack trace; empty disables it.
    standard_log_target:
        Severity name receiving stdlib :mod:`logging` records; empty leaves
        the stdlib alone.
    program:
        Program name used in file names; empty means ``sys.argv[0]``.
    no_color / force_color:
        Console colour switches.
    """

    verbosity: int = 0
    module_overrides: tuple[tuple[str, int], ...] = ()
    log_dirs: tuple[Path, ...] = ()
    also_log_to_stderr: bool = False
    only_log_to_stderr: bool = False
    stderr_threshold: Severity = Severity.ERROR
    min_size: int = 0
    max_size: int = 1024 * 1024 * 1800
    rotation_interval: Interval = Interval.NEVER
    max_age: timedelta = field(default_factory=lambda: timedelta(0))
    max_total_size: int = 0
    compress: bool = False
    trace_location: str = ""
    standard_log_target: str = ""
    program: str = ""
    no_color: bool = False
    force_color: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.verbosity, bool) or not isinstance(self.verbosity, int) or self.verbosity < 0:
            raise ConfigurationError(f"verbosity must be a non-negative integer, got {self.verbosity!r}")
        for pattern, level in self.module_overrides:
            ModuleOverride.create(pattern, level)
        parse_trace_location(self.trace_location)
        if self.standard_log_target:
            Severity.from_name(self.standard_log_target)
        object.__setattr__(self, "log_dirs", tuple(Path(directory) for directory in self.log_dirs))
        self.policy()

    def policy(self) -> RotationPolicy:
        """Return the :class:`RotationPolicy` described by this configuration."""

        try:
            return RotationPolicy(
                min_size=self.min_size,
                max_size=self.max_size,
                interval=self.rotation_interval,
                max_age=self.max_age,
                max_total_size=self.max_total_size,
                compress=self.compress,
            )
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc

    def with_overrides(self, **overrides: Any) -> "LoggingConfig":
        """Return a copy with ``overrides`` applied (``None`` values ignored)."""

        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes) if changes else self

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: Any) -> "LoggingConfig":
        """Build a configuration from ``LOG_*`` variables plus explicit overrides.

        Examples
        --------
        >>> config = LoggingConfig.from_env({"LOG_VERBOSITY": "2", "LOG_ROTATION_INTERVAL": "daily"}, compress=True)
        >>> config.verbosity, config.rotation_interval.name, config.compress
        (2, 'DAILY', True)
        """

        source = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for variable, (name, convert) in _ENV_FIELDS.items():
            raw = source.get(variable)
            if raw is None:
                continue
            values[name] = convert(raw)
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)


def should_use_dotenv(*, explicit: bool | None = None, environ: Mapping[str, str] | None = None) -> bool:
    """Decide whether ``.env`` should be loaded.

    An explicit CLI choice wins; otherwise :data:`DOTENV_ENV_VAR` decides.

    >>> should_use_dotenv(explicit=False, environ={DOTENV_ENV_VAR: "1"})
    False
    >>> should_use_dotenv(environ={DOTENV_ENV_VAR: "yes"})
    True
    """

    if explicit is not None:
        return explicit
    source = os.environ if environ is None else environ
    value = source.get(DOTENV_ENV_VAR, "")
    return value.strip().lower() in _TRUTHY


def enable_dotenv(*, search_from: Path | None = None) -> Path | None:
    """Load the nearest ``.env`` file once per process and return its path.

    The search walks upwards from ``search_from`` (default: the working
    directory). Variables already present in the environment keep their
    values. Returns ``None`` when no file was found.
    """

    global _DOTENV_LOADED, _DOTENV_ATTEMPTED
    if _DOTENV_ATTEMPTED:
        return _DOTENV_LOADED
    _DOTENV_ATTEMPTED = True
    if search_from is not None:
        candidate = _find_upwards(Path(search_from))
    else:
        found = find_dotenv(usecwd=True)
        candidate = Path(found).resolve() if found else None
    if candidate is None:
        return None
    load_dotenv(candidate, override=False)
    _DOTENV_LOADED = candidate
    return candidate


def _find_upwards(start: Path) -> Path | None:
    start = start.resolve()
    for directory in (start, *start.parents):
        candidate = directory / ".env"
        if candidate.is_file():
            return candidate
    return None


def _reset_dotenv_state_for_testing() -> None:
    """Forget which ``.env`` file was loaded so tests start clean."""

    global _DOTENV_LOADED, _DOTENV_ATTEMPTED
    _DOTENV_LOADED = None
    _DOTENV_ATTEMPTED = False


__all__ = [
    "DOTENV_ENV_VAR",
    "LoggingConfig",
    "enable_dotenv",
    "parse_bool",
    "parse_duration",
    "parse_module_spec",
    "parse_size",
    "should_use_dotenv",
]
