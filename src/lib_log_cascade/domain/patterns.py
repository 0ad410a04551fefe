"""Glob compiler for per-module verbosity overrides.

Purpose
-------
Turn operator-facing patterns such as ``"server/*=2"`` into anchored regular
expressions over source paths and rank them so the most specific override
wins.

Rules
-----
* Patterns are ``/``-separated; a segment consisting of ``*`` is a wildcard.
* A non-final ``*`` matches zero or more intervening directories.
* A final ``*`` matches any file anywhere beneath the preceding directory.
* A final literal ending in ``.py`` names exactly that file; without the
  suffix it names ``name.py`` or a file directly inside package ``name``.
* Matching is anchored at the end only, so ``"handlers.py"`` matches that file
  under any directory.

Contents
--------
* :func:`compile_module_pattern` and :func:`pattern_rank`.
* :class:`ModuleOverride` – an installed ``(pattern, level)`` pair.
* :func:`normalize_module` – canonical form of a call-site identity.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Pattern

from .errors import ConfigurationError

SOURCE_SUFFIX = ".py"
WILDCARD = "*"


def _segments(pattern: str) -> list[str]:
    stripped = pattern.strip()
    if not stripped:
        raise ConfigurationError("Module pattern must not be empty")
    segments = stripped.replace("\\", "/").lstrip("/").split("/")
    if any(not segment for segment in segments):
        raise ConfigurationError(f"Module pattern has an empty segment: {pattern!r}")
    for segment in segments:
        if WILDCARD in segment and segment != WILDCARD:
            raise ConfigurationError(f"Wildcard must span a whole segment in {pattern!r}")
    return segments


def compile_module_pattern(pattern: str) -> Pattern[str]:
    """Compile ``pattern`` into a regex matching normalised module paths.

    >>> compile_module_pattern("foo/bar/x.py").pattern
    '.*/foo/bar/x\\\\.py$'
    >>> compile_module_pattern("foo/*/x.py").pattern
    '.*/foo(/.*)?/x\\\\.py$'
    >>> compile_module_pattern("foo/*").pattern
    '.*/foo(/.*)?/[^/]+\\\\.py$'
    """

    segments = _segments(pattern)
    suffix = re.escape(SOURCE_SUFFIX)
    parts = [".*"]
    last = len(segments) - 1
    for index, segment in enumerate(segments):
        if segment == WILDCARD:
            parts.append("(/.*)?")
            if index == last:
                parts.append(f"/[^/]+{suffix}")
        elif index == last and segment.endswith(SOURCE_SUFFIX):
            parts.append("/" + re.escape(segment))
        elif index == last:
            parts.append(f"/{re.escape(segment)}(/[^/]+)?{suffix}")
        else:
            parts.append("/" + re.escape(segment))
    return re.compile("".join(parts) + "$")


def pattern_rank(pattern: str) -> tuple[int, int]:
    """Return the specificity of ``pattern``; larger tuples win.

    Wildcard-free patterns outrank wildcard ones, then longer literal text
    outranks shorter. The universal pattern ``"*"`` ranks lowest.

    >>> pattern_rank("*") < pattern_rank("foo/*") < pattern_rank("x.py")
    True
    """

    segments = _segments(pattern)
    literal = sum(len(segment) for segment in segments if segment != WILDCARD)
    exact = 0 if WILDCARD in segments else 1
    return exact, literal


def normalize_module(identity: str) -> str:
    """Return the canonical ``/``-rooted path used for matching.

    Accepts file paths (``__file__``) and dotted module names (``__name__``).

    >>> normalize_module("pkg.server.handlers")
    '/pkg/server/handlers.py'
    >>> normalize_module("C:\\\\src\\\\app\\\\main.py")
    '/C:/src/app/main.py'
    """

    path = identity.replace("\\", "/")
    if path.endswith(".pyc"):
        path = path[:-1]
    if "/" not in path and not path.endswith(SOURCE_SUFFIX):
        path = path.replace(".", "/") + SOURCE_SUFFIX
    if not path.startswith("/"):
        path = "/" + path
    return path


@dataclass(slots=True, frozen=True)
class ModuleOverride:
    """Verbosity threshold applied to modules matching ``pattern``."""

    pattern: str
    level: int
    regex: Pattern[str] = field(compare=False, repr=False)
    rank: tuple[int, int] = field(compare=False)

    @classmethod
    def create(cls, pattern: str, level: int) -> "ModuleOverride":
        """Validate and compile an override.

        >>> ModuleOverride.create("server/*", 2).matches("/srv/app/server/http/io.py")
        True
        """

        if isinstance(level, bool) or not isinstance(level, int) or level < 0:
            raise ConfigurationError(f"Verbosity for {pattern!r} must be a non-negative integer, got {level!r}")
        return cls(pattern=pattern, level=level, regex=compile_module_pattern(pattern), rank=pattern_rank(pattern))

    def matches(self, module: str) -> bool:
        """Return ``True`` when the normalised ``module`` path matches."""

        return self.regex.match(module) is not None


__all__ = [
    "ModuleOverride",
    "SOURCE_SUFFIX",
    "compile_module_pattern",
    "normalize_module",
    "pattern_rank",
]
