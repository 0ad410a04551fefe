"""Shutdown orchestration for the logging core.

Purpose
-------
Provide a single teardown routine that detaches the stdlib bridge, makes
every accepted byte durable and closes the files.
"""

from __future__ import annotations

from typing import Callable

from .route import SeverityRouter


def create_shutdown(
    *,
    router: SeverityRouter,
    detach_bridge: Callable[[], None] | None = None,
) -> Callable[[], None]:
    """Return a callable performing the shutdown sequence."""

    def shutdown() -> None:
        """Detach the bridge, then flush and close every sink."""
        if detach_bridge is not None:
            detach_bridge()
        router.flush()
        router.close()

    return shutdown


__all__ = ["create_shutdown"]
