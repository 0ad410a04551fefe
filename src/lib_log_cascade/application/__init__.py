"""Application layer: ports and use cases of the logging core."""

from __future__ import annotations
