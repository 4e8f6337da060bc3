"""testnetgen.core.time

Genesis time is chosen once per run. Every node gets the same second.

This module is the *only* time helper surface in the codebase.
"""

from __future__ import annotations

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return an aware UTC datetime truncated to whole seconds."""

    return datetime.now(tz=UTC).replace(microsecond=0)


def format_genesis_time(dt: datetime) -> str:
    """Render an RFC 3339 timestamp with a `Z` suffix, as Tendermint writes it."""

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat().replace("+00:00", "Z")

