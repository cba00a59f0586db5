# ============================================================================
# CLOCK
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Foundation - Injectable source of "now"
# PURPOSE: Envelope timestamps that tests can pin without global state
# CREATED: 18 OCT 2026
# ============================================================================
"""
Clock

Envelopes carry a generation timestamp. The responder receives a Clock at
construction time so one application (or one test) controls its own notion
of now.
"""

from datetime import datetime, timezone


class Clock:
    """Source of the current UTC time."""

    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock(Clock):
    """Wall clock, UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """Always returns the same instant. Used by tests."""

    def __init__(self, instant: datetime):
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self._instant = instant

    def now(self) -> datetime:
        return self._instant


def format_timestamp(value: datetime) -> str:
    """RFC3339 UTC timestamp with second precision, e.g. 2015-06-30T21:59:59Z."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


__all__ = ["Clock", "SystemClock", "FixedClock", "format_timestamp"]
