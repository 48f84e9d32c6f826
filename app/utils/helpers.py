"""
Helper Functions
================

Common utility functions used across the application.
"""

import asyncio
from datetime import date, datetime, time, timezone
from typing import Awaitable, Optional, TypeVar

T = TypeVar("T")


def utc_now() -> datetime:
    """Get current UTC datetime with timezone info."""
    return datetime.now(timezone.utc)


def format_datetime(dt: Optional[datetime]) -> Optional[str]:
    """Format datetime to ISO 8601 string, passing None through."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()


def parse_datetime(value: str) -> datetime:
    """
    Parse an ISO 8601 date or datetime string into an aware UTC datetime.

    Date-only strings resolve to midnight UTC. Naive datetimes are taken
    as UTC. A trailing ``Z`` is accepted.

    Raises:
        ValueError: If the string is not a valid ISO 8601 date/datetime.
    """
    s = value.strip()
    if not s:
        raise ValueError("empty date string")

    try:
        parsed = datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        # Only a date was given
        d = date.fromisoformat(s)
        parsed = datetime.combine(d, time.min)

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


async def call_with_timeout(awaitable: Awaitable[T], timeout: float) -> T:
    """
    Await an external call, bounded by ``timeout`` seconds.

    Raises:
        TimeoutError: If the call did not finish in time.
    """
    return await asyncio.wait_for(awaitable, timeout=timeout)
