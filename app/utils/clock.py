"""Wall-clock access for the application edge.

Calculation functions never read the clock themselves; routers and services
call these and pass the values down.
"""
from datetime import date, datetime, timezone


def now() -> datetime:
    """Current UTC time."""
    return datetime.now(timezone.utc)


def today() -> date:
    """Current UTC calendar date."""
    return now().date()
