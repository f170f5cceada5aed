"""Required daily pace to hit a goal deadline."""
from datetime import date

from app.models.calculations import (
    UNBOUNDED,
    Bounded,
    DeadlineStatus,
    Horizon,
    PaceResult,
    is_unbounded,
)
from app.models.goal import GoalStatus
from app.utils.dates import days_between, round_half_up


def days_until(deadline: date, today: date) -> int:
    """Signed calendar days to the deadline. Negative once it has passed."""
    return days_between(today, deadline)


def deadline_status(deadline: date, status: GoalStatus | str, today: date) -> DeadlineStatus:
    days = days_until(deadline, today)
    completed = status in (GoalStatus.COMPLETED, GoalStatus.COMPLETED.value)
    return DeadlineStatus(days_remaining=days, is_overdue=days < 0 and not completed)


def required_hours_per_day(remaining_minutes: int, deadline: date, today: date) -> Horizon:
    """
    Hours per calendar day needed to finish by the deadline.

    Unbounded when the deadline is today or past and work is still
    outstanding. Negative remaining work yields a non-positive pace.
    """
    days_remaining = max(0, days_until(deadline, today))
    if days_remaining > 0:
        return Bounded(value=round_half_up(remaining_minutes / 60 / days_remaining, 1))
    if remaining_minutes > 0:
        return UNBOUNDED
    return Bounded(value=0)


def calculate_pace(
    remaining_minutes: int,
    deadline: date,
    today: date,
    daily_hours_available: float,
) -> PaceResult:
    days_remaining = max(0, days_until(deadline, today))
    required = required_hours_per_day(remaining_minutes, deadline, today)

    if is_unbounded(required):
        return PaceResult(
            days_remaining=days_remaining,
            required_hours_per_day=required,
            is_at_risk=True,
        )

    at_risk = required.value > daily_hours_available
    shortfall = round_half_up(required.value - daily_hours_available, 1) if at_risk else None
    return PaceResult(
        days_remaining=days_remaining,
        required_hours_per_day=required,
        is_at_risk=at_risk,
        shortfall_hours_per_day=shortfall,
    )
