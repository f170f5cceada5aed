"""Available working minutes for a date range given a work-day calendar."""
from datetime import date
from typing import Iterable

from app.calculations.time_accounting import completed_between, minutes_spent, total_estimated
from app.models.calculations import DayBreakdown
from app.utils.dates import each_day, round_half_up, weekday_index


def daily_minutes(daily_hours: float) -> int:
    return int(round_half_up(daily_hours * 60))


def work_days_in_range(start: date, end: date, work_days: Iterable[int]) -> list[date]:
    """Dates in [start, end] whose weekday index (0 = Sunday) is a work day."""
    work_days = set(work_days)
    return [day for day in each_day(start, end) if weekday_index(day) in work_days]


def capacity_minutes(start: date, end: date, daily_hours: float, work_days: Iterable[int]) -> int:
    """Work days in range times daily hours, in minutes. Rounded once over the total."""
    return int(round_half_up(len(work_days_in_range(start, end, work_days)) * daily_hours * 60))


def weekly_capacity_minutes(
    daily_hours: float,
    work_days: Iterable[int],
    start: date,
    end: date,
) -> int:
    """Minutes available in the week [start, end]. Zero when there are no work days."""
    return capacity_minutes(start, end, daily_hours, work_days)


def remaining_work_days(as_of: date, start: date, end: date, work_days: Iterable[int]) -> int:
    """Work days in [start, end] on or after as_of."""
    return sum(1 for day in work_days_in_range(start, end, work_days) if day >= as_of)


def unplanned_minutes(daily_hours: float, tasks: Iterable) -> int:
    """Today's budget minus what is already planned. Negative when over-committed."""
    return daily_minutes(daily_hours) - total_estimated(tasks)


def daily_breakdown(
    start: date,
    end: date,
    tasks: Iterable,
    daily_hours: float,
    work_days: Iterable[int],
) -> list[DayBreakdown]:
    """Planned budget and completed minutes for each day in [start, end]."""
    tasks = list(tasks)
    work_days = set(work_days)
    budget = daily_minutes(daily_hours)

    breakdown = []
    for day in each_day(start, end):
        is_work_day = weekday_index(day) in work_days
        breakdown.append(
            DayBreakdown(
                day=day,
                is_work_day=is_work_day,
                planned_minutes=budget if is_work_day else 0,
                actual_minutes=sum(minutes_spent(task) for task in completed_between(tasks, day, day)),
            )
        )
    return breakdown


def completion_rate(done_minutes: int, planned_minutes: int) -> int:
    """Share of planned minutes actually done, as a whole percent."""
    if planned_minutes <= 0:
        return 0
    return int(round_half_up(done_minutes / planned_minutes * 100))


def average_daily_minutes(days: Iterable[DayBreakdown]) -> int:
    """Mean minutes over the days where anything was completed."""
    active = [day.actual_minutes for day in days if day.actual_minutes > 0]
    if not active:
        return 0
    return int(round_half_up(sum(active) / len(active)))
