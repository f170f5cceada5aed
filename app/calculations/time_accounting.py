"""Aggregate task collections into estimated/actual minutes."""
import math
from datetime import date, datetime
from typing import Iterable

from app.models.task import TaskStatus
from app.utils.dates import round_half_up, to_date


def _is_completed(task) -> bool:
    return getattr(task, "status", None) in (TaskStatus.COMPLETED, TaskStatus.COMPLETED.value)


def minutes_spent(task) -> int:
    """
    Minutes credited to a completed task.

    The recorded actual wins; a missing or zero actual falls back to the
    estimate, and a missing estimate counts as 0.
    """
    return getattr(task, "actual_minutes", None) or getattr(task, "estimated_minutes", None) or 0


def total_estimated(tasks: Iterable) -> int:
    """Sum of estimates over all tasks, completed or not."""
    return sum(getattr(task, "estimated_minutes", None) or 0 for task in tasks)


def total_actual(tasks: Iterable) -> int:
    """Sum of minutes spent over completed tasks only."""
    return sum(minutes_spent(task) for task in tasks if _is_completed(task))


def remaining(tasks: Iterable) -> int:
    """
    Estimated minus actual.

    Not clamped: a negative value means completed work overran its
    estimates by more than the open work still needs.
    """
    tasks = list(tasks)
    return total_estimated(tasks) - total_actual(tasks)


def progress_percent(tasks: Iterable) -> int:
    """Actual over estimated as a whole percent. Can exceed 100; 0 when nothing is estimated."""
    tasks = list(tasks)
    estimated = total_estimated(tasks)
    if estimated == 0:
        return 0
    return int(round_half_up(100 * total_actual(tasks) / estimated))


def elapsed_minutes(started_at: datetime, ended_at: datetime) -> int:
    """Timer duration in whole minutes, rounded up, at least one minute."""
    seconds = (ended_at - started_at).total_seconds()
    return max(1, math.ceil(seconds / 60))


def completed_between(tasks: Iterable, start: date, end: date) -> list:
    """Completed tasks whose completion date falls within [start, end]."""
    return [
        task
        for task in tasks
        if _is_completed(task)
        and getattr(task, "completed_at", None) is not None
        and start <= to_date(task.completed_at) <= end
    ]
