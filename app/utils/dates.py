"""Calendar helpers shared by the calculation engine."""
import calendar
import math
from datetime import date, datetime, timedelta


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round half away from negative infinity, like a spreadsheet would.

    Python's round() uses banker's rounding, which turns 2.5 into 2.

    Examples:
        >>> round_half_up(2.5)
        3.0
        >>> round_half_up(1.25, 1)
        1.3
    """
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def weekday_index(day: date) -> int:
    """
    Weekday index with Sunday as 0 and Saturday as 6.

    Examples:
        >>> weekday_index(date(2025, 6, 1))  # Sunday
        0
        >>> weekday_index(date(2025, 6, 2))  # Monday
        1
    """
    return (day.weekday() + 1) % 7


def days_between(start: date, end: date) -> int:
    """Signed number of calendar days from start to end."""
    return (end - start).days


def each_day(start: date, end: date) -> list[date]:
    """All dates from start to end inclusive. Empty when start > end."""
    return [start + timedelta(days=offset) for offset in range(days_between(start, end) + 1)]


def week_start(day: date) -> date:
    """Monday of the week containing day."""
    return day - timedelta(days=day.weekday())


def week_end(day: date) -> date:
    """Sunday of the week containing day."""
    return week_start(day) + timedelta(days=6)


def to_date(value: date | datetime) -> date:
    """Strip the time part from a datetime, pass dates through."""
    if isinstance(value, datetime):
        return value.date()
    return value


def add_months(day: date, months: float) -> date:
    """
    Shift a date by a possibly fractional number of months.

    Whole months move the calendar month, clamping the day to the end of
    the target month. The fractional remainder is applied as 30-day months.

    Examples:
        >>> add_months(date(2025, 1, 31), 1)
        datetime.date(2025, 2, 28)
        >>> add_months(date(2025, 1, 1), 1.5)
        datetime.date(2025, 2, 16)
    """
    whole = int(months)
    fraction = months - whole

    month_index = day.month - 1 + whole
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    shifted = date(year, month, min(day.day, last_day))

    return shifted + timedelta(days=int(round_half_up(fraction * 30)))


def months_between(start: date, end: date) -> int:
    """Whole calendar months from start to end, ignoring the day of month."""
    return (end.year - start.year) * 12 + (end.month - start.month)
