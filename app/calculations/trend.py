"""Direction and size of change between two samples of a metric."""
from app.models.calculations import TrendDirection, TrendResult

# Changes smaller than this percentage read as flat.
FLAT_THRESHOLD_PERCENT = 0.1


def calculate_trend(current: float, previous: float) -> TrendResult:
    change = current - previous

    if previous == 0:
        if current > 0:
            direction = TrendDirection.UP
        elif current < 0:
            direction = TrendDirection.DOWN
        else:
            direction = TrendDirection.FLAT
        return TrendResult(direction=direction, change=change, percentage=0)

    percentage = abs(change / previous) * 100
    if percentage < FLAT_THRESHOLD_PERCENT:
        direction = TrendDirection.FLAT
    else:
        direction = TrendDirection.UP if change > 0 else TrendDirection.DOWN

    return TrendResult(direction=direction, change=change, percentage=percentage)
