"""Cash runway: how long a balance lasts at the current net burn."""
from datetime import date

from app.models.calculations import (
    UNBOUNDED,
    Bounded,
    RunwayCalculation,
    RunwayScenario,
    RunwayStatus,
)
from app.utils.dates import add_months, months_between, round_half_up

# Stand-in end date for runways that never run out.
RUNWAY_HORIZON = date(2099, 12, 31)

HEALTHY_MONTHS = 6
CAUTION_MONTHS = 3


def runway_status(months: float) -> RunwayStatus:
    if months > HEALTHY_MONTHS:
        return RunwayStatus.HEALTHY
    if months > CAUTION_MONTHS:
        return RunwayStatus.CAUTION
    return RunwayStatus.CRITICAL


def runway_end_date(today: date, months: float) -> date:
    """today shifted by months, kept between today and RUNWAY_HORIZON."""
    if months <= 0:
        return today
    if months >= months_between(today, RUNWAY_HORIZON):
        return RUNWAY_HORIZON
    # The fractional month becomes extra days rather than being dropped.
    return add_months(today, months)


def calculate_runway(
    cash_balance: float,
    monthly_burn: float,
    today: date,
    monthly_revenue: float = 0,
) -> RunwayCalculation:
    """
    Months of cash left at the current net burn.

    Breakeven or profitable (net burn <= 0) is an unbounded, healthy runway.

    Args:
        cash_balance: Cash on hand
        monthly_burn: Monthly spend
        today: Date the runway is measured from
        monthly_revenue: Monthly income offsetting the burn

    Returns:
        RunwayCalculation with months, days (30-day months), end date and status
    """
    net_burn = monthly_burn - monthly_revenue
    if net_burn <= 0:
        return RunwayCalculation(
            months=UNBOUNDED,
            days=UNBOUNDED,
            end_date=RUNWAY_HORIZON,
            status=RunwayStatus.HEALTHY,
        )

    months = cash_balance / net_burn
    return RunwayCalculation(
        months=Bounded(value=months),
        days=Bounded(value=round_half_up(months * 30)),
        end_date=runway_end_date(today, months),
        status=runway_status(months),
    )


def calculate_scenario(
    cash_balance: float,
    monthly_burn: float,
    today: date,
    monthly_revenue: float = 0,
    scenario: RunwayScenario | None = None,
) -> RunwayCalculation:
    """Runway after applying what-if cash, burn and revenue adjustments."""
    scenario = scenario or RunwayScenario()
    return calculate_runway(
        cash_balance + scenario.additional_cash,
        monthly_burn * (1 + scenario.burn_change_percent / 100),
        today,
        monthly_revenue=monthly_revenue * (1 + scenario.revenue_change_percent / 100),
    )
