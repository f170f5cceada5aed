"""Calculation router - stateless runway, trend and pace calculators."""
from fastapi import APIRouter, Depends

from app.calculations.pace import calculate_pace
from app.calculations.runway import calculate_runway, calculate_scenario
from app.calculations.trend import calculate_trend
from app.models.calculations import (
    PaceInput,
    PaceResult,
    RunwayCalculation,
    RunwayInput,
    RunwayScenarioInput,
    TrendInput,
    TrendResult,
)
from app.routers.auth import get_current_user_id
from app.utils import clock


router = APIRouter(
    prefix="/calculations",
    tags=["calculations"],
    dependencies=[Depends(get_current_user_id)],
)


@router.post("/runway", response_model=RunwayCalculation)
async def runway(body: RunwayInput):
    """
    Months of cash left at the current net burn.

    - months and days are {"kind": "unbounded"} when revenue covers burn
    """
    return calculate_runway(
        body.cash_balance,
        body.monthly_burn,
        body.today or clock.today(),
        monthly_revenue=body.monthly_revenue,
    )


@router.post("/runway/scenario", response_model=RunwayCalculation)
async def runway_scenario(body: RunwayScenarioInput):
    """Runway after what-if changes to cash, burn and revenue."""
    return calculate_scenario(
        body.cash_balance,
        body.monthly_burn,
        body.today or clock.today(),
        monthly_revenue=body.monthly_revenue,
        scenario=body.scenario,
    )


@router.post("/trend", response_model=TrendResult)
async def trend(body: TrendInput):
    """Direction and percentage change between two metric samples."""
    return calculate_trend(body.current, body.previous)


@router.post("/pace", response_model=PaceResult)
async def pace(body: PaceInput):
    """Hours per day needed to finish remaining work by a deadline."""
    return calculate_pace(
        body.remaining_minutes,
        body.deadline,
        body.today or clock.today(),
        body.daily_hours_available,
    )
