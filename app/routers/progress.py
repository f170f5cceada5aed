"""Progress router - derived totals, pace and weekly capacity."""
from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query

from app.database import get_database
from app.models.calculations import ProgressOverview, TodayPlan, WeekSummary
from app.routers.auth import get_current_user_id
from app.services.progress_service import ProgressService
from app.utils import clock


router = APIRouter(prefix="/progress", tags=["progress"])


@router.get("", response_model=ProgressOverview)
async def get_progress(
    scope: Literal["active", "all"] = Query("active", description="Active goal only, or all open goals"),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Time totals for the active goal (or all active and paused goals).

    - Pace is reported for the active goal when there is one
    """
    service = ProgressService(db)
    return await service.get_overview(user_id=user_id, today=clock.today(), scope=scope)


@router.get("/week", response_model=WeekSummary)
async def get_week(
    day: Optional[date] = Query(None, description="Any date in the week, defaults to today"),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Capacity and completed work for a Monday-to-Sunday week.
    """
    today = clock.today()
    service = ProgressService(db)
    return await service.get_week_summary(user_id=user_id, day=day or today, today=today)


@router.get("/today", response_model=TodayPlan)
async def get_today(
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Open tasks of the active goal against today's hour budget."""
    service = ProgressService(db)
    return await service.get_today_plan(user_id=user_id, today=clock.today())
