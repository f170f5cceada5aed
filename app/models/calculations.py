"""Result and input models for the pacing and runway calculations."""
from datetime import date
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from app.models.goal import Goal
from app.models.task import Task


class Bounded(BaseModel):
    """A finite quantity."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["bounded"] = "bounded"
    value: float


class Unbounded(BaseModel):
    """A quantity with no finite value: no deadline left, or no net burn."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["unbounded"] = "unbounded"


UNBOUNDED = Unbounded()

Horizon = Annotated[Union[Bounded, Unbounded], Field(discriminator="kind")]


def is_unbounded(value: Horizon) -> bool:
    return isinstance(value, Unbounded)


class PaceResult(BaseModel):
    """Whether the remaining work fits before the deadline."""

    days_remaining: int
    required_hours_per_day: Horizon
    is_at_risk: bool
    shortfall_hours_per_day: Optional[float] = None


class DeadlineStatus(BaseModel):
    days_remaining: int  # negative when overdue
    is_overdue: bool


class RunwayStatus(str, Enum):
    HEALTHY = "healthy"
    CAUTION = "caution"
    CRITICAL = "critical"


class RunwayInput(BaseModel):
    cash_balance: float = Field(ge=0)
    monthly_burn: float = Field(ge=0)
    monthly_revenue: float = Field(default=0, ge=0)
    today: Optional[date] = None


class RunwayScenario(BaseModel):
    """What-if adjustments. Percentages are relative, e.g. -20 cuts burn by a fifth."""

    additional_cash: float = 0
    burn_change_percent: float = 0
    revenue_change_percent: float = 0


class RunwayScenarioInput(RunwayInput):
    scenario: RunwayScenario = Field(default_factory=RunwayScenario)


class RunwayCalculation(BaseModel):
    months: Horizon
    days: Horizon
    end_date: date
    status: RunwayStatus


class TrendDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    FLAT = "flat"


class TrendInput(BaseModel):
    current: float
    previous: float


class TrendResult(BaseModel):
    direction: TrendDirection
    change: float
    percentage: float


class PaceInput(BaseModel):
    remaining_minutes: int
    deadline: date
    daily_hours_available: float = Field(gt=0)
    today: Optional[date] = None


class TimeTotals(BaseModel):
    """Aggregate minutes over a set of tasks."""

    task_count: int
    completed_count: int
    total_estimated_minutes: int
    total_actual_minutes: int
    remaining_minutes: int  # negative means ahead of estimate
    progress_percent: int


class GoalProgress(BaseModel):
    goal: Goal
    totals: TimeTotals
    deadline: DeadlineStatus
    pace: PaceResult


class ProgressOverview(BaseModel):
    """Totals for the requested scope, plus pace for the active goal if any."""

    scope: Literal["active", "all"]
    goal_count: int
    totals: TimeTotals
    active_goal: Optional[GoalProgress] = None


class DayBreakdown(BaseModel):
    day: date
    is_work_day: bool
    planned_minutes: int
    actual_minutes: int


class WeekSummary(BaseModel):
    week_start: date
    week_end: date
    capacity_minutes: int
    work_day_count: int
    remaining_work_days: int
    completed_minutes: int
    completed_count: int
    remaining_estimated_minutes: int
    completion_rate: int
    average_daily_minutes: int
    days: list[DayBreakdown]


class TodayPlan(BaseModel):
    """Open tasks of the active goal against today's hour budget."""

    day: date
    budget_minutes: int
    planned_minutes: int
    unplanned_minutes: int  # negative when over-committed
    tasks: list[Task]
