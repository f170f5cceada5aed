"""Progress service - feeds stored goals, tasks and settings into the calculation engine."""
from datetime import date
from typing import Literal

from app.calculations import capacity, pace, time_accounting
from app.models.calculations import GoalProgress, ProgressOverview, TimeTotals, TodayPlan, WeekSummary
from app.models.goal import Goal, GoalStatus
from app.models.task import Task, TaskStatus
from app.services.goal_service import GoalService
from app.services.settings_service import SettingsService
from app.services.task_service import TaskService
from app.utils.dates import week_end, week_start

OPEN_GOAL_STATUSES = [GoalStatus.ACTIVE, GoalStatus.PAUSED]


def summarize(tasks: list[Task]) -> TimeTotals:
    """Time accounting totals for a set of tasks."""
    return TimeTotals(
        task_count=len(tasks),
        completed_count=sum(1 for task in tasks if task.status == TaskStatus.COMPLETED),
        total_estimated_minutes=time_accounting.total_estimated(tasks),
        total_actual_minutes=time_accounting.total_actual(tasks),
        remaining_minutes=time_accounting.remaining(tasks),
        progress_percent=time_accounting.progress_percent(tasks),
    )


def goal_progress(goal: Goal, tasks: list[Task], daily_hours: float, today: date) -> GoalProgress:
    totals = summarize(tasks)
    return GoalProgress(
        goal=goal,
        totals=totals,
        deadline=pace.deadline_status(goal.deadline, goal.status, today),
        pace=pace.calculate_pace(totals.remaining_minutes, goal.deadline, today, daily_hours),
    )


class ProgressService:
    """Read-only views over goals and tasks."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.goal_service = GoalService(db)
        self.task_service = TaskService(db)
        self.settings_service = SettingsService(db)

    async def get_goal_progress(self, user_id: str, slug: str, today: date) -> GoalProgress:
        """
        Totals and pace for one goal.

        Raises:
            ValueError: If goal not found
        """
        goal = await self.goal_service.get_goal_by_slug(user_id, slug)
        tasks = await self.task_service.list_tasks(user_id, goal_slugs=[slug])
        profile = await self.settings_service.get_profile(user_id)
        return goal_progress(goal, tasks, profile.daily_hours_available, today)

    async def get_overview(
        self,
        user_id: str,
        today: date,
        scope: Literal["active", "all"] = "active",
    ) -> ProgressOverview:
        """
        Totals for the active goal, or for every active and paused goal.

        Pace is always reported for the active goal, when there is one.
        """
        profile = await self.settings_service.get_profile(user_id)
        active = await self.goal_service.get_active_goal(user_id)

        active_tasks = []
        if active is not None:
            active_tasks = await self.task_service.list_tasks(user_id, goal_slugs=[active.slug])

        if scope == "all":
            goals = await self.goal_service.list_goals(user_id, statuses=OPEN_GOAL_STATUSES)
            tasks = await self.task_service.list_tasks(user_id, goal_slugs=[goal.slug for goal in goals])
        else:
            goals = [active] if active is not None else []
            tasks = active_tasks

        return ProgressOverview(
            scope=scope,
            goal_count=len(goals),
            totals=summarize(tasks),
            active_goal=(
                goal_progress(active, active_tasks, profile.daily_hours_available, today)
                if active is not None
                else None
            ),
        )

    async def get_week_summary(self, user_id: str, day: date, today: date) -> WeekSummary:
        """
        Capacity and completed work for the Monday-to-Sunday week containing day.

        Args:
            user_id: User ID
            day: Any date in the week to summarize
            today: Remaining work days are counted from here

        Returns:
            WeekSummary across tasks of active and paused goals
        """
        profile = await self.settings_service.get_profile(user_id)
        goals = await self.goal_service.list_goals(user_id, statuses=OPEN_GOAL_STATUSES)
        tasks = await self.task_service.list_tasks(user_id, goal_slugs=[goal.slug for goal in goals])

        start, end = week_start(day), week_end(day)
        hours, work_days = profile.daily_hours_available, profile.work_days

        planned = capacity.weekly_capacity_minutes(hours, work_days, start, end)
        done = time_accounting.completed_between(tasks, start, end)
        done_minutes = sum(time_accounting.minutes_spent(task) for task in done)
        open_tasks = [task for task in tasks if task.status != TaskStatus.COMPLETED]
        days = capacity.daily_breakdown(start, end, tasks, hours, work_days)

        return WeekSummary(
            week_start=start,
            week_end=end,
            capacity_minutes=planned,
            work_day_count=len(capacity.work_days_in_range(start, end, work_days)),
            remaining_work_days=capacity.remaining_work_days(today, start, end, work_days),
            completed_minutes=done_minutes,
            completed_count=len(done),
            remaining_estimated_minutes=time_accounting.total_estimated(open_tasks),
            completion_rate=capacity.completion_rate(done_minutes, planned),
            average_daily_minutes=capacity.average_daily_minutes(days),
            days=days,
        )

    async def get_today_plan(self, user_id: str, today: date) -> TodayPlan:
        """Open tasks of the active goal, by priority, against today's budget."""
        profile = await self.settings_service.get_profile(user_id)
        active = await self.goal_service.get_active_goal(user_id)

        tasks = []
        if active is not None:
            tasks = await self.task_service.list_tasks(user_id, goal_slugs=[active.slug])
        open_tasks = [task for task in tasks if task.status != TaskStatus.COMPLETED]

        return TodayPlan(
            day=today,
            budget_minutes=capacity.daily_minutes(profile.daily_hours_available),
            planned_minutes=time_accounting.total_estimated(open_tasks),
            unplanned_minutes=capacity.unplanned_minutes(profile.daily_hours_available, open_tasks),
            tasks=open_tasks,
        )
