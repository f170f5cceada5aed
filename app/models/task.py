"""Task model definitions."""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class TaskStatus(str, Enum):
    """Task states: todo -> in_progress -> completed, completed -> todo on reopen."""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class RecurrencePattern(str, Enum):
    """How often a recurring task comes back."""

    DAILY = "daily"
    WEEKDAYS = "weekdays"
    WEEKLY = "weekly"


class TaskBase(BaseModel):
    """Base task fields."""

    title: str = Field(min_length=1)
    description: Optional[str] = None
    goal_slug: Optional[str] = None  # None = unassigned
    estimated_minutes: int = Field(gt=0)
    priority: int = 0  # lower runs first
    is_recurring: bool = False
    recurrence_pattern: Optional[RecurrencePattern] = None

    @model_validator(mode="after")
    def check_recurrence(self):
        """A pattern is required for recurring tasks and ignored otherwise."""
        if self.is_recurring and self.recurrence_pattern is None:
            raise ValueError("recurrence_pattern is required for recurring tasks")
        if not self.is_recurring:
            self.recurrence_pattern = None
        return self


class TaskCreate(TaskBase):
    """Task creation model."""

    pass


class TaskUpdate(BaseModel):
    """Task update model - all fields optional.

    Status changes go through start/complete/reopen.
    """

    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    goal_slug: Optional[str] = None
    estimated_minutes: Optional[int] = Field(default=None, gt=0)
    actual_minutes: Optional[int] = Field(default=None, ge=0)
    priority: Optional[int] = None
    is_recurring: Optional[bool] = None
    recurrence_pattern: Optional[RecurrencePattern] = None


class TaskComplete(BaseModel):
    """Body for completing a task. Without actual_minutes the running timer is used."""

    actual_minutes: Optional[int] = Field(default=None, ge=0)


class Task(TaskBase):
    """Full task model with database fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    user_id: str
    status: TaskStatus = TaskStatus.TODO
    actual_minutes: Optional[int] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"populate_by_name": True}
