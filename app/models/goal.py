"""Goal model definitions."""
from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class GoalStatus(str, Enum):
    """Goal lifecycle states. At most one goal per user is active."""

    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"


class GoalBase(BaseModel):
    """Base goal fields."""

    title: str = Field(min_length=1)
    description: Optional[str] = None
    deadline: date


class GoalCreate(GoalBase):
    """Goal creation model."""

    status: GoalStatus = GoalStatus.ACTIVE


class GoalUpdate(BaseModel):
    """Goal update model - all fields optional.

    Status changes go through the lifecycle endpoints instead.
    """

    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    deadline: Optional[date] = None


class Goal(GoalBase):
    """Full goal model with database fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    user_id: str
    slug: str
    status: GoalStatus = GoalStatus.ACTIVE
    created_at: datetime
    updated_at: datetime

    model_config = {"populate_by_name": True}
