"""User profile and scheduling settings."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


def _normalize_work_days(value: list[int]) -> list[int]:
    for day in value:
        if day < 0 or day > 6:
            raise ValueError("work days must be weekday indices 0 (Sunday) to 6 (Saturday)")
    return sorted(set(value))


class UserSettings(BaseModel):
    """Scheduling inputs for capacity and pace calculations."""

    daily_hours_available: float = Field(default=6.0, gt=0, le=24)
    work_days: list[int] = Field(default_factory=lambda: [1, 2, 3, 4, 5])

    @field_validator("work_days")
    @classmethod
    def check_work_days(cls, value: list[int]) -> list[int]:
        return _normalize_work_days(value)


class UserSettingsUpdate(BaseModel):
    """Profile/settings update model - all fields optional."""

    name: Optional[str] = None
    avatar_id: Optional[str] = None
    daily_hours_available: Optional[float] = Field(default=None, gt=0, le=24)
    work_days: Optional[list[int]] = None

    @field_validator("work_days")
    @classmethod
    def check_work_days(cls, value: Optional[list[int]]) -> Optional[list[int]]:
        if value is None:
            return value
        return _normalize_work_days(value)


class UserProfile(UserSettings):
    """Profile as returned by the API. The id is the identity provider's subject."""

    id: str
    name: Optional[str] = None
    avatar_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
