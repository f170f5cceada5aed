"""User router - profile and scheduling settings of the caller."""
from fastapi import APIRouter, Depends

from app.database import get_database
from app.models.user import UserProfile, UserSettingsUpdate
from app.routers.auth import get_current_user_id
from app.services.settings_service import SettingsService


router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserProfile)
async def get_me(
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Get the caller's profile and settings.

    - Requires authentication
    - Users who never saved settings get the defaults
    """
    service = SettingsService(db)
    return await service.get_profile(user_id)


@router.patch("/me", response_model=UserProfile)
async def update_me(
    update: UserSettingsUpdate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Update name, avatar, daily hours or work days.

    - Requires authentication
    - Work days are weekday indices, 0 = Sunday
    """
    service = SettingsService(db)
    return await service.update_profile(user_id, update)
