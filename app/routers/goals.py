"""Goal router - API endpoints for goal management."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.database import get_database
from app.models.calculations import GoalProgress
from app.models.goal import Goal, GoalCreate, GoalStatus, GoalUpdate
from app.routers.auth import get_current_user_id
from app.services.goal_service import ActiveGoalConflict, GoalService, GoalSlugConflict
from app.services.progress_service import ProgressService
from app.utils import clock


router = APIRouter(prefix="/goals", tags=["goals"])


@router.post("", response_model=Goal, status_code=status.HTTP_201_CREATED)
async def create_goal(
    goal: GoalCreate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Create a new goal.

    - Requires authentication
    - Generates unique slug from title
    - An active goal pauses the previously active one
    """
    service = GoalService(db)
    try:
        return await service.create_goal(user_id=user_id, goal_create=goal)
    except (ActiveGoalConflict, GoalSlugConflict) as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("", response_model=list[Goal])
async def list_goals(
    goal_status: Optional[list[GoalStatus]] = Query(None, alias="status", description="Filter by status"),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    List goals for the authenticated user, newest first.

    - Requires authentication
    - Optional filter: status (repeatable)
    """
    service = GoalService(db)
    return await service.list_goals(user_id=user_id, statuses=goal_status)


@router.get("/{slug}", response_model=Goal)
async def get_goal(
    slug: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Get a single goal by slug.

    - Returns 404 if goal not found
    """
    service = GoalService(db)
    try:
        return await service.get_goal_by_slug(user_id=user_id, slug=slug)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/{slug}/pace", response_model=GoalProgress)
async def get_goal_pace(
    slug: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Time totals, deadline status and required pace for a goal.

    - Returns 404 if goal not found
    """
    service = ProgressService(db)
    try:
        return await service.get_goal_progress(user_id=user_id, slug=slug, today=clock.today())
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.patch("/{slug}", response_model=Goal)
async def update_goal(
    slug: str,
    goal_update: GoalUpdate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Update a goal.

    - If title is updated, slug is regenerated
    - Returns 404 if goal not found, 409 if the new slug was taken concurrently
    """
    service = GoalService(db)
    try:
        return await service.update_goal(
            user_id=user_id,
            slug=slug,
            goal_update=goal_update,
        )
    except GoalSlugConflict as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


async def _set_status(db, user_id: str, slug: str, goal_status: GoalStatus) -> Goal:
    service = GoalService(db)
    try:
        return await service.set_status(user_id=user_id, slug=slug, status=goal_status)
    except ActiveGoalConflict as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/{slug}/activate", response_model=Goal)
async def activate_goal(
    slug: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Make this the active goal, pausing the current one.

    - Returns 409 if a concurrent activation won
    """
    return await _set_status(db, user_id, slug, GoalStatus.ACTIVE)


@router.post("/{slug}/pause", response_model=Goal)
async def pause_goal(
    slug: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Pause a goal."""
    return await _set_status(db, user_id, slug, GoalStatus.PAUSED)


@router.post("/{slug}/complete", response_model=Goal)
async def complete_goal(
    slug: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Mark a goal completed."""
    return await _set_status(db, user_id, slug, GoalStatus.COMPLETED)


@router.delete("/{slug}")
async def delete_goal(
    slug: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Delete a goal and all of its tasks.

    - Returns 404 if goal not found
    """
    service = GoalService(db)
    try:
        return await service.delete_goal(user_id=user_id, slug=slug)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
