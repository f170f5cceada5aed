"""Task router - API endpoints for tasks and their lifecycle."""
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status

from app.database import get_database
from app.models.task import Task, TaskComplete, TaskCreate, TaskStatus, TaskUpdate
from app.routers.auth import get_current_user_id
from app.services.task_service import TaskInProgressConflict, TaskService


router = APIRouter(prefix="/tasks", tags=["tasks"])


def _http_error(e: ValueError) -> HTTPException:
    """Map service errors: conflicts to 409, missing records to 404, the rest to 400."""
    if isinstance(e, TaskInProgressConflict):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    if "not found" in str(e):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("", response_model=Task, status_code=status.HTTP_201_CREATED)
async def create_task(
    task: TaskCreate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Create a new task.

    - Requires authentication
    - goal_slug is optional; tasks without it are unassigned
    - Returns 404 if the goal doesn't exist
    """
    service = TaskService(db)
    try:
        return await service.create_task(user_id=user_id, task_create=task)
    except ValueError as e:
        raise _http_error(e)


@router.get("", response_model=list[Task])
async def list_tasks(
    goal_slug: Optional[str] = Query(None, description="Filter by goal"),
    task_status: Optional[TaskStatus] = Query(None, alias="status", description="Filter by status"),
    unassigned: bool = Query(False, description="Only tasks without a goal"),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    List tasks for the current user, ordered by priority.

    - Optional filters: goal_slug, status, unassigned
    """
    service = TaskService(db)
    return await service.list_tasks(
        user_id=user_id,
        goal_slugs=[goal_slug] if goal_slug else None,
        status=task_status,
        unassigned=unassigned,
    )


@router.get("/{task_id}", response_model=Task)
async def get_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Get a task by ID."""
    service = TaskService(db)
    try:
        return await service.get_task(user_id=user_id, task_id=task_id)
    except ValueError as e:
        raise _http_error(e)


@router.patch("/{task_id}", response_model=Task)
async def update_task(
    task_id: str,
    task_update: TaskUpdate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Update a task.

    - Status changes use /start, /complete and /reopen
    """
    service = TaskService(db)
    try:
        return await service.update_task(user_id=user_id, task_id=task_id, task_update=task_update)
    except ValueError as e:
        raise _http_error(e)


@router.post("/{task_id}/start", response_model=Task)
async def start_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Start working on a task.

    - Only one task can be in progress at a time (409 otherwise)
    """
    service = TaskService(db)
    try:
        return await service.start_task(user_id=user_id, task_id=task_id)
    except ValueError as e:
        raise _http_error(e)


@router.post("/{task_id}/complete", response_model=Task)
async def complete_task(
    task_id: str,
    task_complete: Optional[TaskComplete] = Body(None),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Complete a task.

    - actual_minutes is optional; a running timer fills it in otherwise
    """
    service = TaskService(db)
    try:
        return await service.complete_task(user_id=user_id, task_id=task_id, task_complete=task_complete)
    except ValueError as e:
        raise _http_error(e)


@router.post("/{task_id}/reopen", response_model=Task)
async def reopen_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Move a completed task back to todo."""
    service = TaskService(db)
    try:
        return await service.reopen_task(user_id=user_id, task_id=task_id)
    except ValueError as e:
        raise _http_error(e)


@router.delete("/{task_id}")
async def delete_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Delete a task."""
    service = TaskService(db)
    try:
        return await service.delete_task(user_id=user_id, task_id=task_id)
    except ValueError as e:
        raise _http_error(e)
