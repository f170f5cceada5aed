"""Task service - business logic for tasks and their lifecycle."""
import logging
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, ReturnDocument

from app.calculations.time_accounting import elapsed_minutes
from app.models.task import Task, TaskComplete, TaskCreate, TaskStatus, TaskUpdate
from app.utils import clock

logger = logging.getLogger(__name__)


class TaskInProgressConflict(ValueError):
    """The user already has a running task."""


class TaskService:
    """Service for handling task operations."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.tasks = db["tasks"]
        self.goals = db["goals"]

    def _doc_to_task(self, doc: dict) -> Task:
        """Convert database document to Task model."""
        return Task(
            _id=str(doc["_id"]),
            user_id=doc["user_id"],
            goal_slug=doc.get("goal_slug"),
            title=doc["title"],
            description=doc.get("description"),
            estimated_minutes=doc["estimated_minutes"],
            actual_minutes=doc.get("actual_minutes"),
            status=doc.get("status", TaskStatus.TODO.value),
            priority=doc.get("priority", 0),
            is_recurring=doc.get("is_recurring", False),
            recurrence_pattern=doc.get("recurrence_pattern"),
            started_at=doc.get("started_at"),
            completed_at=doc.get("completed_at"),
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
        )

    @staticmethod
    def _object_id(task_id: str) -> ObjectId:
        try:
            return ObjectId(task_id)
        except (InvalidId, TypeError):
            raise ValueError("Invalid task ID format")

    async def _find(self, user_id: str, task_id: str) -> dict:
        task_doc = await self.tasks.find_one({"_id": self._object_id(task_id), "user_id": user_id})
        if not task_doc:
            raise ValueError("Task not found")
        return task_doc

    async def _check_goal(self, user_id: str, goal_slug: Optional[str]) -> None:
        if goal_slug is None:
            return
        goal = await self.goals.find_one({"user_id": user_id, "slug": goal_slug})
        if not goal:
            raise ValueError("Goal not found")

    async def _set(self, task_doc: dict, update_doc: dict) -> Task:
        update_doc["updated_at"] = clock.now()
        updated_doc = await self.tasks.find_one_and_update(
            {"_id": task_doc["_id"], "user_id": task_doc["user_id"]},
            {"$set": update_doc},
            return_document=ReturnDocument.AFTER,
        )
        return self._doc_to_task(updated_doc)

    async def create_task(self, user_id: str, task_create: TaskCreate) -> Task:
        """
        Create a new task.

        Args:
            user_id: User ID who owns the task
            task_create: Task creation data

        Returns:
            Created task object

        Raises:
            ValueError: If the goal slug doesn't exist
        """
        await self._check_goal(user_id, task_create.goal_slug)

        now = clock.now()
        task_doc = {
            "user_id": user_id,
            "goal_slug": task_create.goal_slug,
            "title": task_create.title,
            "description": task_create.description,
            "estimated_minutes": task_create.estimated_minutes,
            "actual_minutes": None,
            "status": TaskStatus.TODO.value,
            "priority": task_create.priority,
            "is_recurring": task_create.is_recurring,
            "recurrence_pattern": task_create.recurrence_pattern.value if task_create.recurrence_pattern else None,
            "started_at": None,
            "completed_at": None,
            "created_at": now,
            "updated_at": now,
        }

        result = await self.tasks.insert_one(task_doc)
        task_doc["_id"] = result.inserted_id

        return self._doc_to_task(task_doc)

    async def list_tasks(
        self,
        user_id: str,
        goal_slugs: Optional[list[str]] = None,
        status: Optional[TaskStatus] = None,
        unassigned: bool = False,
    ) -> list[Task]:
        """
        List tasks ordered by priority (lowest value first).

        Args:
            user_id: User ID
            goal_slugs: Only tasks belonging to these goals
            status: Optional status filter
            unassigned: Only tasks without a goal (overrides goal_slugs)

        Returns:
            List of tasks
        """
        query: dict = {"user_id": user_id}

        if unassigned:
            query["goal_slug"] = None
        elif goal_slugs is not None:
            query["goal_slug"] = {"$in": goal_slugs}
        if status:
            query["status"] = status.value

        cursor = self.tasks.find(query).sort("priority", ASCENDING)
        task_docs = await cursor.to_list(length=None)
        return [self._doc_to_task(doc) for doc in task_docs]

    async def get_task(self, user_id: str, task_id: str) -> Task:
        """
        Get a task by ID.

        Raises:
            ValueError: If task not found or invalid ID format
        """
        return self._doc_to_task(await self._find(user_id, task_id))

    async def update_task(self, user_id: str, task_id: str, task_update: TaskUpdate) -> Task:
        """
        Update a task's fields.

        Raises:
            ValueError: If task or goal not found, or recurrence is inconsistent
        """
        existing = await self._find(user_id, task_id)
        await self._check_goal(user_id, task_update.goal_slug)

        changes = task_update.model_dump(exclude_none=True)
        if "recurrence_pattern" in changes:
            changes["recurrence_pattern"] = changes["recurrence_pattern"].value
        is_recurring = changes.get("is_recurring", existing.get("is_recurring", False))
        if not is_recurring:
            # One-off tasks never keep a pattern, matching TaskCreate
            changes.pop("recurrence_pattern", None)
            if "is_recurring" in changes:
                changes["recurrence_pattern"] = None
        elif changes.get("is_recurring") and not changes.get("recurrence_pattern", existing.get("recurrence_pattern")):
            raise ValueError("recurrence_pattern is required for recurring tasks")

        return await self._set(existing, changes)

    async def start_task(self, user_id: str, task_id: str) -> Task:
        """
        Start the timer on a task.

        Raises:
            ValueError: If task not found or already completed
            TaskInProgressConflict: If another task is running
        """
        existing = await self._find(user_id, task_id)
        if existing.get("status") == TaskStatus.COMPLETED.value:
            raise ValueError("Task already completed")

        running = await self.tasks.find_one({
            "user_id": user_id,
            "status": TaskStatus.IN_PROGRESS.value,
            "_id": {"$ne": existing["_id"]},
        })
        if running:
            raise TaskInProgressConflict("Another task is already in progress")

        task = await self._set(existing, {
            "status": TaskStatus.IN_PROGRESS.value,
            "started_at": clock.now(),
        })
        logger.info("Started task %s for user %s", task_id, user_id)
        return task

    async def complete_task(
        self,
        user_id: str,
        task_id: str,
        task_complete: Optional[TaskComplete] = None,
    ) -> Task:
        """
        Mark a task completed.

        The actual time comes from the request if given, otherwise from the
        running timer. Without either, the estimate stands in later.

        Raises:
            ValueError: If task not found
        """
        existing = await self._find(user_id, task_id)
        now = clock.now()

        actual = task_complete.actual_minutes if task_complete else None
        if actual is None and existing.get("started_at") is not None:
            actual = elapsed_minutes(existing["started_at"], now)

        update_doc = {
            "status": TaskStatus.COMPLETED.value,
            "completed_at": now,
            "started_at": None,
        }
        if actual is not None:
            update_doc["actual_minutes"] = actual

        task = await self._set(existing, update_doc)
        logger.info("Completed task %s for user %s (%s min)", task_id, user_id, actual)
        return task

    async def reopen_task(self, user_id: str, task_id: str) -> Task:
        """
        Move a completed task back to todo and clear its completion time.

        Raises:
            ValueError: If task not found
        """
        existing = await self._find(user_id, task_id)
        return await self._set(existing, {
            "status": TaskStatus.TODO.value,
            "completed_at": None,
            "started_at": None,
        })

    async def delete_task(self, user_id: str, task_id: str) -> dict:
        """
        Delete a task.

        Returns:
            Dictionary with deleted_count

        Raises:
            ValueError: If task not found
        """
        existing = await self._find(user_id, task_id)
        result = await self.tasks.delete_one({"_id": existing["_id"], "user_id": user_id})
        return {"deleted_count": result.deleted_count}
