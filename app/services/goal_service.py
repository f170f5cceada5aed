"""Goal service - business logic for goal management."""
import logging
from datetime import datetime
from typing import Optional

from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from app.models.goal import Goal, GoalCreate, GoalStatus, GoalUpdate
from app.utils import clock
from app.utils.slug import generate_unique_slug, slugify

logger = logging.getLogger(__name__)


class ActiveGoalConflict(ValueError):
    """Another goal became active while this one was being activated."""


class GoalSlugConflict(ValueError):
    """Another goal took the slug while this one was being saved."""


SLUG_INDEX = "goal_slug_per_user"
SLUG_ATTEMPTS = 3


def _is_slug_collision(error: DuplicateKeyError) -> bool:
    """Tell the per-user slug index apart from the one-active-goal index."""
    details = error.details or {}
    if "slug" in (details.get("keyPattern") or {}):
        return True
    return SLUG_INDEX in str(details.get("errmsg", "")) or SLUG_INDEX in str(error)


class GoalService:
    """Service for handling goal operations."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.goals = db["goals"]
        self.tasks = db["tasks"]

    def _doc_to_goal(self, doc: dict) -> Goal:
        """
        Convert database document to Goal model.

        Deadlines are stored as midnight datetimes.
        """
        deadline = doc["deadline"]
        return Goal(
            _id=str(doc["_id"]),
            user_id=doc["user_id"],
            title=doc["title"],
            slug=doc["slug"],
            description=doc.get("description"),
            deadline=deadline.date() if isinstance(deadline, datetime) else deadline,
            status=doc.get("status", GoalStatus.ACTIVE.value),
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
        )

    async def _find(self, user_id: str, slug: str) -> dict:
        goal_doc = await self.goals.find_one({"user_id": user_id, "slug": slug})
        if not goal_doc:
            raise ValueError("Goal not found")
        return goal_doc

    async def _pause_active(self, user_id: str, now: datetime, exclude_id=None) -> None:
        query = {"user_id": user_id, "status": GoalStatus.ACTIVE.value}
        if exclude_id is not None:
            query["_id"] = {"$ne": exclude_id}
        await self.goals.update_many(
            query,
            {"$set": {"status": GoalStatus.PAUSED.value, "updated_at": now}},
        )

    async def create_goal(
        self,
        user_id: str,
        goal_create: GoalCreate,
    ) -> Goal:
        """
        Create a new goal.

        A new active goal pauses whichever goal was active before.

        Args:
            user_id: User ID who owns the goal
            goal_create: Goal creation data

        Returns:
            Created goal object

        Raises:
            ActiveGoalConflict: If another goal was activated concurrently
            GoalSlugConflict: If concurrent creates kept taking the slug
        """
        base_slug = slugify(goal_create.title)
        now = clock.now()
        if goal_create.status == GoalStatus.ACTIVE:
            await self._pause_active(user_id, now)

        goal_doc = {
            "user_id": user_id,
            "title": goal_create.title,
            "slug": None,
            "description": goal_create.description,
            "deadline": datetime.combine(goal_create.deadline, datetime.min.time()),
            "status": goal_create.status.value,
            "created_at": now,
            "updated_at": now,
        }

        for _ in range(SLUG_ATTEMPTS):
            slug = await generate_unique_slug(self.goals, base_slug, user_id=user_id)
            goal_doc["slug"] = slug
            try:
                result = await self.goals.insert_one(goal_doc)
                break
            except DuplicateKeyError as e:
                if not _is_slug_collision(e):
                    raise ActiveGoalConflict("Another goal is already active")
                logger.info("Slug %s was taken concurrently for user %s, retrying", slug, user_id)
        else:
            raise GoalSlugConflict(f"Could not find a free slug for '{goal_create.title}'")

        goal_doc["_id"] = result.inserted_id
        logger.info("Created goal %s for user %s (%s)", slug, user_id, goal_create.status.value)
        return self._doc_to_goal(goal_doc)

    async def list_goals(
        self,
        user_id: str,
        statuses: Optional[list[GoalStatus]] = None,
    ) -> list[Goal]:
        """
        List goals for a user, newest first.

        Args:
            user_id: User ID
            statuses: Optional status filter

        Returns:
            List of goals
        """
        query: dict = {"user_id": user_id}
        if statuses:
            query["status"] = {"$in": [status.value for status in statuses]}

        cursor = self.goals.find(query).sort("created_at", DESCENDING)
        goal_docs = await cursor.to_list(length=None)
        return [self._doc_to_goal(doc) for doc in goal_docs]

    async def get_goal_by_slug(self, user_id: str, slug: str) -> Goal:
        """
        Get a single goal by slug.

        Raises:
            ValueError: If goal not found
        """
        return self._doc_to_goal(await self._find(user_id, slug))

    async def get_active_goal(self, user_id: str) -> Optional[Goal]:
        """The user's active goal, or None."""
        goal_doc = await self.goals.find_one({"user_id": user_id, "status": GoalStatus.ACTIVE.value})
        if not goal_doc:
            return None
        return self._doc_to_goal(goal_doc)

    async def update_goal(
        self,
        user_id: str,
        slug: str,
        goal_update: GoalUpdate,
    ) -> Goal:
        """
        Update a goal's title, description or deadline.

        A new title regenerates the slug and re-points the goal's tasks.

        Raises:
            ValueError: If goal not found
            GoalSlugConflict: If another goal took the new slug concurrently
        """
        existing = await self._find(user_id, slug)

        update_doc: dict = {"updated_at": clock.now()}
        new_slug = slug

        if goal_update.title is not None:
            update_doc["title"] = goal_update.title
            new_slug = await generate_unique_slug(
                self.goals,
                slugify(goal_update.title),
                user_id=user_id,
                exclude_id=existing["_id"],
            )
            update_doc["slug"] = new_slug
        if goal_update.description is not None:
            update_doc["description"] = goal_update.description
        if goal_update.deadline is not None:
            update_doc["deadline"] = datetime.combine(goal_update.deadline, datetime.min.time())

        try:
            updated_doc = await self.goals.find_one_and_update(
                {"_id": existing["_id"]},
                {"$set": update_doc},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            raise GoalSlugConflict(f"Slug '{new_slug}' was taken by another goal, try again")

        if new_slug != slug:
            await self.tasks.update_many(
                {"user_id": user_id, "goal_slug": slug},
                {"$set": {"goal_slug": new_slug}},
            )

        return self._doc_to_goal(updated_doc)

    async def set_status(
        self,
        user_id: str,
        slug: str,
        status: GoalStatus,
    ) -> Goal:
        """
        Move a goal through its lifecycle.

        Activating pauses the previously active goal first; the unique
        active-goal index rejects the write if another activation won.

        Raises:
            ValueError: If goal not found
            ActiveGoalConflict: If another goal was activated concurrently
        """
        existing = await self._find(user_id, slug)
        now = clock.now()

        if status == GoalStatus.ACTIVE:
            await self._pause_active(user_id, now, exclude_id=existing["_id"])

        try:
            updated_doc = await self.goals.find_one_and_update(
                {"_id": existing["_id"]},
                {"$set": {"status": status.value, "updated_at": now}},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            raise ActiveGoalConflict("Another goal is already active")

        logger.info("Goal %s for user %s is now %s", slug, user_id, status.value)
        return self._doc_to_goal(updated_doc)

    async def delete_goal(self, user_id: str, slug: str) -> dict:
        """
        Delete a goal together with its tasks.

        Returns:
            Dictionary with deleted_count and deleted_tasks

        Raises:
            ValueError: If goal not found
        """
        existing = await self._find(user_id, slug)

        tasks_result = await self.tasks.delete_many({"user_id": user_id, "goal_slug": slug})
        result = await self.goals.delete_one({"_id": existing["_id"]})

        logger.info(
            "Deleted goal %s for user %s with %d tasks",
            slug,
            user_id,
            tasks_result.deleted_count,
        )
        return {"deleted_count": result.deleted_count, "deleted_tasks": tasks_result.deleted_count}
