"""Tests for GoalService."""
import pytest
from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

NOW = datetime(2025, 6, 2, 9, 0, tzinfo=timezone.utc)


def make_db(existing_slugs=()):
    """Database mock with goals and tasks collections."""
    goals = MagicMock()
    tasks = MagicMock()

    cursor = MagicMock()
    cursor.to_list = AsyncMock(return_value=[{"slug": slug} for slug in existing_slugs])
    cursor.sort.return_value = cursor
    goals.find.return_value = cursor

    for collection in (goals, tasks):
        collection.find_one = AsyncMock(return_value=None)
        collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id=ObjectId()))
        collection.update_many = AsyncMock(return_value=MagicMock(modified_count=0))
        collection.find_one_and_update = AsyncMock()
        collection.delete_one = AsyncMock(return_value=MagicMock(deleted_count=1))
        collection.delete_many = AsyncMock(return_value=MagicMock(deleted_count=0))

    db = MagicMock()
    db.__getitem__.side_effect = lambda key: {"goals": goals, "tasks": tasks}[key]
    return db, goals, tasks


def goal_doc(slug="ship-the-mvp", status="active", **overrides):
    doc = {
        "_id": ObjectId(),
        "user_id": "user123",
        "title": "Ship the MVP",
        "slug": slug,
        "description": None,
        "deadline": datetime(2025, 7, 1),
        "status": status,
        "created_at": NOW,
        "updated_at": NOW,
    }
    doc.update(overrides)
    return doc


@pytest.mark.asyncio
class TestGoalServiceCreate:
    """Tests for creating goals."""

    async def test_create_goal_success(self):
        """Test successful goal creation pauses the current active goal."""
        from app.services.goal_service import GoalService
        from app.models.goal import GoalCreate, GoalStatus

        db, goals, _ = make_db()
        service = GoalService(db)

        goal = await service.create_goal(
            user_id="user123",
            goal_create=GoalCreate(title="Ship the MVP", deadline=date(2025, 7, 1)),
        )

        assert goal.slug == "ship-the-mvp"
        assert goal.status == GoalStatus.ACTIVE
        assert goal.deadline == date(2025, 7, 1)

        pause_query, pause_update = goals.update_many.call_args[0]
        assert pause_query == {"user_id": "user123", "status": "active"}
        assert pause_update["$set"]["status"] == "paused"

        inserted = goals.insert_one.call_args[0][0]
        assert inserted["deadline"] == datetime(2025, 7, 1)

    async def test_create_paused_goal_leaves_active_goal(self):
        """Test creating a paused goal doesn't touch the active one."""
        from app.services.goal_service import GoalService
        from app.models.goal import GoalCreate, GoalStatus

        db, goals, _ = make_db()
        service = GoalService(db)

        goal = await service.create_goal(
            user_id="user123",
            goal_create=GoalCreate(title="Later", deadline=date(2025, 9, 1), status=GoalStatus.PAUSED),
        )

        assert goal.status == GoalStatus.PAUSED
        goals.update_many.assert_not_called()

    async def test_create_goal_duplicate_slug(self):
        """Test creating goal with duplicate slug generates unique slug."""
        from app.services.goal_service import GoalService
        from app.models.goal import GoalCreate

        db, _, _ = make_db(existing_slugs=["ship-the-mvp"])
        service = GoalService(db)

        goal = await service.create_goal(
            user_id="user123",
            goal_create=GoalCreate(title="Ship the MVP", deadline=date(2025, 7, 1)),
        )

        assert goal.slug == "ship-the-mvp-2"

    async def test_create_goal_activation_race(self):
        """Test the unique active-goal index surfaces as a conflict."""
        from app.services.goal_service import ActiveGoalConflict, GoalService
        from app.models.goal import GoalCreate

        db, goals, _ = make_db()
        goals.insert_one.side_effect = DuplicateKeyError("one_active_goal_per_user")
        service = GoalService(db)

        with pytest.raises(ActiveGoalConflict):
            await service.create_goal(
                user_id="user123",
                goal_create=GoalCreate(title="Ship the MVP", deadline=date(2025, 7, 1)),
            )


    async def test_create_goal_retries_slug_taken_concurrently(self):
        """Test a slug index collision retries instead of reporting an active-goal conflict."""
        from app.services.goal_service import GoalService
        from app.models.goal import GoalCreate, GoalStatus

        db, goals, _ = make_db()
        goals.insert_one.side_effect = [
            DuplicateKeyError("E11000 duplicate key error index: goal_slug_per_user"),
            MagicMock(inserted_id=ObjectId()),
        ]
        service = GoalService(db)

        goal = await service.create_goal(
            user_id="user123",
            goal_create=GoalCreate(title="Later", deadline=date(2025, 9, 1), status=GoalStatus.PAUSED),
        )

        assert goal.slug == "later"
        assert goals.insert_one.call_count == 2
        assert goals.find.call_count == 2

    async def test_create_goal_slug_collision_by_key_pattern(self):
        """Test the error details identify the slug index too."""
        from app.services.goal_service import GoalService, GoalSlugConflict
        from app.models.goal import GoalCreate, GoalStatus

        db, goals, _ = make_db()
        goals.insert_one.side_effect = DuplicateKeyError(
            "E11000", 11000, {"keyPattern": {"user_id": 1, "slug": 1}}
        )
        service = GoalService(db)

        with pytest.raises(GoalSlugConflict):
            await service.create_goal(
                user_id="user123",
                goal_create=GoalCreate(title="Later", deadline=date(2025, 9, 1), status=GoalStatus.PAUSED),
            )
        assert goals.insert_one.call_count == 3


@pytest.mark.asyncio
class TestGoalServiceRead:
    """Tests for listing and fetching goals."""

    async def test_list_goals_by_status(self):
        """Test listing filters by status and sorts newest first."""
        from app.services.goal_service import GoalService
        from app.models.goal import GoalStatus

        db, goals, _ = make_db()
        goals.find.return_value.to_list = AsyncMock(return_value=[goal_doc(), goal_doc("later", "paused")])
        service = GoalService(db)

        result = await service.list_goals("user123", statuses=[GoalStatus.ACTIVE, GoalStatus.PAUSED])

        assert [goal.slug for goal in result] == ["ship-the-mvp", "later"]
        query = goals.find.call_args[0][0]
        assert query["status"] == {"$in": ["active", "paused"]}
        goals.find.return_value.sort.assert_called_once_with("created_at", -1)

    async def test_get_goal_not_found(self):
        """Test fetching a missing goal raises."""
        from app.services.goal_service import GoalService

        db, _, _ = make_db()
        service = GoalService(db)

        with pytest.raises(ValueError, match="Goal not found"):
            await service.get_goal_by_slug("user123", "nope")

    async def test_get_active_goal_none(self):
        """Test no active goal returns None."""
        from app.services.goal_service import GoalService

        db, _, _ = make_db()
        service = GoalService(db)

        assert await service.get_active_goal("user123") is None


@pytest.mark.asyncio
class TestGoalServiceUpdate:
    """Tests for updating goals."""

    async def test_rename_moves_tasks_to_new_slug(self):
        """Test a title change regenerates the slug and re-points tasks."""
        from app.services.goal_service import GoalService
        from app.models.goal import GoalUpdate

        db, goals, tasks = make_db()
        existing = goal_doc()
        goals.find_one.return_value = existing
        goals.find_one_and_update.return_value = goal_doc("launch-publicly", title="Launch publicly")
        service = GoalService(db)

        goal = await service.update_goal(
            "user123",
            "ship-the-mvp",
            GoalUpdate(title="Launch publicly", deadline=date(2025, 8, 1)),
        )

        assert goal.slug == "launch-publicly"
        update = goals.find_one_and_update.call_args[0][1]["$set"]
        assert update["slug"] == "launch-publicly"
        assert update["deadline"] == datetime(2025, 8, 1)
        tasks.update_many.assert_called_once_with(
            {"user_id": "user123", "goal_slug": "ship-the-mvp"},
            {"$set": {"goal_slug": "launch-publicly"}},
        )

    async def test_rename_slug_taken_concurrently(self):
        """Test a rename losing the slug race is a conflict and leaves tasks alone."""
        from app.services.goal_service import GoalService, GoalSlugConflict
        from app.models.goal import GoalUpdate

        db, goals, tasks = make_db()
        goals.find_one.return_value = goal_doc()
        goals.find_one_and_update.side_effect = DuplicateKeyError("goal_slug_per_user")
        service = GoalService(db)

        with pytest.raises(GoalSlugConflict):
            await service.update_goal("user123", "ship-the-mvp", GoalUpdate(title="Launch publicly"))
        tasks.update_many.assert_not_called()

    async def test_update_without_title_keeps_tasks(self):
        """Test that other updates don't touch tasks."""
        from app.services.goal_service import GoalService
        from app.models.goal import GoalUpdate

        db, goals, tasks = make_db()
        goals.find_one.return_value = goal_doc()
        goals.find_one_and_update.return_value = goal_doc(description="v1 only")
        service = GoalService(db)

        goal = await service.update_goal("user123", "ship-the-mvp", GoalUpdate(description="v1 only"))

        assert goal.description == "v1 only"
        tasks.update_many.assert_not_called()


@pytest.mark.asyncio
class TestGoalServiceStatus:
    """Tests for the goal lifecycle."""

    async def test_activate_pauses_others(self):
        """Test activation pauses every other active goal first."""
        from app.services.goal_service import GoalService
        from app.models.goal import GoalStatus

        db, goals, _ = make_db()
        existing = goal_doc("later", "paused")
        goals.find_one.return_value = existing
        goals.find_one_and_update.return_value = goal_doc("later", "active")
        service = GoalService(db)

        goal = await service.set_status("user123", "later", GoalStatus.ACTIVE)

        assert goal.status == GoalStatus.ACTIVE
        pause_query = goals.update_many.call_args[0][0]
        assert pause_query["_id"] == {"$ne": existing["_id"]}

    async def test_activate_race_is_conflict(self):
        """Test a concurrent activation is reported as a conflict."""
        from app.services.goal_service import ActiveGoalConflict, GoalService
        from app.models.goal import GoalStatus

        db, goals, _ = make_db()
        goals.find_one.return_value = goal_doc("later", "paused")
        goals.find_one_and_update.side_effect = DuplicateKeyError("one_active_goal_per_user")
        service = GoalService(db)

        with pytest.raises(ActiveGoalConflict, match="already active"):
            await service.set_status("user123", "later", GoalStatus.ACTIVE)

    async def test_complete_does_not_pause_others(self):
        """Test completing a goal leaves other goals alone."""
        from app.services.goal_service import GoalService
        from app.models.goal import GoalStatus

        db, goals, _ = make_db()
        goals.find_one.return_value = goal_doc()
        goals.find_one_and_update.return_value = goal_doc(status="completed")
        service = GoalService(db)

        goal = await service.set_status("user123", "ship-the-mvp", GoalStatus.COMPLETED)

        assert goal.status == GoalStatus.COMPLETED
        goals.update_many.assert_not_called()


@pytest.mark.asyncio
class TestGoalServiceDelete:
    """Tests for deleting goals."""

    async def test_delete_cascades_to_tasks(self):
        """Test deleting a goal deletes its tasks."""
        from app.services.goal_service import GoalService

        db, goals, tasks = make_db()
        existing = goal_doc()
        goals.find_one.return_value = existing
        tasks.delete_many.return_value = MagicMock(deleted_count=4)
        service = GoalService(db)

        result = await service.delete_goal("user123", "ship-the-mvp")

        assert result == {"deleted_count": 1, "deleted_tasks": 4}
        tasks.delete_many.assert_called_once_with({"user_id": "user123", "goal_slug": "ship-the-mvp"})
        goals.delete_one.assert_called_once_with({"_id": existing["_id"]})

    async def test_delete_not_found(self):
        """Test deleting a missing goal raises."""
        from app.services.goal_service import GoalService

        db, _, tasks = make_db()
        service = GoalService(db)

        with pytest.raises(ValueError, match="Goal not found"):
            await service.delete_goal("user123", "nope")
        tasks.delete_many.assert_not_called()
