"""Settings service - per-user profile and scheduling settings."""
import logging

from pymongo import ReturnDocument

from app.config import settings
from app.models.user import UserProfile, UserSettingsUpdate
from app.utils import clock

logger = logging.getLogger(__name__)


class SettingsService:
    """Reads and writes the users collection, keyed by identity provider subject."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.users = db["users"]

    def _doc_to_profile(self, user_id: str, doc: dict | None) -> UserProfile:
        doc = doc or {}
        return UserProfile(
            id=user_id,
            name=doc.get("name"),
            avatar_id=doc.get("avatar_id"),
            daily_hours_available=doc.get("daily_hours_available") or settings.default_daily_hours,
            work_days=doc["work_days"] if doc.get("work_days") is not None else settings.default_work_days_list,
            created_at=doc.get("created_at"),
            updated_at=doc.get("updated_at"),
        )

    async def get_profile(self, user_id: str) -> UserProfile:
        """
        Get the user's profile, falling back to default settings.

        A user who never saved settings has no document yet.
        """
        doc = await self.users.find_one({"user_id": user_id})
        return self._doc_to_profile(user_id, doc)

    async def update_profile(self, user_id: str, update: UserSettingsUpdate) -> UserProfile:
        """
        Update profile fields, creating the document on first save.

        Args:
            user_id: User ID
            update: Fields to change

        Returns:
            Updated profile
        """
        now = clock.now()
        changes = update.model_dump(exclude_none=True)
        changes["updated_at"] = now

        doc = await self.users.find_one_and_update(
            {"user_id": user_id},
            {"$set": changes, "$setOnInsert": {"user_id": user_id, "created_at": now}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        logger.info("Updated settings for user %s: %s", user_id, sorted(changes))
        return self._doc_to_profile(user_id, doc)
