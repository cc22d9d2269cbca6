import logging

from core import cache_keys as keys
from core.cache import CacheStore
from core.logging import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)


class InvalidationCoordinator:
    """
    Maps write events to the cache entries they make stale.

    The aggregate views (habits list, habits overview) embed per-habit data,
    so every single-habit write purges them too. Callers await these methods
    before reporting success, which gives the writer read-your-writes.
    """

    def __init__(self, cache: CacheStore):
        self.cache = cache

    async def _purge(self, patterns) -> int:
        deleted = 0
        for pattern in patterns:
            deleted += await self.cache.delete_matching(pattern)
        return deleted

    async def on_habits_changed(self, user_id: str) -> int:
        deleted = await self._purge([
            keys.user_aggregate_keys(user_id),
            keys.user_list_keys(user_id),
        ])
        logger.info("Invalidated user cache", extra={"user_id": user_id, "keys_deleted": deleted})
        return deleted

    async def on_habit_changed(self, user_id: str, habit_id: str) -> int:
        deleted = await self._purge([
            keys.all_habit_keys(user_id, habit_id),
            keys.habit_details(user_id, habit_id),
        ])
        logger.info("Invalidated habit cache", extra={"user_id": user_id, "habit_id": habit_id, "keys_deleted": deleted})
        return deleted + await self.on_habits_changed(user_id)

    async def on_check_in_added(self, user_id: str, habit_id: str) -> int:
        # A check-in changes streak and stats but not the habit itself; the
        # purge set is the same either way.
        return await self.on_habit_changed(user_id, habit_id)

    async def on_user_changed(self, user_id: str) -> int:
        return await self.cache.delete_matching(keys.user_profile(user_id))

    async def clear_user(self, user_id: str) -> int:
        return await self._purge([
            keys.all_user_keys(user_id),
            keys.all_user_habit_details(user_id),
        ])
