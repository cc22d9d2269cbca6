import logging
from datetime import timedelta
from typing import Callable

from core import cache_keys as keys
from core.cache import CacheStore
from core.config import settings
from core.logging import LOGGER_NAME
from core.streaks import compute_streak
from core.time_utils import get_current_time
from models.stats import HabitStreak
from repositories.checkins import CheckInRepository
from repositories.habits import HabitRepository

logger = logging.getLogger(LOGGER_NAME)


class CacheWarmer:
    """
    Pre-loads the habits list and per-habit streaks of recently active users,
    under the same keys, shapes and TTLs the read path uses.
    """

    def __init__(
        self,
        habits: HabitRepository,
        check_ins: CheckInRepository,
        cache: CacheStore,
        active_window_hours: int = settings.CACHE_WARM_ACTIVE_WINDOW_HOURS,
        clock: Callable = get_current_time,
    ):
        self.habits = habits
        self.check_ins = check_ins
        self.cache = cache
        self.active_window = timedelta(hours=active_window_hours)
        self.clock = clock

    async def warm_user(self, user_id: str) -> bool:
        try:
            habits = await self.habits.list_for_user(user_id)
            await self.cache.set(
                keys.user_habits(user_id),
                [h.model_dump(mode="json") for h in habits],
                keys.TTL_HABITS_LIST,
            )

            dates = await self.check_ins.dates_by_habit([h.id for h in habits])
            day = self.clock().date()
            for habit in habits:
                streak = HabitStreak.from_result(habit.id, compute_streak(dates.get(habit.id, []), day))
                await self.cache.set(
                    keys.habit_streak(user_id, habit.id, day),
                    streak.model_dump(mode="json"),
                    keys.TTL_STREAK,
                )
        except Exception as e:
            logger.error("Cache warming error", extra={"user_id": user_id, "error": str(e)})
            return False

        logger.debug("Cache warmed", extra={"user_id": user_id, "habit_count": len(habits)})
        return True

    async def warm_active_users(self) -> int:
        """Warms every user with a check-in inside the active window. Returns how many."""
        try:
            user_ids = await self.check_ins.recent_user_ids(self.clock() - self.active_window)
        except Exception as e:
            logger.error("Bulk cache warming error", extra={"error": str(e)})
            return 0

        warmed = 0
        for user_id in user_ids:
            if await self.warm_user(user_id):
                warmed += 1
        logger.info("Warmed cache for active users", extra={"active": len(user_ids), "warmed": warmed})
        return warmed
