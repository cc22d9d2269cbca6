import logging
from datetime import date
from typing import Awaitable, Callable, List, TypeVar

from pydantic import BaseModel, TypeAdapter

from core import cache_keys as keys
from core.cache import CacheStore
from core.errors import DuplicateCheckInError, HabitNotFoundError, ValidationError
from core.invalidation import InvalidationCoordinator
from core.logging import LOGGER_NAME
from core.streaks import compute_stats, compute_streak
from core.time_utils import today
from models.checkin import CheckIn
from models.habit import Habit, HabitCreate, HabitUpdate
from models.stats import HabitStats, HabitStreak, HabitStreakSummary
from repositories.checkins import CheckInRepository
from repositories.habits import HabitRepository

logger = logging.getLogger(LOGGER_NAME)

T = TypeVar("T")

HabitAdapter = TypeAdapter(Habit)
StreakAdapter = TypeAdapter(HabitStreak)
StatsAdapter = TypeAdapter(HabitStats)
HabitList = TypeAdapter(List[Habit])
CheckInList = TypeAdapter(List[CheckIn])
SummaryList = TypeAdapter(List[HabitStreakSummary])


def dump(value) -> object:
    """JSON-ready form of a model or list of models, as stored in the cache."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    return [item.model_dump(mode="json") for item in value]


class HabitService:
    """
    Habit and check-in operations for one authenticated user at a time.

    Reads are cache-aside: cache first, then the repositories and the streak
    engine, then the result is written back with its TTL. Writes go to the
    repositories and purge the affected keys before returning.
    """

    def __init__(
        self,
        habits: HabitRepository,
        check_ins: CheckInRepository,
        cache: CacheStore,
        invalidator: InvalidationCoordinator,
        clock: Callable[[], date] = today,
    ):
        self.habits = habits
        self.check_ins = check_ins
        self.cache = cache
        self.invalidator = invalidator
        self.clock = clock

    async def _cached(self, key: str, ttl: int, adapter, loader: Callable[[], Awaitable[T]]) -> T:
        cached = await self.cache.get(key)
        if cached is not None:
            return adapter.validate_python(cached)
        value = await loader()
        await self.cache.set(key, dump(value), ttl)
        return value

    async def _require_habit(self, user_id: str, habit_id: str) -> Habit:
        habit = await self.habits.get(user_id, habit_id)
        if habit is None:
            raise HabitNotFoundError()
        return habit

    # Habits ------------------------------------------------------------

    async def create_habit(self, user_id: str, data: HabitCreate) -> Habit:
        habit = await self.habits.create(user_id, data)
        await self.invalidator.on_habits_changed(user_id)
        return habit

    async def list_habits(self, user_id: str) -> List[Habit]:
        return await self._cached(
            keys.user_habits(user_id), keys.TTL_HABITS_LIST, HabitList,
            lambda: self.habits.list_for_user(user_id),
        )

    async def get_habit(self, user_id: str, habit_id: str) -> Habit:
        return await self._cached(
            keys.habit_details(user_id, habit_id), keys.TTL_HABIT_SINGLE, HabitAdapter,
            lambda: self._require_habit(user_id, habit_id),
        )

    async def update_habit(self, user_id: str, habit_id: str, update: HabitUpdate) -> Habit:
        if not update.changes():
            raise ValidationError("No fields to update")
        habit = await self.habits.update(user_id, habit_id, update)
        if habit is None:
            raise HabitNotFoundError()
        await self.invalidator.on_habit_changed(user_id, habit_id)
        return habit

    async def delete_habit(self, user_id: str, habit_id: str) -> None:
        if not await self.habits.delete(user_id, habit_id):
            raise HabitNotFoundError()
        try:
            removed = await self.check_ins.delete_for_habit(habit_id)
        finally:
            # The habit is gone even if the cascade failed
            await self.invalidator.on_habit_changed(user_id, habit_id)
        logger.info("Habit deleted", extra={"user_id": user_id, "habit_id": habit_id, "check_ins_removed": removed})

    # Check-ins ---------------------------------------------------------

    async def check_in(self, user_id: str, habit_id: str) -> CheckIn:
        """
        Records today's check-in. The existence check gives the common case a
        clean error; the store's unique index settles concurrent attempts.
        """
        await self._require_habit(user_id, habit_id)
        day = self.clock()
        if await self.check_ins.exists(habit_id, day):
            raise DuplicateCheckInError()
        check_in = await self.check_ins.create(habit_id, user_id, day)
        await self.invalidator.on_check_in_added(user_id, habit_id)
        return check_in

    async def list_check_ins(self, user_id: str, habit_id: str) -> List[CheckIn]:
        async def load():
            await self._require_habit(user_id, habit_id)
            return await self.check_ins.list_for_habit(habit_id)

        return await self._cached(keys.habit_checkins(user_id, habit_id), keys.TTL_CHECKINS, CheckInList, load)

    # Derived -----------------------------------------------------------

    async def get_streak(self, user_id: str, habit_id: str) -> HabitStreak:
        day = self.clock()

        async def load():
            await self._require_habit(user_id, habit_id)
            dates = await self.check_ins.list_dates(habit_id)
            return HabitStreak.from_result(habit_id, compute_streak(dates, day))

        return await self._cached(keys.habit_streak(user_id, habit_id, day), keys.TTL_STREAK, StreakAdapter, load)

    async def get_stats(self, user_id: str, habit_id: str) -> HabitStats:
        day = self.clock()

        async def load():
            habit = await self._require_habit(user_id, habit_id)
            dates = await self.check_ins.list_dates(habit_id)
            return HabitStats.from_result(habit_id, habit.name, habit.kind, compute_stats(dates, day))

        return await self._cached(keys.habit_stats(user_id, habit_id, day), keys.TTL_STATS, StatsAdapter, load)

    async def get_overview(self, user_id: str) -> List[HabitStreakSummary]:
        day = self.clock()

        async def load():
            habits = await self.habits.list_for_user(user_id)
            # One query for every habit's dates instead of one per habit
            dates = await self.check_ins.dates_by_habit([h.id for h in habits])
            return [
                HabitStreakSummary(
                    name=h.name,
                    **HabitStreak.from_result(h.id, compute_streak(dates.get(h.id, []), day)).model_dump(),
                )
                for h in habits
            ]

        return await self._cached(keys.user_habits_stats(user_id, day), keys.TTL_STATS, SummaryList, load)
