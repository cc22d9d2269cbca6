import asyncio
from datetime import date, timedelta

import pytest
from pymongo.errors import AutoReconnect

from conftest import TODAY
from core import cache_keys as keys
from core.errors import DuplicateCheckInError, HabitNotFoundError, ValidationError
from models.habit import HabitCreate, HabitUpdate

USER = "u1"
OTHER = "u2"


async def make_habit(service, user_id=USER, name="Read"):
    return await service.create_habit(user_id, HabitCreate(name=name))


class TestHabits:
    @pytest.mark.asyncio
    async def test_create_and_list(self, habit_service):
        habit = await make_habit(habit_service)
        assert habit.kind == "build"
        assert habit.description == ""

        habits = await habit_service.list_habits(USER)
        assert [h.id for h in habits] == [habit.id]
        assert await habit_service.list_habits(OTHER) == []

    @pytest.mark.asyncio
    async def test_list_is_served_from_cache(self, habit_service, habit_repo):
        await make_habit(habit_service)
        await habit_service.list_habits(USER)
        calls = habit_repo.calls

        again = await habit_service.list_habits(USER)

        assert habit_repo.calls == calls
        assert again[0].name == "Read"

    @pytest.mark.asyncio
    async def test_create_invalidates_list(self, habit_service):
        await make_habit(habit_service, name="Read")
        assert len(await habit_service.list_habits(USER)) == 1

        await make_habit(habit_service, name="Run")

        assert {h.name for h in await habit_service.list_habits(USER)} == {"Read", "Run"}

    @pytest.mark.asyncio
    async def test_get_is_owner_scoped(self, habit_service):
        habit = await make_habit(habit_service)
        assert (await habit_service.get_habit(USER, habit.id)).name == "Read"
        with pytest.raises(HabitNotFoundError):
            await habit_service.get_habit(OTHER, habit.id)

    @pytest.mark.asyncio
    async def test_misses_are_not_cached(self, habit_service, fake_redis):
        with pytest.raises(HabitNotFoundError):
            await habit_service.get_habit(USER, "64b0000000000000000000ff")
        assert keys.habit_details(USER, "64b0000000000000000000ff") not in fake_redis.store


class TestUpdate:
    @pytest.mark.asyncio
    async def test_partial_update_keeps_other_fields(self, habit_service):
        habit = await habit_service.create_habit(USER, HabitCreate(name="Read", description="20 pages"))

        updated = await habit_service.update_habit(USER, habit.id, HabitUpdate(name="Read more"))

        assert updated.name == "Read more"
        assert updated.description == "20 pages"
        assert updated.created_at == habit.created_at

    @pytest.mark.asyncio
    async def test_update_is_visible_on_next_read(self, habit_service):
        habit = await make_habit(habit_service)
        await habit_service.get_habit(USER, habit.id)
        await habit_service.list_habits(USER)

        await habit_service.update_habit(USER, habit.id, HabitUpdate(name="Journal"))

        assert (await habit_service.get_habit(USER, habit.id)).name == "Journal"
        assert (await habit_service.list_habits(USER))[0].name == "Journal"

    @pytest.mark.asyncio
    async def test_empty_update_is_rejected(self, habit_service):
        habit = await make_habit(habit_service)
        with pytest.raises(ValidationError, match="No fields to update"):
            await habit_service.update_habit(USER, habit.id, HabitUpdate())

    @pytest.mark.asyncio
    async def test_update_of_someone_elses_habit(self, habit_service):
        habit = await make_habit(habit_service)
        with pytest.raises(HabitNotFoundError):
            await habit_service.update_habit(OTHER, habit.id, HabitUpdate(name="Mine now"))


class TestUpdateFields:
    def test_only_present_fields_are_changes(self):
        assert HabitUpdate(name="Run").changes() == {"name": "Run"}
        assert HabitUpdate.model_validate({"type": "break"}).changes() == {"kind": "break"}

    def test_null_description_clears_it(self):
        assert HabitUpdate.model_validate({"description": None}).changes() == {"description": ""}

    def test_null_name_is_invalid(self):
        with pytest.raises(ValueError):
            HabitUpdate.model_validate({"name": None})

    def test_unknown_fields_are_ignored(self):
        update = HabitUpdate.model_validate({"name": "Run", "user_id": "someone", "created_at": "2020-01-01"})
        assert update.changes() == {"name": "Run"}


class TestDelete:
    @pytest.mark.asyncio
    async def test_failed_cascade_still_drops_cached_reads(self, habit_service, check_in_repo, fake_redis):
        habit = await make_habit(habit_service)
        await habit_service.get_habit(USER, habit.id)
        await habit_service.list_habits(USER)

        async def unavailable(habit_id):
            raise AutoReconnect("connection reset")

        check_in_repo.delete_for_habit = unavailable

        with pytest.raises(AutoReconnect):
            await habit_service.delete_habit(USER, habit.id)

        assert fake_redis.store == {}
        assert await habit_service.list_habits(USER) == []

    @pytest.mark.asyncio
    async def test_cascades_to_check_ins(self, habit_service, check_in_repo):
        habit = await make_habit(habit_service)
        check_in_repo.add(habit.id, USER, date(2024, 1, 8))
        check_in_repo.add(habit.id, USER, date(2024, 1, 9))

        await habit_service.delete_habit(USER, habit.id)

        assert await check_in_repo.list_dates(habit.id) == []
        with pytest.raises(HabitNotFoundError):
            await habit_service.get_habit(USER, habit.id)

    @pytest.mark.asyncio
    async def test_cached_reads_are_dropped(self, habit_service, fake_redis):
        habit = await make_habit(habit_service)
        await habit_service.get_habit(USER, habit.id)
        await habit_service.get_streak(USER, habit.id)
        await habit_service.list_habits(USER)

        await habit_service.delete_habit(USER, habit.id)

        assert fake_redis.store == {}
        assert await habit_service.list_habits(USER) == []

    @pytest.mark.asyncio
    async def test_missing_habit(self, habit_service):
        with pytest.raises(HabitNotFoundError):
            await habit_service.delete_habit(USER, "64b0000000000000000000ff")


class TestCheckIns:
    @pytest.mark.asyncio
    async def test_check_in_records_today(self, habit_service):
        habit = await make_habit(habit_service)

        check_in = await habit_service.check_in(USER, habit.id)

        assert check_in.date == TODAY
        assert check_in.habit_id == habit.id
        assert check_in.user_id == USER

    @pytest.mark.asyncio
    async def test_second_check_in_same_day(self, habit_service):
        habit = await make_habit(habit_service)
        await habit_service.check_in(USER, habit.id)

        with pytest.raises(DuplicateCheckInError) as exc:
            await habit_service.check_in(USER, habit.id)
        assert exc.value.message == "Already checked in today"
        assert exc.value.status_code == 400

    @pytest.mark.asyncio
    async def test_concurrent_check_ins_record_one(self, habit_service, check_in_repo):
        habit = await make_habit(habit_service)

        results = await asyncio.gather(
            habit_service.check_in(USER, habit.id),
            habit_service.check_in(USER, habit.id),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, Exception)]
        assert len(failures) == 1
        assert isinstance(failures[0], DuplicateCheckInError)
        assert await check_in_repo.list_dates(habit.id) == [TODAY]

    @pytest.mark.asyncio
    async def test_check_in_on_someone_elses_habit(self, habit_service):
        habit = await make_habit(habit_service)
        with pytest.raises(HabitNotFoundError):
            await habit_service.check_in(OTHER, habit.id)

    @pytest.mark.asyncio
    async def test_history_newest_first(self, habit_service, check_in_repo):
        habit = await make_habit(habit_service)
        check_in_repo.add(habit.id, USER, date(2024, 1, 1))
        check_in_repo.add(habit.id, USER, date(2024, 1, 5))

        history = await habit_service.list_check_ins(USER, habit.id)

        assert [c.date for c in history] == [date(2024, 1, 5), date(2024, 1, 1)]


class TestDerived:
    @pytest.mark.asyncio
    async def test_cached_streak_is_not_served_the_next_day(self, habit_service):
        habit = await make_habit(habit_service)
        await habit_service.check_in(USER, habit.id)
        assert (await habit_service.get_streak(USER, habit.id)).current_streak == 1
        assert (await habit_service.get_overview(USER))[0].current_streak == 1
        assert (await habit_service.get_stats(USER, habit.id)).current_streak == 1

        habit_service.clock = lambda: TODAY + timedelta(days=1)

        streak = await habit_service.get_streak(USER, habit.id)
        assert (streak.current_streak, streak.longest_streak) == (0, 1)
        assert (await habit_service.get_overview(USER))[0].current_streak == 0
        assert (await habit_service.get_stats(USER, habit.id)).current_streak == 0

    @pytest.mark.asyncio
    async def test_check_in_refreshes_cached_streak(self, habit_service, check_in_repo):
        habit = await make_habit(habit_service)
        check_in_repo.add(habit.id, USER, date(2024, 1, 8))
        check_in_repo.add(habit.id, USER, date(2024, 1, 9))

        before = await habit_service.get_streak(USER, habit.id)
        assert (before.current_streak, before.longest_streak) == (0, 2)

        await habit_service.check_in(USER, habit.id)

        after = await habit_service.get_streak(USER, habit.id)
        assert (after.current_streak, after.longest_streak) == (3, 3)

    @pytest.mark.asyncio
    async def test_stats(self, habit_service, check_in_repo):
        habit = await make_habit(habit_service)
        for day in (1, 2, 9, 10):
            check_in_repo.add(habit.id, USER, date(2024, 1, day))

        stats = await habit_service.get_stats(USER, habit.id)

        assert stats.name == "Read"
        assert stats.kind == "build"
        assert stats.total_check_ins == 4
        assert stats.current_streak == 2
        assert stats.longest_streak == 2
        assert stats.completion_rate == 0.4
        assert stats.first_check_in == date(2024, 1, 1)
        assert stats.last_check_in == date(2024, 1, 10)

    @pytest.mark.asyncio
    async def test_stats_served_from_cache(self, habit_service, habit_repo):
        habit = await make_habit(habit_service)
        first = await habit_service.get_stats(USER, habit.id)
        calls = habit_repo.calls

        second = await habit_service.get_stats(USER, habit.id)

        assert habit_repo.calls == calls
        assert second == first

    @pytest.mark.asyncio
    async def test_overview(self, habit_service, check_in_repo):
        read = await make_habit(habit_service, name="Read")
        run = await make_habit(habit_service, name="Run")
        check_in_repo.add(read.id, USER, date(2024, 1, 9))
        check_in_repo.add(read.id, USER, date(2024, 1, 10))

        overview = {row.name: row for row in await habit_service.get_overview(USER)}

        assert overview["Read"].current_streak == 2
        assert overview["Run"].current_streak == 0
        assert overview["Run"].habit_id == run.id

    @pytest.mark.asyncio
    async def test_overview_invalidated_by_check_in(self, habit_service):
        habit = await make_habit(habit_service)
        assert (await habit_service.get_overview(USER))[0].current_streak == 0

        await habit_service.check_in(USER, habit.id)

        assert (await habit_service.get_overview(USER))[0].current_streak == 1

    @pytest.mark.asyncio
    async def test_reads_work_with_cache_down(self, habit_service, fake_redis, check_in_repo):
        habit = await make_habit(habit_service)
        check_in_repo.add(habit.id, USER, TODAY)
        fake_redis.fail = True

        assert (await habit_service.get_streak(USER, habit.id)).current_streak == 1
        assert len(await habit_service.list_habits(USER)) == 1
