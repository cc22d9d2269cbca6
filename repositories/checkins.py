from datetime import date, datetime
from typing import Dict, Iterable, List, Protocol

from pymongo.errors import DuplicateKeyError

from core.errors import DuplicateCheckInError
from models.checkin import CheckIn


class CheckInRepository(Protocol):
    async def exists(self, habit_id: str, day: date) -> bool: ...

    async def create(self, habit_id: str, user_id: str, day: date) -> CheckIn:
        """Raises DuplicateCheckInError when (habit_id, day) is already taken."""
        ...

    async def list_for_habit(self, habit_id: str) -> List[CheckIn]: ...

    async def list_dates(self, habit_id: str) -> List[date]: ...

    async def dates_by_habit(self, habit_ids: Iterable[str]) -> Dict[str, List[date]]: ...

    async def delete_for_habit(self, habit_id: str) -> int: ...

    async def recent_user_ids(self, since: datetime) -> List[str]: ...


class MongoCheckInRepository:
    # Dates are stored as 'YYYY-MM-DD' strings: BSON has no date-only type and
    # the string form sorts chronologically.

    def __init__(self, database):
        self.collection = database.check_ins

    async def exists(self, habit_id: str, day: date) -> bool:
        found = await self.collection.find_one({"habit_id": habit_id, "date": day.isoformat()}, {"_id": 1})
        return found is not None

    async def create(self, habit_id: str, user_id: str, day: date) -> CheckIn:
        check_in = CheckIn(habit_id=habit_id, user_id=user_id, date=day)
        doc = check_in.model_dump(exclude={"id"})
        doc["date"] = day.isoformat()
        try:
            result = await self.collection.insert_one(doc)
        except DuplicateKeyError:
            raise DuplicateCheckInError()
        check_in.id = str(result.inserted_id)
        return check_in

    async def list_for_habit(self, habit_id: str) -> List[CheckIn]:
        cursor = self.collection.find({"habit_id": habit_id}).sort("date", -1)
        return [CheckIn(**c) for c in await cursor.to_list(length=None)]

    async def list_dates(self, habit_id: str) -> List[date]:
        cursor = self.collection.find({"habit_id": habit_id}, {"date": 1}).sort("date", 1)
        return [date.fromisoformat(c["date"]) for c in await cursor.to_list(length=None)]

    async def dates_by_habit(self, habit_ids: Iterable[str]) -> Dict[str, List[date]]:
        ids = list(habit_ids)
        grouped: Dict[str, List[date]] = {habit_id: [] for habit_id in ids}
        if not ids:
            return grouped
        cursor = self.collection.find({"habit_id": {"$in": ids}}, {"habit_id": 1, "date": 1}).sort("date", 1)
        async for c in cursor:
            grouped[c["habit_id"]].append(date.fromisoformat(c["date"]))
        return grouped

    async def delete_for_habit(self, habit_id: str) -> int:
        result = await self.collection.delete_many({"habit_id": habit_id})
        return result.deleted_count

    async def recent_user_ids(self, since: datetime) -> List[str]:
        return await self.collection.distinct("user_id", {"created_at": {"$gte": since}})
