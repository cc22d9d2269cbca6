from typing import List, Optional, Protocol

from bson import ObjectId
from pymongo import ReturnDocument

from models.habit import Habit, HabitCreate, HabitUpdate


class HabitRepository(Protocol):
    """
    Owns habit storage. Every read and write is scoped by the owner's id, so
    a habit belonging to someone else looks exactly like a missing one.
    """

    async def create(self, user_id: str, data: HabitCreate) -> Habit: ...

    async def get(self, user_id: str, habit_id: str) -> Optional[Habit]: ...

    async def list_for_user(self, user_id: str) -> List[Habit]: ...

    async def update(self, user_id: str, habit_id: str, update: HabitUpdate) -> Optional[Habit]: ...

    async def delete(self, user_id: str, habit_id: str) -> bool: ...


class MongoHabitRepository:
    def __init__(self, database):
        self.collection = database.habits

    @staticmethod
    def _owned(user_id: str, habit_id: str) -> Optional[dict]:
        if not ObjectId.is_valid(habit_id):
            return None
        return {"_id": ObjectId(habit_id), "user_id": user_id}

    async def create(self, user_id: str, data: HabitCreate) -> Habit:
        habit = Habit(user_id=user_id, **data.model_dump())
        result = await self.collection.insert_one(habit.model_dump(exclude={"id"}))
        habit.id = str(result.inserted_id)
        return habit

    async def get(self, user_id: str, habit_id: str) -> Optional[Habit]:
        query = self._owned(user_id, habit_id)
        if query is None:
            return None
        habit_data = await self.collection.find_one(query)
        return Habit(**habit_data) if habit_data else None

    async def list_for_user(self, user_id: str) -> List[Habit]:
        cursor = self.collection.find({"user_id": user_id}).sort("created_at", -1)
        habits = await cursor.to_list(length=None)
        return [Habit(**h) for h in habits]

    async def update(self, user_id: str, habit_id: str, update: HabitUpdate) -> Optional[Habit]:
        query = self._owned(user_id, habit_id)
        if query is None:
            return None
        # Fixed $set built from the whitelisted fields the caller supplied
        habit_data = await self.collection.find_one_and_update(
            query,
            {"$set": update.changes()},
            return_document=ReturnDocument.AFTER,
        )
        return Habit(**habit_data) if habit_data else None

    async def delete(self, user_id: str, habit_id: str) -> bool:
        query = self._owned(user_id, habit_id)
        if query is None:
            return False
        result = await self.collection.delete_one(query)
        return result.deleted_count > 0
