from datetime import datetime
from typing import Optional, Protocol

from models.token import RefreshTokenRecord


class RefreshTokenRepository(Protocol):
    async def create(self, record: RefreshTokenRecord) -> RefreshTokenRecord: ...

    async def get(self, token: str) -> Optional[RefreshTokenRecord]: ...

    async def delete(self, token: str) -> bool: ...

    async def delete_for_user(self, user_id: str) -> int: ...

    async def delete_expired(self, now: datetime) -> int: ...


class MongoRefreshTokenRepository:
    def __init__(self, database):
        self.collection = database.refresh_tokens

    async def create(self, record: RefreshTokenRecord) -> RefreshTokenRecord:
        await self.collection.insert_one(record.model_dump())
        return record

    async def get(self, token: str) -> Optional[RefreshTokenRecord]:
        data = await self.collection.find_one({"token": token}, {"_id": 0})
        return RefreshTokenRecord(**data) if data else None

    async def delete(self, token: str) -> bool:
        result = await self.collection.delete_one({"token": token})
        return result.deleted_count > 0

    async def delete_for_user(self, user_id: str) -> int:
        result = await self.collection.delete_many({"user_id": user_id})
        return result.deleted_count

    async def delete_expired(self, now: datetime) -> int:
        result = await self.collection.delete_many({"expires_at": {"$lt": now}})
        return result.deleted_count
