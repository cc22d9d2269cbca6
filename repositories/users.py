from typing import Optional, Protocol

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from core.errors import EmailAlreadyRegisteredError
from models.user import User


class UserRepository(Protocol):
    async def create(self, user: User) -> User:
        """Raises EmailAlreadyRegisteredError when the email is taken."""
        ...

    async def get(self, user_id: str) -> Optional[User]: ...

    async def get_by_email(self, email: str) -> Optional[User]: ...

    async def get_by_google_id(self, google_id: str) -> Optional[User]: ...

    async def link_google_id(self, user_id: str, google_id: str) -> Optional[User]: ...


class MongoUserRepository:
    def __init__(self, database):
        self.collection = database.users

    async def create(self, user: User) -> User:
        doc = user.model_dump(exclude={"id"})
        doc["email"] = doc["email"].lower()
        if doc.get("google_id") is None:
            # Keep the sparse unique index from treating every null as a duplicate
            doc.pop("google_id", None)
        try:
            result = await self.collection.insert_one(doc)
        except DuplicateKeyError:
            raise EmailAlreadyRegisteredError()
        return user.model_copy(update={"id": str(result.inserted_id), "email": doc["email"]})

    async def get(self, user_id: str) -> Optional[User]:
        if not ObjectId.is_valid(user_id):
            return None
        user_data = await self.collection.find_one({"_id": ObjectId(user_id)})
        return User(**user_data) if user_data else None

    async def get_by_email(self, email: str) -> Optional[User]:
        user_data = await self.collection.find_one({"email": email.lower()})
        return User(**user_data) if user_data else None

    async def get_by_google_id(self, google_id: str) -> Optional[User]:
        user_data = await self.collection.find_one({"google_id": google_id})
        return User(**user_data) if user_data else None

    async def link_google_id(self, user_id: str, google_id: str) -> Optional[User]:
        if not ObjectId.is_valid(user_id):
            return None
        user_data = await self.collection.find_one_and_update(
            {"_id": ObjectId(user_id)},
            {"$set": {"google_id": google_id}},
            return_document=ReturnDocument.AFTER,
        )
        return User(**user_data) if user_data else None
