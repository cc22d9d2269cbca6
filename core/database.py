from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ASCENDING, DESCENDING
from core.config import settings

# URI Provided
URI = settings.MONGO_URI

# tz_aware: stored datetimes come back as aware UTC values
client = AsyncIOMotorClient(URI, tz_aware=True)
db = client[settings.DB_NAME]

async def ensure_indexes(database=db):
    """Creates the indexes the repositories rely on. Safe to run on every start."""
    await database.habits.create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])

    # One check-in per habit per calendar day, enforced by the store itself
    await database.check_ins.create_index([("habit_id", ASCENDING), ("date", ASCENDING)], unique=True)
    await database.check_ins.create_index([("created_at", DESCENDING)])

    await database.users.create_index("email", unique=True)
    await database.users.create_index("google_id", unique=True, sparse=True)

    await database.refresh_tokens.create_index("token", unique=True)
    await database.refresh_tokens.create_index("user_id")
    await database.refresh_tokens.create_index("expires_at")

async def ping(database=db) -> bool:
    await database.command("ping")
    return True
