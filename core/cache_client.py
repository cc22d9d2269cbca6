import redis.asyncio as redis
from core.config import settings

# Lazily connects on first command; strings in, strings out
client = redis.from_url(settings.REDIS_URL, decode_responses=True)
