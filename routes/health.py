from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
import logging

from core import cache_keys as keys
from core import database
from core.cache import CacheStore
from core.dependencies import get_cache_store
from core.logging import LOGGER_NAME
from core.time_utils import get_current_time

router = APIRouter(prefix="/health", tags=["Health"])
logger = logging.getLogger(LOGGER_NAME)


async def check_database() -> bool:
    try:
        return await database.ping()
    except Exception as e:
        logger.warning("Database health check failed", extra={"error": str(e)})
        return False


def get_database_check():
    return check_database


@router.get("")
async def health(cache: CacheStore = Depends(get_cache_store), db_check=Depends(get_database_check)):
    """
    API, database and cache status. A healthy database probe is cached for a
    short while so frequent probes do not hammer Mongo.
    """
    cache_connected = await cache.ping()

    db_connected = bool(await cache.get(keys.health_status()))
    if not db_connected:
        db_connected = await db_check()
        if db_connected:
            await cache.set(keys.health_status(), True, keys.TTL_HEALTH_CHECK)

    body = {
        "status": "OK" if db_connected else "ERROR",
        "timestamp": get_current_time().isoformat(),
        "database": "connected" if db_connected else "disconnected",
        "cache": "connected" if cache_connected else "disconnected",
    }
    return JSONResponse(status_code=200 if db_connected else 503, content=body)
