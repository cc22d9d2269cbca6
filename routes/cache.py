from fastapi import APIRouter, Depends

from core.cache import CacheStore
from core.dependencies import get_cache_store, get_invalidator
from core.errors import ForbiddenError
from core.invalidation import InvalidationCoordinator
from routes.auth import get_current_user_id

# All cache management routes require authentication
router = APIRouter(prefix="/cache", tags=["Cache"], dependencies=[Depends(get_current_user_id)])


@router.get("/stats")
async def cache_stats(cache: CacheStore = Depends(get_cache_store)):
    return await cache.stats()

@router.post("/stats/reset")
async def reset_cache_stats(cache: CacheStore = Depends(get_cache_store)):
    cache.reset_stats()
    return {"message": "Cache statistics reset"}

@router.post("/clear")
async def clear_cache(cache: CacheStore = Depends(get_cache_store)):
    cleared = await cache.flush_all()
    return {"message": "Cache cleared successfully" if cleared else "Cache unavailable", "cleared": cleared}

@router.delete("/user/{user_id}")
async def clear_user_cache(
    user_id: str,
    current_user_id: str = Depends(get_current_user_id),
    invalidator: InvalidationCoordinator = Depends(get_invalidator),
):
    # Users may only clear their own cache
    if user_id != current_user_id:
        raise ForbiddenError()
    deleted = await invalidator.clear_user(user_id)
    return {"message": "User cache cleared", "keys_deleted": deleted}
