"""
Process-wide service instances and their FastAPI providers.

Routes depend on the get_* functions so tests can swap any of them through
app.dependency_overrides.
"""

from core.cache import CacheStore
from core.cache_client import client as cache_client
from core.database import db
from core.invalidation import InvalidationCoordinator
from core.oauth import GoogleIdentityProvider, IdentityProvider
from core.tokens import TokenService
from core.warming import CacheWarmer
from repositories.checkins import MongoCheckInRepository
from repositories.habits import MongoHabitRepository
from repositories.tokens import MongoRefreshTokenRepository
from repositories.users import MongoUserRepository
from services.habits import HabitService

cache_store = CacheStore(cache_client)
invalidator = InvalidationCoordinator(cache_store)

habit_repository = MongoHabitRepository(db)
check_in_repository = MongoCheckInRepository(db)
user_repository = MongoUserRepository(db)

token_service = TokenService(MongoRefreshTokenRepository(db))
habit_service = HabitService(habit_repository, check_in_repository, cache_store, invalidator)
cache_warmer = CacheWarmer(habit_repository, check_in_repository, cache_store)
identity_provider = GoogleIdentityProvider()


def get_cache_store() -> CacheStore:
    return cache_store

def get_invalidator() -> InvalidationCoordinator:
    return invalidator

def get_token_service() -> TokenService:
    return token_service

def get_habit_service() -> HabitService:
    return habit_service

def get_user_repository():
    return user_repository

def get_identity_provider() -> IdentityProvider:
    return identity_provider
