from datetime import date

import pytest
from fastapi.testclient import TestClient

from core import dependencies
from core.cache import CacheStore
from core.invalidation import InvalidationCoordinator
from core.tokens import TokenService
from core.warming import CacheWarmer
from routes import health
from services.habits import HabitService
from mocks import (
    FakeCheckInRepository,
    FakeHabitRepository,
    FakeIdentityProvider,
    FakeRedis,
    FakeRefreshTokenRepository,
    FakeUserRepository,
)

TODAY = date(2024, 1, 10)


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def cache_store(fake_redis):
    return CacheStore(fake_redis)


@pytest.fixture
def invalidator(cache_store):
    return InvalidationCoordinator(cache_store)


@pytest.fixture
def habit_repo():
    return FakeHabitRepository()


@pytest.fixture
def check_in_repo():
    return FakeCheckInRepository()


@pytest.fixture
def user_repo():
    return FakeUserRepository()


@pytest.fixture
def token_repo():
    return FakeRefreshTokenRepository()


@pytest.fixture
def token_service(token_repo):
    return TokenService(token_repo)


@pytest.fixture
def habit_service(habit_repo, check_in_repo, cache_store, invalidator):
    return HabitService(habit_repo, check_in_repo, cache_store, invalidator, clock=lambda: TODAY)


@pytest.fixture
def cache_warmer(habit_repo, check_in_repo, cache_store):
    return CacheWarmer(habit_repo, check_in_repo, cache_store)


@pytest.fixture
def identity_provider():
    return FakeIdentityProvider()


@pytest.fixture
def app(cache_store, invalidator, token_service, habit_service, user_repo, identity_provider):
    from main import app

    async def database_up():
        return True

    app.dependency_overrides = {
        dependencies.get_cache_store: lambda: cache_store,
        dependencies.get_invalidator: lambda: invalidator,
        dependencies.get_token_service: lambda: token_service,
        dependencies.get_habit_service: lambda: habit_service,
        dependencies.get_user_repository: lambda: user_repo,
        dependencies.get_identity_provider: lambda: identity_provider,
        health.get_database_check: lambda: database_up,
    }
    yield app
    app.dependency_overrides = {}


@pytest.fixture
def client(app):
    # No context manager: the lifespan (indexes, scheduler) is not started
    return TestClient(app)


@pytest.fixture
def auth_headers(token_service):
    def make(user_id="64b000000000000000000001"):
        return {"Authorization": f"Bearer {token_service.issue_access_token(user_id)}"}
    return make
