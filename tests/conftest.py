# tests/conftest.py
# Shared fixtures: in-memory repositories and stubbed AWS clients.

import pytest

from sitegen.services.history_service import HistoryService
from sitegen.services.publish_service import PublishCoordinator
from sitegen.services.site_service import SiteService
from tests.fakes import (
    FakeGenerationRepository,
    FakeHostingTarget,
    FakeModel,
    FakeUserRepository,
    InMemoryStore,
)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def users(store):
    return FakeUserRepository(store)


@pytest.fixture
def generations(store):
    return FakeGenerationRepository(store)


@pytest.fixture
def hosting():
    return FakeHostingTarget()


@pytest.fixture
def model():
    return FakeModel()


@pytest.fixture
def site_service(model, generations):
    return SiteService(model, generations)


@pytest.fixture
def history_service(generations):
    return HistoryService(generations)


@pytest.fixture
def publisher(users, generations, hosting):
    return PublishCoordinator(users, hosting)
