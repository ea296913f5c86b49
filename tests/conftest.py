"""Pytest fixtures."""

from collections.abc import AsyncIterator, Iterator

import pytest

from ops_inventory.config import get_settings
from ops_inventory.database import Database, get_database
from ops_inventory.repositories import (
    ProviderRepository,
    ServiceRepository,
    TagRepository,
)
from tests.factories import provider_fields


@pytest.fixture(autouse=True)
def _clear_caches() -> Iterator[None]:
    """Reset cached settings and the shared store handle.

    Yields
    ------
    None
        Clears caches around each test.
    """
    get_settings.cache_clear()
    get_database.cache_clear()
    yield
    get_settings.cache_clear()
    get_database.cache_clear()


@pytest.fixture()
async def database() -> AsyncIterator[Database]:
    """Create an initialized in-memory store.

    Yields
    ------
    Database
        Store with an empty schema.
    """
    db = await Database("sqlite+aiosqlite://").initialize()
    yield db
    await db.dispose()


@pytest.fixture()
def providers(database: Database) -> ProviderRepository:
    """Return a provider repository bound to the test store."""
    return ProviderRepository(database)


@pytest.fixture()
def services(database: Database) -> ServiceRepository:
    """Return a service repository bound to the test store."""
    return ServiceRepository(database)


@pytest.fixture()
def tags(database: Database) -> TagRepository:
    """Return a tag repository bound to the test store."""
    return TagRepository(database)


@pytest.fixture()
async def provider_id(providers: ProviderRepository) -> int:
    """Create one provider and return its id."""
    return await providers.create_provider(provider_fields())
