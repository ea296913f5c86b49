"""Repositories over the shared store."""

from ops_inventory.repositories.providers import ProviderRepository
from ops_inventory.repositories.services import ServiceRepository
from ops_inventory.repositories.tags import TagRepository

__all__ = ["ProviderRepository", "ServiceRepository", "TagRepository"]
