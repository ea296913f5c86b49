"""ORM models."""

from ops_inventory.models.provider import Provider, ProviderType
from ops_inventory.models.service import DEFAULT_SERVICE_STATUS, Service, ServiceType
from ops_inventory.models.tag import ServiceTag, Tag

__all__ = [
    "DEFAULT_SERVICE_STATUS",
    "Provider",
    "ProviderType",
    "Service",
    "ServiceTag",
    "ServiceType",
    "Tag",
]
