"""Record types exchanged with repository callers."""

from ops_inventory.schemas.providers import (
    Provider,
    ProviderCreate,
    ProviderSummary,
    ProviderUpdate,
)
from ops_inventory.schemas.services import (
    Service,
    ServiceCreate,
    ServiceUpdate,
    ServiceWithProvider,
)
from ops_inventory.schemas.tags import Tag, TagCreate, TagUpdate

__all__ = [
    "Provider",
    "ProviderCreate",
    "ProviderSummary",
    "ProviderUpdate",
    "Service",
    "ServiceCreate",
    "ServiceUpdate",
    "ServiceWithProvider",
    "Tag",
    "TagCreate",
    "TagUpdate",
]
