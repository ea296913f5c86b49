"""Operations inventory data layer."""

from ops_inventory.database import Database, get_database, init_database
from ops_inventory.exceptions import (
    DuplicateNameError,
    InventoryError,
    NotFoundError,
    ReferentialIntegrityError,
    StoreUnavailableError,
)
from ops_inventory.repositories import (
    ProviderRepository,
    ServiceRepository,
    TagRepository,
)

__all__ = [
    "Database",
    "DuplicateNameError",
    "InventoryError",
    "NotFoundError",
    "ProviderRepository",
    "ReferentialIntegrityError",
    "ServiceRepository",
    "StoreUnavailableError",
    "TagRepository",
    "get_database",
    "init_database",
]
