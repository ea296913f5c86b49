"""Application entrypoint."""

import logging

import anyio

from ops_inventory.config import get_settings
from ops_inventory.database import init_database
from ops_inventory.logging_config import setup_logging
from ops_inventory.repositories import ProviderRepository, ServiceRepository

logger = logging.getLogger("ops_inventory")


async def bootstrap() -> None:
    """Open the configured store and log what it holds.

    Returns
    -------
    None
        Creates missing tables as a side effect.
    """
    database = await init_database()
    try:
        providers = await ProviderRepository(database).get_all_providers()
        services = await ServiceRepository(database).get_services_with_provider()
        logger.info(
            "Store ready: %d providers, %d services", len(providers), len(services)
        )
    finally:
        await database.dispose()


def main() -> None:
    """Configure logging and initialize the store.

    Returns
    -------
    None
        Exits once the store has been opened and summarized.
    """
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_file)
    anyio.run(bootstrap)


if __name__ == "__main__":
    main()
