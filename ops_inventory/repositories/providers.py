"""Provider storage and cascading provider removal."""

from __future__ import annotations

import logging

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from ops_inventory import schemas
from ops_inventory.database import Database
from ops_inventory.exceptions import NotFoundError
from ops_inventory.models import Provider, Service
from ops_inventory.repositories.services import delete_services

logger = logging.getLogger(__name__)


class ProviderRepository:
    """Provider CRUD.

    Parameters
    ----------
    database : Database
        Shared store handle.
    """

    def __init__(self, database: Database) -> None:
        self._db = database

    async def create_provider(self, fields: schemas.ProviderCreate) -> int:
        """Register a provider.

        Parameters
        ----------
        fields : schemas.ProviderCreate
            Validated provider fields.

        Returns
        -------
        int
            Identity of the new provider.
        """

        def _create(session: Session) -> int:
            provider = Provider(**fields.model_dump(mode="json"))
            session.add(provider)
            session.flush()
            return provider.id

        provider_id = await self._db.run_async(_create, operation="create_provider")
        if fields.password is None and fields.private_key_filename is None:
            logger.warning(
                "Provider %s (%s) has no password or private key",
                provider_id,
                fields.name,
            )
        logger.info("Created provider %s (%s)", provider_id, fields.name)
        return provider_id

    async def get_provider_by_id(self, provider_id: int) -> schemas.Provider | None:
        """Return one provider, or ``None`` when it does not exist."""

        def _load(session: Session) -> schemas.Provider | None:
            provider = session.get(Provider, provider_id)
            if provider is None:
                return None
            return schemas.Provider.model_validate(provider)

        return await self._db.run_async(
            _load, operation="get_provider_by_id", target_id=provider_id
        )

    async def get_all_providers(self) -> list[schemas.Provider]:
        """Return every provider ordered by identity."""

        def _load(session: Session) -> list[schemas.Provider]:
            rows = session.execute(select(Provider).order_by(Provider.id)).scalars()
            return [schemas.Provider.model_validate(row) for row in rows]

        return await self._db.run_async(_load, operation="get_all_providers")

    async def update_provider(
        self, provider_id: int, fields: schemas.ProviderUpdate
    ) -> None:
        """Apply a partial update to a provider.

        Parameters
        ----------
        provider_id : int
            Provider identifier.
        fields : schemas.ProviderUpdate
            Fields to change; unset fields are kept.

        Returns
        -------
        None
            Raises on failure.

        Raises
        ------
        NotFoundError
            If the provider does not exist.
        """

        def _update(session: Session) -> None:
            provider = session.get(Provider, provider_id)
            if provider is None:
                raise NotFoundError(
                    "Provider not found",
                    operation="update_provider",
                    target_id=provider_id,
                )
            changes = fields.model_dump(mode="json", exclude_unset=True)
            for key, value in changes.items():
                setattr(provider, key, value)
            session.flush()

        await self._db.run_async(
            _update, operation="update_provider", target_id=provider_id
        )

    async def delete_provider(self, provider_id: int) -> None:
        """Delete a provider with its services and their tag associations.

        Runs as one transaction: collect the provider's service ids, delete
        their association rows, delete the services, then the provider. A
        failure at any step rolls back every step. Deleting a provider that
        does not exist succeeds.

        Parameters
        ----------
        provider_id : int
            Provider identifier.

        Returns
        -------
        None
            Commits the whole cascade or nothing.
        """

        def _cascade(session: Session) -> tuple[int, int]:
            service_ids = list(
                session.execute(
                    select(Service.id).where(Service.provider_id == provider_id)
                ).scalars()
            )
            removed_services = delete_services(session, service_ids)
            result = session.execute(delete(Provider).where(Provider.id == provider_id))
            return result.rowcount, removed_services

        removed, removed_services = await self._db.run_async(
            _cascade, operation="delete_provider", target_id=provider_id
        )
        if removed:
            logger.info(
                "Deleted provider %s and %d services", provider_id, removed_services
            )
        else:
            logger.debug("Provider %s already absent", provider_id)
