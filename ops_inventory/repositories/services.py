"""Service storage and the batched service listing."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ops_inventory import schemas
from ops_inventory.database import Database
from ops_inventory.exceptions import NotFoundError, ReferentialIntegrityError
from ops_inventory.models import Provider, Service, ServiceTag, Tag
from ops_inventory.repositories.tags import ASSOCIATION_ORDER, link_tags

logger = logging.getLogger(__name__)

TagRow = tuple[int, int, str, str | None, datetime]


class ServiceRepository:
    """Service CRUD plus the provider- and tag-enriched listing.

    Parameters
    ----------
    database : Database
        Shared store handle.
    """

    def __init__(self, database: Database) -> None:
        self._db = database

    async def create_service(self, fields: schemas.ServiceCreate) -> int:
        """Register a service on an existing provider.

        Parameters
        ----------
        fields : schemas.ServiceCreate
            Service fields; ``status`` defaults to ``"unknown"``.

        Returns
        -------
        int
            Identity of the new service.

        Raises
        ------
        ReferentialIntegrityError
            If ``provider_id`` does not reference a provider.
        """
        service_id = await self._db.run_async(
            _insert_service, fields, operation="create_service"
        )
        logger.info(
            "Created service %s (%s) on provider %s",
            service_id,
            fields.name,
            fields.provider_id,
        )
        return service_id

    async def create_service_with_tags(
        self, fields: schemas.ServiceCreate, tag_ids: Sequence[int]
    ) -> int:
        """Register a service and link it to tags in one transaction.

        Parameters
        ----------
        fields : schemas.ServiceCreate
            Service fields.
        tag_ids : Sequence[int]
            Tags to link; repeated ids are linked once.

        Returns
        -------
        int
            Identity of the new service.

        Raises
        ------
        ReferentialIntegrityError
            If the provider or any tag does not exist. Nothing is stored.
        """

        def _create(session: Session) -> int:
            service_id = _insert_service(session, fields)
            link_tags(session, list(tag_ids), service_id=service_id)
            return service_id

        service_id = await self._db.run_async(
            _create, operation="create_service_with_tags"
        )
        logger.info("Created service %s with %d tags", service_id, len(tag_ids))
        return service_id

    async def get_service_by_id(self, service_id: int) -> schemas.Service | None:
        """Return one service, or ``None`` when it does not exist."""

        def _load(session: Session) -> schemas.Service | None:
            service = session.get(Service, service_id)
            if service is None:
                return None
            return schemas.Service.model_validate(service)

        return await self._db.run_async(
            _load, operation="get_service_by_id", target_id=service_id
        )

    async def get_all_services(self) -> list[schemas.Service]:
        """Return every service ordered by identity, without enrichment."""

        def _load(session: Session) -> list[schemas.Service]:
            rows = session.execute(select(Service).order_by(Service.id)).scalars()
            return [schemas.Service.model_validate(row) for row in rows]

        return await self._db.run_async(_load, operation="get_all_services")

    async def get_services_by_provider_id(
        self, provider_id: int
    ) -> list[schemas.Service]:
        """Return the services owned by one provider."""

        def _load(session: Session) -> list[schemas.Service]:
            rows = session.execute(
                select(Service)
                .where(Service.provider_id == provider_id)
                .order_by(Service.id)
            ).scalars()
            return [schemas.Service.model_validate(row) for row in rows]

        return await self._db.run_async(
            _load, operation="get_services_by_provider_id", target_id=provider_id
        )

    async def update_service(
        self, service_id: int, fields: schemas.ServiceUpdate
    ) -> None:
        """Apply a partial update to a service.

        Parameters
        ----------
        service_id : int
            Service identifier.
        fields : schemas.ServiceUpdate
            Fields to change; unset fields are kept.

        Returns
        -------
        None
            Raises on failure.

        Raises
        ------
        NotFoundError
            If the service does not exist.
        ReferentialIntegrityError
            If the update moves the service to a missing provider.
        """

        def _update(session: Session) -> None:
            service = session.get(Service, service_id)
            if service is None:
                raise NotFoundError(
                    "Service not found",
                    operation="update_service",
                    target_id=service_id,
                )
            changes = fields.model_dump(mode="json", exclude_unset=True)
            provider_id = changes.get("provider_id")
            if provider_id is not None and session.get(Provider, provider_id) is None:
                raise ReferentialIntegrityError(
                    "Provider not found",
                    operation="update_service",
                    target_id=provider_id,
                )
            for key, value in changes.items():
                setattr(service, key, value)
            session.flush()

        await self._db.run_async(
            _update, operation="update_service", target_id=service_id
        )

    async def delete_service(self, service_id: int) -> None:
        """Delete a service and its tag associations.

        Deleting a service that does not exist succeeds.

        Parameters
        ----------
        service_id : int
            Service identifier.

        Returns
        -------
        None
            Both deletes commit together or not at all.
        """
        deleted = await self._db.run_async(
            delete_services,
            [service_id],
            operation="delete_service",
            target_id=service_id,
        )
        if deleted:
            logger.info("Deleted service %s", service_id)
        else:
            logger.debug("Service %s already absent", service_id)

    async def get_services_with_provider(self) -> list[schemas.ServiceWithProvider]:
        """Return every service with its provider and tags.

        Uses two statements whatever the number of services or tags: one
        ``services``/``providers`` join and one ``service_tags``/``tags``
        join over all services, zipped together in memory. Services whose
        provider is gone are left out by the inner join.

        Returns
        -------
        list[schemas.ServiceWithProvider]
            Services ordered by identity; untagged services carry ``[]``.
        """
        return await self._db.run_async(
            _load_with_provider, None, operation="get_services_with_provider"
        )

    async def get_service_with_provider(
        self, service_id: int
    ) -> schemas.ServiceWithProvider | None:
        """Return one service with its provider and tags.

        Parameters
        ----------
        service_id : int
            Service identifier.

        Returns
        -------
        schemas.ServiceWithProvider | None
            Enriched service, or ``None`` if it does not exist.
        """
        services = await self._db.run_async(
            _load_with_provider,
            service_id,
            operation="get_service_with_provider",
            target_id=service_id,
        )
        return services[0] if services else None


def group_tags_by_service(rows: Iterable[TagRow]) -> dict[int, list[schemas.Tag]]:
    """Group association rows by service, keeping the first of repeated tags.

    Parameters
    ----------
    rows : Iterable[TagRow]
        ``(service_id, tag_id, name, color, created_at)`` tuples.

    Returns
    -------
    dict[int, list[schemas.Tag]]
        Tags per service id, in row order.
    """
    grouped: dict[int, list[schemas.Tag]] = defaultdict(list)
    seen: set[tuple[int, int]] = set()
    for service_id, tag_id, name, color, created_at in rows:
        if (service_id, tag_id) in seen:
            continue
        seen.add((service_id, tag_id))
        grouped[service_id].append(
            schemas.Tag(id=tag_id, name=name, color=color, created_at=created_at)
        )
    return grouped


def _load_with_provider(
    session: Session, service_id: int | None
) -> list[schemas.ServiceWithProvider]:
    services_query = (
        select(Service, Provider)
        .join(Provider, Provider.id == Service.provider_id)
        .order_by(Service.id)
    )
    tags_query = (
        select(ServiceTag.service_id, Tag.id, Tag.name, Tag.color, Tag.created_at)
        .join(Tag, Tag.id == ServiceTag.tag_id)
        .order_by(ServiceTag.service_id, ASSOCIATION_ORDER)
    )
    if service_id is not None:
        services_query = services_query.where(Service.id == service_id)
        tags_query = tags_query.where(ServiceTag.service_id == service_id)

    pairs = session.execute(services_query).all()
    tags_by_service = group_tags_by_service(session.execute(tags_query))

    return [
        schemas.ServiceWithProvider(
            **schemas.Service.model_validate(service).model_dump(),
            provider=schemas.ProviderSummary.model_validate(provider),
            tags=tags_by_service.get(service.id, []),
        )
        for service, provider in pairs
    ]


def _insert_service(session: Session, fields: schemas.ServiceCreate) -> int:
    if session.get(Provider, fields.provider_id) is None:
        raise ReferentialIntegrityError(
            "Provider not found",
            operation="create_service",
            target_id=fields.provider_id,
        )
    service = Service(**fields.model_dump(mode="json"))
    session.add(service)
    try:
        session.flush()
    except IntegrityError as exc:
        raise ReferentialIntegrityError(
            "Service rejected by store constraints",
            operation="create_service",
            target_id=fields.provider_id,
        ) from exc
    return service.id


def delete_services(session: Session, service_ids: Sequence[int]) -> int:
    """Delete services and their tag associations.

    Parameters
    ----------
    session : Session
        Session of the enclosing unit of work.
    service_ids : Sequence[int]
        Services to delete; unknown ids are ignored.

    Returns
    -------
    int
        Number of service rows removed.
    """
    if not service_ids:
        return 0
    options = {"synchronize_session": False}
    session.execute(
        delete(ServiceTag).where(ServiceTag.service_id.in_(service_ids)),
        execution_options=options,
    )
    result = session.execute(
        delete(Service).where(Service.id.in_(service_ids)),
        execution_options=options,
    )
    return result.rowcount
