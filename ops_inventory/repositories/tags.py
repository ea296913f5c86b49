"""Tag and service-tag association storage."""

from __future__ import annotations

import logging

from sqlalchemy import delete, literal_column, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ops_inventory import schemas
from ops_inventory.database import Database
from ops_inventory.exceptions import (
    DuplicateNameError,
    NotFoundError,
    ReferentialIntegrityError,
)
from ops_inventory.models import Service, ServiceTag, Tag

logger = logging.getLogger(__name__)

# Association rows are replayed in insertion order.
ASSOCIATION_ORDER = literal_column("service_tags.rowid")


class TagRepository:
    """Tag CRUD and the service-tag association table.

    Parameters
    ----------
    database : Database
        Shared store handle.
    """

    def __init__(self, database: Database) -> None:
        self._db = database

    async def create_tag(self, fields: schemas.TagCreate) -> int:
        """Create a tag.

        Parameters
        ----------
        fields : schemas.TagCreate
            Tag name and color.

        Returns
        -------
        int
            Identity of the new tag.

        Raises
        ------
        DuplicateNameError
            If a tag with the same name exists.
        """

        def _create(session: Session) -> int:
            tag = Tag(name=fields.name, color=fields.color)
            session.add(tag)
            try:
                session.flush()
            except IntegrityError as exc:
                if not is_unique_violation(exc):
                    raise
                raise DuplicateNameError(
                    f"Tag name already exists: {fields.name}", operation="create_tag"
                ) from exc
            return tag.id

        tag_id = await self._db.run_async(_create, operation="create_tag")
        logger.info("Created tag %s (%s)", tag_id, fields.name)
        return tag_id

    async def get_all_tags(self) -> list[schemas.Tag]:
        """Return every tag ordered by identity."""

        def _load(session: Session) -> list[schemas.Tag]:
            rows = session.execute(select(Tag).order_by(Tag.id)).scalars().all()
            return [schemas.Tag.model_validate(row) for row in rows]

        return await self._db.run_async(_load, operation="get_all_tags")

    async def get_tag_by_id(self, tag_id: int) -> schemas.Tag | None:
        """Return one tag, or ``None`` when it does not exist."""

        def _load(session: Session) -> schemas.Tag | None:
            tag = session.get(Tag, tag_id)
            return schemas.Tag.model_validate(tag) if tag is not None else None

        return await self._db.run_async(
            _load, operation="get_tag_by_id", target_id=tag_id
        )

    async def update_tag(self, tag_id: int, fields: schemas.TagUpdate) -> None:
        """Rename or recolor a tag.

        Parameters
        ----------
        tag_id : int
            Tag identifier.
        fields : schemas.TagUpdate
            Fields to change; unset fields are kept.

        Returns
        -------
        None
            Raises on failure.

        Raises
        ------
        NotFoundError
            If the tag does not exist.
        DuplicateNameError
            If the new name belongs to another tag.
        """

        def _update(session: Session) -> None:
            tag = session.get(Tag, tag_id)
            if tag is None:
                raise NotFoundError(
                    "Tag not found", operation="update_tag", target_id=tag_id
                )
            changes = fields.model_dump(exclude_unset=True)
            for key, value in changes.items():
                setattr(tag, key, value)
            try:
                session.flush()
            except IntegrityError as exc:
                if not is_unique_violation(exc):
                    raise
                raise DuplicateNameError(
                    f"Tag name already exists: {fields.name}",
                    operation="update_tag",
                    target_id=tag_id,
                ) from exc

        await self._db.run_async(
            _update, operation="update_tag", target_id=tag_id
        )

    async def delete_tag(self, tag_id: int) -> None:
        """Delete a tag and its service associations.

        Deleting a tag that does not exist succeeds.

        Parameters
        ----------
        tag_id : int
            Tag identifier.

        Returns
        -------
        None
            Both deletes commit together or not at all.
        """

        def _delete(session: Session) -> int:
            session.execute(delete(ServiceTag).where(ServiceTag.tag_id == tag_id))
            result = session.execute(delete(Tag).where(Tag.id == tag_id))
            return result.rowcount

        deleted = await self._db.run_async(
            _delete, operation="delete_tag", target_id=tag_id
        )
        if deleted:
            logger.info("Deleted tag %s", tag_id)
        else:
            logger.debug("Tag %s already absent", tag_id)

    async def assign_tag_to_service(self, service_id: int, tag_id: int) -> None:
        """Link a tag to a service.

        Assigning a pair that is already linked is a no-op.

        Parameters
        ----------
        service_id : int
            Service identifier.
        tag_id : int
            Tag identifier.

        Returns
        -------
        None
            Raises on failure.

        Raises
        ------
        ReferentialIntegrityError
            If the service or the tag does not exist.
        """
        await self._db.run_async(
            link_tags,
            [tag_id],
            service_id=service_id,
            operation="assign_tag_to_service",
            target_id=service_id,
        )

    async def remove_tag_from_service(self, service_id: int, tag_id: int) -> None:
        """Unlink a tag from a service; unlinked pairs are ignored."""

        def _remove(session: Session) -> None:
            session.execute(
                delete(ServiceTag).where(
                    ServiceTag.service_id == service_id,
                    ServiceTag.tag_id == tag_id,
                )
            )

        await self._db.run_async(
            _remove, operation="remove_tag_from_service", target_id=service_id
        )

    async def get_tags_for_service(self, service_id: int) -> list[schemas.Tag]:
        """Return the tags linked to one service.

        Meant for single-service lookups; listings go through
        :meth:`ServiceRepository.get_services_with_provider`.

        Parameters
        ----------
        service_id : int
            Service identifier.

        Returns
        -------
        list[schemas.Tag]
            Linked tags in association order.
        """

        def _load(session: Session) -> list[schemas.Tag]:
            rows = session.execute(
                select(Tag)
                .join(ServiceTag, ServiceTag.tag_id == Tag.id)
                .where(ServiceTag.service_id == service_id)
                .order_by(ASSOCIATION_ORDER)
            ).scalars()
            return [schemas.Tag.model_validate(row) for row in rows]

        return await self._db.run_async(
            _load, operation="get_tags_for_service", target_id=service_id
        )


def link_tags(session: Session, tag_ids: list[int], *, service_id: int) -> None:
    """Insert association rows, skipping pairs that already exist.

    Parameters
    ----------
    session : Session
        Session of the enclosing unit of work.
    tag_ids : list[int]
        Tags to link.
    service_id : int
        Service to link them to.

    Returns
    -------
    None
        Raises before inserting anything if a referenced row is missing.

    Raises
    ------
    ReferentialIntegrityError
        If the service or any tag does not exist.
    """
    if session.get(Service, service_id) is None:
        raise ReferentialIntegrityError(
            "Service not found", operation="assign_tag", target_id=service_id
        )
    for tag_id in tag_ids:
        if session.get(Tag, tag_id) is None:
            raise ReferentialIntegrityError(
                "Tag not found", operation="assign_tag", target_id=tag_id
            )
    for tag_id in tag_ids:
        session.execute(
            sqlite_insert(ServiceTag)
            .values(service_id=service_id, tag_id=tag_id)
            .on_conflict_do_nothing(index_elements=["service_id", "tag_id"])
        )


def is_unique_violation(exc: IntegrityError) -> bool:
    """Whether an integrity error comes from a UNIQUE constraint."""
    return "UNIQUE" in str(exc.orig)
