"""Database primitives and the shared connection manager."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, TypeVar

from sqlalchemy import MetaData, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from ops_inventory.config import get_settings
from ops_inventory.exceptions import InventoryError, StoreUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Base(DeclarativeBase):
    """Base declarative model class."""

    metadata = MetaData()


def _enable_foreign_keys(dbapi_connection: Any, _connection_record: Any) -> None:
    """Turn on SQLite foreign-key enforcement for a new DBAPI connection."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Single shared store handle.

    The engine uses a ``StaticPool`` so every session talks to the same DBAPI
    connection. Units of work run one at a time through :meth:`run_async`.

    Parameters
    ----------
    url : str
        SQLAlchemy async database URL.
    echo : bool, default=False
        Whether to echo emitted SQL.
    """

    def __init__(self, url: str, *, echo: bool = False) -> None:
        self.url = url
        self.engine: AsyncEngine = create_async_engine(
            url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        event.listen(self.engine.sync_engine, "connect", _enable_foreign_keys)
        self.session_factory = async_sessionmaker(
            self.engine, expire_on_commit=False, class_=AsyncSession
        )
        self._lock = asyncio.Lock()
        self._initialized = False

    @property
    def initialized(self) -> bool:
        """Whether :meth:`initialize` has completed."""
        return self._initialized

    async def initialize(self) -> Database:
        """Open the store and create any missing tables.

        Returns
        -------
        Database
            This handle; repeated calls return it without touching the schema.

        Raises
        ------
        StoreUnavailableError
            If the store cannot be opened or the schema cannot be applied.
        """
        if self._initialized:
            return self

        import ops_inventory.models  # noqa: F401

        async with self._lock:
            if self._initialized:
                return self
            try:
                async with self.engine.begin() as connection:
                    await connection.run_sync(Base.metadata.create_all)
            except (SQLAlchemyError, OSError) as exc:
                logger.error("Failed to initialize store at %s: %s", self.url, exc)
                raise StoreUnavailableError(
                    f"Unable to open store at {self.url}", operation="initialize"
                ) from exc
            self._initialized = True

        logger.info("Store initialized at %s", self.url)
        return self

    async def run_async(
        self,
        fn: Callable[..., T],
        /,
        *args: Any,
        operation: str | None = None,
        target_id: int | None = None,
        **kwargs: Any,
    ) -> T:
        """Run a synchronous unit of work inside one transaction.

        Parameters
        ----------
        fn : Callable[..., T]
            Callable invoked as ``fn(session, *args, **kwargs)`` with a sync
            :class:`~sqlalchemy.orm.Session`.
        *args : Any
            Positional arguments forwarded to ``fn``.
        operation : str | None, default=None
            Name reported on wrapped store errors; defaults to ``fn``'s name.
        target_id : int | None, default=None
            Identifier reported on wrapped store errors.
        **kwargs : Any
            Keyword arguments forwarded to ``fn``.

        Returns
        -------
        T
            Value returned by ``fn`` once the transaction has committed.

        Raises
        ------
        StoreUnavailableError
            If the store failed operationally (missing table, locked or
            unreadable file).
        InventoryError
            For any other store error not already mapped by ``fn``.
        Exception
            Whatever else ``fn`` raised. The transaction is rolled back first
            in every case.
        """
        operation = operation or getattr(fn, "__name__", "run_async")
        try:
            async with self._lock:
                async with self.session_factory() as session:
                    async with session.begin():
                        return await session.run_sync(fn, *args, **kwargs)
        except OperationalError as exc:
            logger.error("Store unavailable during %s: %s", operation, exc)
            raise StoreUnavailableError(
                f"Store unavailable during {operation}: {exc.orig}",
                operation=operation,
                target_id=target_id,
            ) from exc
        except SQLAlchemyError as exc:
            logger.error("Store error during %s: %s", operation, exc)
            raise InventoryError(
                f"Store error during {operation}: {exc}",
                operation=operation,
                target_id=target_id,
            ) from exc

    async def dispose(self) -> None:
        """Close the shared connection.

        Returns
        -------
        None
            Disposes the engine; the handle must be initialized again to reuse.
        """
        await self.engine.dispose()
        self._initialized = False


@dataclass
class StatementCounter:
    """Statements observed while a :func:`count_statements` block is open.

    Attributes
    ----------
    statements : list[str]
        SQL text of each statement, in execution order.
    """

    statements: list[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        """Number of statements sent to the store."""
        return len(self.statements)


@contextmanager
def count_statements(database: Database) -> Iterator[StatementCounter]:
    """Count the statements a block sends to the store.

    Parameters
    ----------
    database : Database
        Handle whose engine is observed.

    Yields
    ------
    StatementCounter
        Counter filled in while the block runs.
    """
    counter = StatementCounter()
    sync_engine: Engine = database.engine.sync_engine

    def _record(
        _conn: Any,
        _cursor: Any,
        statement: str,
        _parameters: Any,
        _context: Any,
        _executemany: bool,
    ) -> None:
        counter.statements.append(statement)

    event.listen(sync_engine, "before_cursor_execute", _record)
    try:
        yield counter
    finally:
        event.remove(sync_engine, "before_cursor_execute", _record)


@lru_cache(maxsize=1)
def get_database() -> Database:
    """Return the process-wide store handle.

    Returns
    -------
    Database
        Cached handle bound to the configured database URL.
    """
    settings = get_settings()
    return Database(settings.database_url, echo=settings.sql_echo)


async def init_database() -> Database:
    """Initialize and return the process-wide store handle.

    Returns
    -------
    Database
        Initialized shared handle.
    """
    return await get_database().initialize()

