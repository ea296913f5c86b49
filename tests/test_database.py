"""Connection-manager tests."""

from pathlib import Path

import pytest
from sqlalchemy import inspect, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from ops_inventory.database import (
    Database,
    count_statements,
    get_database,
    init_database,
)
from ops_inventory.exceptions import (
    InventoryError,
    NotFoundError,
    StoreUnavailableError,
)
from ops_inventory.models import Tag
from ops_inventory.repositories import TagRepository


class TestRunAsync:
    """Synchronous units of work adapted to awaitables."""

    @pytest.mark.asyncio
    async def test_resolves_with_function_result(self, database: Database) -> None:
        """Return whatever the unit of work returns.

        Parameters
        ----------
        database : Database
            Test store.

        Returns
        -------
        None
            Asserts the resolved value.
        """
        assert await database.run_async(lambda _session: 42) == 42

    @pytest.mark.asyncio
    async def test_forwards_arguments(self, database: Database) -> None:
        """Pass extra positional and keyword arguments through."""

        def _add(_session: Session, left: int, *, right: int) -> int:
            return left + right

        assert await database.run_async(_add, 40, right=2) == 42

    @pytest.mark.asyncio
    async def test_reraises_and_rolls_back(self, database: Database) -> None:
        """Surface the error to the awaiting caller and discard the writes.

        Parameters
        ----------
        database : Database
            Test store.

        Returns
        -------
        None
            Asserts the error and the rollback.
        """

        def _write_then_fail(session: Session) -> None:
            session.add(Tag(name="doomed", color="#ff0000"))
            session.flush()
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            await database.run_async(_write_then_fail)

        count = await database.run_async(
            lambda session: session.execute(
                text("SELECT COUNT(*) FROM tags")
            ).scalar_one()
        )
        assert count == 0


class TestInitialize:
    """Opening the store."""

    @pytest.mark.asyncio
    async def test_creates_schema_in_new_file(self, tmp_path: Path) -> None:
        """Create every table in a fresh store file.

        Parameters
        ----------
        tmp_path : Path
            Temporary directory.

        Returns
        -------
        None
            Asserts the created tables.
        """
        path = tmp_path / "inventory.db"
        database = await Database(f"sqlite+aiosqlite:///{path}").initialize()
        try:
            tables = await database.run_async(
                lambda session: inspect(session.connection()).get_table_names()
            )
        finally:
            await database.dispose()

        assert path.exists()
        assert {"providers", "services", "tags", "service_tags"} <= set(tables)

    @pytest.mark.asyncio
    async def test_repeated_calls_return_same_handle(self, database: Database) -> None:
        """Return the same handle without reapplying the schema."""
        with count_statements(database) as counter:
            again = await database.initialize()

        assert again is database
        assert database.initialized
        assert counter.count == 0

    @pytest.mark.asyncio
    async def test_enables_foreign_keys(self, database: Database) -> None:
        """Turn on foreign-key enforcement for the shared connection."""
        enabled = await database.run_async(
            lambda session: session.execute(text("PRAGMA foreign_keys")).scalar_one()
        )
        assert enabled == 1

    @pytest.mark.asyncio
    async def test_unopenable_store_is_unavailable(self, tmp_path: Path) -> None:
        """Report a store that cannot be opened as unavailable.

        Parameters
        ----------
        tmp_path : Path
            Temporary directory.

        Returns
        -------
        None
            Asserts the error type and context.
        """
        path = tmp_path / "missing" / "inventory.db"
        database = Database(f"sqlite+aiosqlite:///{path}")
        try:
            with pytest.raises(StoreUnavailableError) as excinfo:
                await database.initialize()
        finally:
            await database.dispose()

        assert excinfo.value.operation == "initialize"
        assert not database.initialized

    @pytest.mark.asyncio
    async def test_corrupt_store_is_unavailable(self, tmp_path: Path) -> None:
        """Report a file that is not a database as unavailable."""
        path = tmp_path / "corrupt.db"
        path.write_bytes(b"this is not a sqlite database" * 64)
        database = Database(f"sqlite+aiosqlite:///{path}")
        try:
            with pytest.raises(StoreUnavailableError):
                await database.initialize()
        finally:
            await database.dispose()


class TestSharedHandle:
    """Process-wide store handle."""

    @pytest.mark.asyncio
    async def test_init_database_uses_configured_url(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Open the store named by the environment and reuse it.

        Parameters
        ----------
        tmp_path : Path
            Temporary directory.
        monkeypatch : pytest.MonkeyPatch
            Environment monkeypatch helper.

        Returns
        -------
        None
            Asserts a single cached handle.
        """
        path = tmp_path / "configured.db"
        monkeypatch.setenv("OPS_INVENTORY_DATABASE_URL", f"sqlite+aiosqlite:///{path}")

        first = await init_database()
        try:
            second = await init_database()
            assert first is second
            assert get_database() is first
            assert first.url.endswith("configured.db")
            assert path.exists()
        finally:
            await first.dispose()


class TestCountStatements:
    """Statement counting."""

    @pytest.mark.asyncio
    async def test_counts_only_inside_block(self, database: Database) -> None:
        """Record statements issued while the block is open."""
        with count_statements(database) as counter:
            await database.run_async(lambda session: session.execute(text("SELECT 1")))
        await database.run_async(lambda session: session.execute(text("SELECT 2")))

        assert counter.count == 1
        assert counter.statements == ["SELECT 1"]


class TestStoreErrors:
    """Store failures surfaced with operation context."""

    @pytest.mark.asyncio
    async def test_missing_table_is_wrapped(self, database: Database) -> None:
        """Report a dropped table as an unavailable store with context.

        Parameters
        ----------
        database : Database
            Test store.

        Returns
        -------
        None
            Asserts the wrapped type, context and cause.
        """

        def _drop_tag_tables(session: Session) -> None:
            session.execute(text("DROP TABLE service_tags"))
            session.execute(text("DROP TABLE tags"))

        await database.run_async(_drop_tag_tables)
        tags = TagRepository(database)

        with pytest.raises(StoreUnavailableError) as listing:
            await tags.get_all_tags()
        with pytest.raises(StoreUnavailableError) as lookup:
            await tags.get_tag_by_id(5)

        assert listing.value.operation == "get_all_tags"
        assert listing.value.target_id is None
        assert isinstance(listing.value.__cause__, OperationalError)
        assert lookup.value.operation == "get_tag_by_id"
        assert lookup.value.target_id == 5

    @pytest.mark.asyncio
    async def test_operation_defaults_to_function_name(
        self, database: Database
    ) -> None:
        """Name the unit of work when the caller gives no operation."""

        def read_missing_table(session: Session) -> None:
            session.execute(text("SELECT * FROM nowhere"))

        with pytest.raises(InventoryError) as excinfo:
            await database.run_async(read_missing_table)

        assert excinfo.value.operation == "read_missing_table"

    @pytest.mark.asyncio
    async def test_domain_errors_pass_through(self, database: Database) -> None:
        """Leave errors raised by the unit of work itself unchanged."""

        def _fail(_session: Session) -> None:
            raise NotFoundError("gone", operation="lookup", target_id=3)

        with pytest.raises(NotFoundError) as excinfo:
            await database.run_async(_fail, operation="other", target_id=9)

        assert (excinfo.value.operation, excinfo.value.target_id) == ("lookup", 3)
