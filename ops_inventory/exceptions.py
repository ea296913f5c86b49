"""Data-layer exception types."""

from __future__ import annotations


class InventoryError(Exception):
    """Base data-layer error.

    Parameters
    ----------
    message : str
        Error message.
    operation : str | None, default=None
        Repository operation that failed.
    target_id : int | None, default=None
        Identifier the operation was applied to, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        target_id: int | None = None,
    ) -> None:
        self.operation = operation
        self.target_id = target_id
        super().__init__(message)


class NotFoundError(InventoryError):
    """Referenced row does not exist and the operation is not idempotent."""


class DuplicateNameError(InventoryError):
    """A unique name is already taken."""


class ReferentialIntegrityError(InventoryError):
    """A row references a parent that does not exist."""


class StoreUnavailableError(InventoryError):
    """The backing store could not be opened, read or written."""
