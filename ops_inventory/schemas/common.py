"""Common schema primitives."""

from typing import Any

from pydantic import BaseModel, ConfigDict


class APIModel(BaseModel):
    """Base record model with attribute validation enabled."""

    model_config = ConfigDict(from_attributes=True)


def reject_null(value: Any) -> Any:
    """Refuse an explicit ``None`` for a field whose column cannot be cleared."""
    if value is None:
        raise ValueError("field cannot be cleared")
    return value
