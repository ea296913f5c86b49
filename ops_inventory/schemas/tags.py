"""Tag records."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from ops_inventory.schemas.common import APIModel, reject_null


class TagCreate(BaseModel):
    """Create a tag."""

    name: str = Field(min_length=1, max_length=255)
    color: str | None = Field(default=None, max_length=50)


class TagUpdate(BaseModel):
    """Partial tag update; an explicit ``None`` color clears it."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    color: str | None = Field(default=None, max_length=50)

    reject_cleared = field_validator("name")(reject_null)


class Tag(APIModel):
    """Stored tag."""

    id: int
    name: str
    color: str | None
    created_at: datetime
