"""Provider records."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from ops_inventory.models.provider import ProviderType
from ops_inventory.schemas.common import APIModel, reject_null


class ProviderCreate(BaseModel):
    """Fields required to register a provider.

    Neither ``password`` nor ``private_key_filename`` is enforced here; callers
    are expected to supply at least one.
    """

    name: str = Field(min_length=1, max_length=255)
    ip: str = Field(min_length=1, max_length=255)
    username: str = Field(min_length=1, max_length=255)
    password: str | None = None
    private_key_filename: str | None = None
    ssh_port: int = Field(default=22, ge=1, le=65535)
    provider_type: ProviderType


class ProviderUpdate(BaseModel):
    """Partial provider update.

    Unset fields are left untouched. Credentials may be cleared with an
    explicit ``None``; the other fields may not.
    """

    name: str | None = Field(default=None, min_length=1, max_length=255)
    ip: str | None = Field(default=None, min_length=1, max_length=255)
    username: str | None = Field(default=None, min_length=1, max_length=255)
    password: str | None = None
    private_key_filename: str | None = None
    ssh_port: int | None = Field(default=None, ge=1, le=65535)
    provider_type: ProviderType | None = None

    reject_cleared = field_validator(
        "name", "ip", "username", "ssh_port", "provider_type"
    )(reject_null)


class Provider(APIModel):
    """Stored provider."""

    id: int
    name: str
    ip: str | None
    username: str | None
    password: str | None
    private_key_filename: str | None
    ssh_port: int | None
    provider_type: ProviderType
    created_at: datetime


class ProviderSummary(APIModel):
    """Provider fields embedded in a service listing."""

    id: int
    name: str
    ip: str | None
    username: str | None
    private_key_filename: str | None
    ssh_port: int | None
    provider_type: ProviderType
