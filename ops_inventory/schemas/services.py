"""Service records."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from ops_inventory.models.service import DEFAULT_SERVICE_STATUS, ServiceType
from ops_inventory.schemas.common import APIModel, reject_null
from ops_inventory.schemas.providers import ProviderSummary
from ops_inventory.schemas.tags import Tag


class ServiceCreate(BaseModel):
    """Register a service on an existing provider."""

    provider_id: int
    name: str = Field(min_length=1, max_length=255)
    ip: str | None = Field(default=None, max_length=255)
    status: str = Field(default=DEFAULT_SERVICE_STATUS, min_length=1, max_length=50)
    service_type: ServiceType
    container_details: dict[str, Any] | None = None


class ServiceUpdate(BaseModel):
    """Partial service update; ``ip`` and ``container_details`` accept ``None``."""

    provider_id: int | None = None
    name: str | None = Field(default=None, min_length=1, max_length=255)
    ip: str | None = Field(default=None, max_length=255)
    status: str | None = Field(default=None, min_length=1, max_length=50)
    service_type: ServiceType | None = None
    container_details: dict[str, Any] | None = None

    reject_cleared = field_validator(
        "provider_id", "name", "status", "service_type"
    )(reject_null)


class Service(APIModel):
    """Stored service."""

    id: int
    provider_id: int
    name: str
    ip: str | None
    status: str
    service_type: ServiceType
    container_details: dict[str, Any] | None
    created_at: datetime


class ServiceWithProvider(Service):
    """Service enriched with its provider and tags."""

    provider: ProviderSummary
    tags: list[Tag] = Field(default_factory=list)
