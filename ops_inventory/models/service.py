"""Service model."""

import enum
from typing import Any

from sqlalchemy import JSON, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from ops_inventory.database import Base
from ops_inventory.models.mixins import TimestampMixin, id_column

DEFAULT_SERVICE_STATUS = "unknown"


class ServiceType(str, enum.Enum):
    """How a service is run on its provider."""

    MANUAL = "MANUAL"
    DOCKER = "DOCKER"
    SYSTEMD = "SYSTEMD"


class Service(TimestampMixin, Base):
    """Monitored unit running on a provider."""

    __tablename__ = "services"
    __table_args__ = (
        Index("ix_services_provider_id", "provider_id"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = id_column()
    provider_id: Mapped[int] = mapped_column(ForeignKey("providers.id"))
    name: Mapped[str] = mapped_column("service_name", String(255))
    ip: Mapped[str | None] = mapped_column("service_ip", String(255))
    status: Mapped[str] = mapped_column(
        "service_status", String(50), default=DEFAULT_SERVICE_STATUS
    )
    service_type: Mapped[str] = mapped_column(String(50))
    container_details: Mapped[dict[str, Any] | None] = mapped_column(JSON)
