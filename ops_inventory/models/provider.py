"""Provider model."""

import enum

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ops_inventory.database import Base
from ops_inventory.models.mixins import TimestampMixin, id_column


class ProviderType(str, enum.Enum):
    """Kind of host a provider represents."""

    VM = "VM"
    K8S = "K8S"


class Provider(TimestampMixin, Base):
    """Managed host reachable over SSH."""

    __tablename__ = "providers"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = id_column()
    name: Mapped[str] = mapped_column("provider_name", String(255))
    ip: Mapped[str | None] = mapped_column("provider_ip", String(255))
    username: Mapped[str | None] = mapped_column(String(255))
    password: Mapped[str | None] = mapped_column(String(512))
    private_key_filename: Mapped[str | None] = mapped_column(String(512))
    ssh_port: Mapped[int | None] = mapped_column(Integer, default=22)
    provider_type: Mapped[str] = mapped_column(String(50))
