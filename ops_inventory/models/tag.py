"""Tag and service-tag association models."""

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from ops_inventory.database import Base
from ops_inventory.models.mixins import TimestampMixin, id_column


class Tag(TimestampMixin, Base):
    """User-defined service label."""

    __tablename__ = "tags"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = id_column()
    name: Mapped[str] = mapped_column(String(255), unique=True)
    color: Mapped[str | None] = mapped_column(String(50))


class ServiceTag(Base):
    """Association row linking a service to a tag."""

    __tablename__ = "service_tags"
    __table_args__ = (Index("ix_service_tags_tag_id", "tag_id"),)

    service_id: Mapped[int] = mapped_column(
        ForeignKey("services.id"), primary_key=True
    )
    tag_id: Mapped[int] = mapped_column(ForeignKey("tags.id"), primary_key=True)
