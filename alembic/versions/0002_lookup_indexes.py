"""lookup indexes"""

from __future__ import annotations

from alembic import op

revision = "0002_lookup_indexes"
down_revision = "0001_initial_schema"
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Index the foreign keys used by listings and cascades.

    Returns
    -------
    None
        Creates the provider and tag lookup indexes.
    """
    op.create_index(
        "ix_services_provider_id",
        "services",
        ["provider_id"],
        unique=False,
    )
    op.create_index(
        "ix_service_tags_tag_id",
        "service_tags",
        ["tag_id"],
        unique=False,
    )


def downgrade() -> None:
    """Drop the lookup indexes.

    Returns
    -------
    None
        Removes both indexes.
    """
    op.drop_index("ix_service_tags_tag_id", table_name="service_tags")
    op.drop_index("ix_services_provider_id", table_name="services")
