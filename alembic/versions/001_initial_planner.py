"""Initial house planner schema.

Revision ID: 001_initial_planner
Revises:
Create Date: 2026-10-19

Creates tables for:
- catalog_devices: Device cards of all six categories
- floors: Storeys with their 2D plan layout
- rooms: Rooms with device placements and outline
- room_templates: Reusable device presets
- house_config: House-level gateway assignment (single row "main")
"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001_initial_planner"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), onupdate=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    # Catalog devices table
    op.create_table(
        "catalog_devices",
        sa.Column("id", postgresql.UUID(as_uuid=False), primary_key=True),
        sa.Column("category", sa.String(32), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("brand", sa.String(255), nullable=False, server_default=""),
        sa.Column("link", sa.Text, nullable=True),
        sa.Column("price", sa.Float, nullable=False, server_default="0"),
        sa.Column("price_evaluation", sa.String(16), nullable=False, server_default="medium"),
        sa.Column("home_assistant_compatibility", sa.Integer, nullable=False, server_default="5"),
        sa.Column("specs", postgresql.JSONB, nullable=False, server_default="[]"),
        sa.Column("tags", postgresql.JSONB, nullable=False, server_default="[]"),
        sa.Column("score", sa.Float, nullable=False, server_default="0"),
        sa.Column("quantity", sa.Integer, nullable=False, server_default="0"),
        sa.Column("connectivity", sa.String(32), nullable=True),
        sa.Column("protocols", postgresql.JSONB, nullable=False, server_default="[]"),
        sa.Column("is_gateway", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("switch_type", sa.String(16), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_catalog_devices_category", "catalog_devices", ["category"])
    op.create_index("ix_catalog_devices_created_at", "catalog_devices", ["created_at"])

    # Floors table
    op.create_table(
        "floors",
        sa.Column("id", postgresql.UUID(as_uuid=False), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column(
            "layout",
            postgresql.JSONB,
            nullable=False,
            server_default='{"walls": [], "placed_devices": []}',
        ),
        *_timestamps(),
    )

    # Rooms table
    op.create_table(
        "rooms",
        sa.Column("id", postgresql.UUID(as_uuid=False), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column(
            "floor_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("floors.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("devices", postgresql.JSONB, nullable=False, server_default="[]"),
        sa.Column("polygon", postgresql.JSONB, nullable=True),
        sa.Column("bounds", postgresql.JSONB, nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_rooms_floor_id", "rooms", ["floor_id"])

    # Room templates table
    op.create_table(
        "room_templates",
        sa.Column("id", postgresql.UUID(as_uuid=False), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("devices", postgresql.JSONB, nullable=False, server_default="[]"),
        *_timestamps(),
    )

    # House config table (single row)
    op.create_table(
        "house_config",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("gateway_ids", postgresql.JSONB, nullable=False, server_default="[]"),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table("house_config")
    op.drop_table("room_templates")
    op.drop_index("ix_rooms_floor_id", table_name="rooms")
    op.drop_table("rooms")
    op.drop_table("floors")
    op.drop_index("ix_catalog_devices_created_at", table_name="catalog_devices")
    op.drop_index("ix_catalog_devices_category", table_name="catalog_devices")
    op.drop_table("catalog_devices")
