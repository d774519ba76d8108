"""Room and room template tables."""

from typing import Any

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from src.storage.models import Base, TimestampMixin, UUIDMixin


class Room(Base, UUIDMixin, TimestampMixin):
    """A room on a floor, holding its device placements."""

    __tablename__ = "rooms"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    floor_id: Mapped[str] = mapped_column(
        ForeignKey("floors.id", ondelete="CASCADE"),
        nullable=False,
    )
    devices: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONB,
        nullable=False,
        default=list,
        doc="[{instance_id, device_id, custom_name, is_owned}, ...]",
    )
    polygon: Mapped[list[dict[str, float]] | None] = mapped_column(
        JSONB,
        nullable=True,
        doc="Room outline [{x, y}, ...] on the floor plan",
    )
    bounds: Mapped[dict[str, float] | None] = mapped_column(
        JSONB,
        nullable=True,
        doc="Bounding box {x, y, width, height}",
    )

    __table_args__ = (Index("ix_rooms_floor_id", "floor_id"),)

    def __repr__(self) -> str:
        return f"<Room(id={self.id}, name={self.name}, floor_id={self.floor_id})>"


class RoomTemplate(Base, UUIDMixin, TimestampMixin):
    """Reusable preset of device entries."""

    __tablename__ = "room_templates"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    devices: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONB,
        nullable=False,
        default=list,
    )

    def __repr__(self) -> str:
        return f"<RoomTemplate(id={self.id}, name={self.name})>"
