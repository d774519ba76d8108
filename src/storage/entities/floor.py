"""Floor table with its 2D plan layout."""

from typing import Any

from sqlalchemy import String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from src.storage.models import Base, TimestampMixin, UUIDMixin


class Floor(Base, UUIDMixin, TimestampMixin):
    """A storey of the house."""

    __tablename__ = "floors"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    layout: Mapped[dict[str, Any]] = mapped_column(
        JSONB,
        nullable=False,
        default=lambda: {"walls": [], "placed_devices": []},
        doc="{walls: [...], placed_devices: [...]}",
    )

    def __repr__(self) -> str:
        return f"<Floor(id={self.id}, name={self.name})>"
