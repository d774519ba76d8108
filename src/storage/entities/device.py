"""Catalog device table.

All six device categories share one table; the ``category`` column
selects the document shape. End devices carry a single
``connectivity``; gateways and gateway-capable voice assistants carry
a ``protocols`` list instead.
"""

from typing import Any

from sqlalchemy import Boolean, Float, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from src.storage.models import Base, TimestampMixin, UUIDMixin


class CatalogDevice(Base, UUIDMixin, TimestampMixin):
    """A device card in the catalog."""

    __tablename__ = "catalog_devices"

    category: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        doc="sensor, switch, lighting, other-device, voice-assistant or gateway",
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Device display name",
    )
    brand: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default="",
        doc="Manufacturer",
    )
    link: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        doc="Shop or product page URL",
    )

    # Ratings
    price: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=0.0,
    )
    price_evaluation: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default="medium",
    )
    home_assistant_compatibility: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=5,
        doc="1-5 rating",
    )
    specs: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONB,
        nullable=False,
        default=list,
        doc="[{id, name, value, evaluation}, ...]",
    )
    tags: Mapped[list[str]] = mapped_column(
        JSONB,
        nullable=False,
        default=list,
    )
    score: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=0.0,
        doc="Derived 0-10 score, recomputed on every save",
    )
    quantity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        doc="Units already owned",
    )

    # Connectivity
    connectivity: Mapped[str | None] = mapped_column(
        String(32),
        nullable=True,
        doc="End-device protocol (null for gateways and voice assistants)",
    )
    protocols: Mapped[list[str]] = mapped_column(
        JSONB,
        nullable=False,
        default=list,
        doc="Bridged protocols of a gateway or gateway-capable assistant",
    )
    is_gateway: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        doc="Voice assistant also acts as a gateway",
    )
    switch_type: Mapped[str | None] = mapped_column(
        String(16),
        nullable=True,
        doc="wall or in-wall (switches only)",
    )

    __table_args__ = (
        Index("ix_catalog_devices_category", "category"),
        Index("ix_catalog_devices_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<CatalogDevice(id={self.id}, category={self.category}, name={self.name})>"
