"""House-level configuration (single row, id "main")."""

from sqlalchemy import String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from src.storage.models import Base, TimestampMixin

HOUSE_CONFIG_ID = "main"


class HouseConfig(Base, TimestampMixin):
    """Gateways assigned to the whole house."""

    __tablename__ = "house_config"

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        default=HOUSE_CONFIG_ID,
    )
    gateway_ids: Mapped[list[str]] = mapped_column(
        JSONB,
        nullable=False,
        default=list,
        doc="Catalog gateway ids, no duplicates",
    )

    def __repr__(self) -> str:
        return f"<HouseConfig(id={self.id}, gateways={len(self.gateway_ids)})>"
