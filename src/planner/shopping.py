"""Shopping list aggregation.

Walks every room placement and every house-level gateway, splits them
into "already owned" and "needs purchase" and totals the prices.
"""

from __future__ import annotations

import logging
from collections import Counter

from pydantic import BaseModel, Field

from .enums import DeviceCategory
from .models import Gateway, HouseSnapshot

logger = logging.getLogger(__name__)

# Display sections in render order
SECTION_ORDER: list[tuple[str, tuple[DeviceCategory, ...]]] = [
    ("sensors", (DeviceCategory.SENSOR,)),
    ("switches", (DeviceCategory.SWITCH,)),
    ("assistants", (DeviceCategory.VOICE_ASSISTANT,)),
    ("lighting", (DeviceCategory.LIGHTING,)),
    ("other", (DeviceCategory.OTHER_DEVICE,)),
    ("gateways", (DeviceCategory.GATEWAY,)),
]


class ShoppingItem(BaseModel):
    """One unit to buy."""

    device_id: str
    brand: str
    base_name: str
    custom_name: str
    price: float
    category: DeviceCategory
    link: str | None = None
    room_id: str | None = Field(default=None, description="None for house-level gateways")


class ShoppingSection(BaseModel):
    key: str
    items: list[ShoppingItem]
    subtotal: float


class ShoppingList(BaseModel):
    items: list[ShoppingItem] = Field(default_factory=list)
    total_price: float = 0.0
    used_owned_quantities: dict[str, int] = Field(default_factory=dict)

    def sections(self) -> list[ShoppingSection]:
        """Group items by device category; empty sections are omitted."""
        sections = []
        for key, categories in SECTION_ORDER:
            items = [item for item in self.items if item.category in categories]
            if items:
                sections.append(
                    ShoppingSection(
                        key=key,
                        items=items,
                        subtotal=sum(item.price for item in items),
                    )
                )
        return sections


def _gateway_needs_purchase(gateway: Gateway, used: int) -> bool:
    # Owned stock is fully consumed by rooms (also true for quantity 0)
    return gateway.quantity <= used


def build_shopping_list(snapshot: HouseSnapshot) -> ShoppingList:
    """Build the purchase list for the whole house.

    Pass 1 emits every room instance not marked owned and counts owned
    instances per base device. Pass 2 emits each house-assigned gateway
    whose owned stock is already consumed. Instances referencing missing
    devices are skipped.

    Args:
        snapshot: Current store snapshot

    Returns:
        Shopping list with items in room order, then house gateways
    """
    devices = snapshot.device_map
    items: list[ShoppingItem] = []
    used_owned: Counter[str] = Counter()

    for room in snapshot.rooms:
        for instance in room.devices:
            device = devices.get(instance.device_id)
            if device is None:
                continue
            if instance.is_owned:
                used_owned[device.id] += 1
                continue
            items.append(
                ShoppingItem(
                    device_id=device.id,
                    brand=device.brand,
                    base_name=device.name,
                    custom_name=instance.custom_name or device.name,
                    price=device.price,
                    category=DeviceCategory(device.category),
                    link=device.link,
                    room_id=room.id,
                )
            )

    for gateway in snapshot.house_gateways():
        if _gateway_needs_purchase(gateway, used_owned.get(gateway.id, 0)):
            items.append(
                ShoppingItem(
                    device_id=gateway.id,
                    brand=gateway.brand,
                    base_name=gateway.name,
                    custom_name=gateway.name,
                    price=gateway.price,
                    category=DeviceCategory.GATEWAY,
                    link=gateway.link,
                )
            )

    total = sum(item.price for item in items)
    logger.debug("Shopping list: %d item(s), total %.2f", len(items), total)
    return ShoppingList(
        items=items,
        total_price=total,
        used_owned_quantities=dict(used_owned),
    )


def format_price(value: float, currency_symbol: str) -> str:
    return f"{value:.2f} {currency_symbol}"
