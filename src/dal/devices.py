"""Catalog device repository.

Devices are stored in a single table and surfaced as the typed domain
models of their category. Every create and update recomputes the
device score from the submitted fields; a score sent by the client is
ignored.
"""

import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from src.dal.base import BaseRepository
from src.exceptions import NotFoundError, ValidationError
from src.planner.catalog import filter_devices
from src.planner.enums import CATEGORY_COLLECTIONS, DeviceCategory
from src.planner.models import (
    DEVICE_MODELS,
    BaseDevice,
    Gateway,
    VoiceAssistant,
    device_connectivity,
)
from src.planner.scoring import with_score
from src.storage.entities import CatalogDevice

logger = logging.getLogger(__name__)

_COMMON_FIELDS = (
    "name",
    "brand",
    "link",
    "price",
    "price_evaluation",
    "home_assistant_compatibility",
    "tags",
    "quantity",
    "score",
)


def device_to_row(device: BaseDevice) -> dict[str, Any]:
    """Flatten a domain device into catalog_devices column values."""
    data = device.model_dump(mode="json", include=set(_COMMON_FIELDS))
    data["category"] = str(device.category)
    data["specs"] = [spec.model_dump(mode="json") for spec in device.specs]
    connectivity = device_connectivity(device)
    data["connectivity"] = str(connectivity) if connectivity is not None else None
    data["protocols"] = []
    data["is_gateway"] = False
    data["switch_type"] = None
    if isinstance(device, Gateway):
        data["protocols"] = [str(p) for p in device.connectivity]
    elif isinstance(device, VoiceAssistant):
        data["is_gateway"] = device.is_gateway
        data["protocols"] = [str(p) for p in device.gateway_protocols]
    elif device.category == DeviceCategory.SWITCH:
        data["switch_type"] = str(device.switch_type)
    return data


def row_to_device(row: CatalogDevice) -> BaseDevice:
    """Build the typed domain device for a catalog_devices row."""
    category = DeviceCategory(row.category)
    data: dict[str, Any] = {field: getattr(row, field) for field in _COMMON_FIELDS}
    data.update(id=row.id, category=row.category, specs=row.specs or [], created_at=row.created_at)
    if category == DeviceCategory.GATEWAY:
        data["connectivity"] = row.protocols or []
    elif category == DeviceCategory.VOICE_ASSISTANT:
        data["is_gateway"] = row.is_gateway
        data["gateway_protocols"] = row.protocols or []
    else:
        if row.connectivity is not None:
            data["connectivity"] = row.connectivity
        if category == DeviceCategory.SWITCH and row.switch_type is not None:
            data["switch_type"] = row.switch_type
    return DEVICE_MODELS[category].model_validate(data)


class DeviceRepository(BaseRepository[CatalogDevice]):
    """Repository for catalog devices of every category."""

    model = CatalogDevice
    collection = "devices"

    async def list_devices(
        self,
        category: DeviceCategory | None = None,
        tag: str | None = None,
    ) -> list[BaseDevice]:
        """List devices, newest first.

        Args:
            category: Restrict to one category
            tag: Only devices carrying this tag

        Returns:
            Typed domain devices
        """
        rows = await self.list_all(
            direction="desc",
            category=str(category) if category is not None else None,
        )
        return filter_devices([row_to_device(row) for row in rows], tag=tag)

    async def get_device(self, device_id: str) -> BaseDevice | None:
        row = await self.get_by_id(device_id)
        return row_to_device(row) if row is not None else None

    async def get_device_map(self) -> dict[str, BaseDevice]:
        """All devices keyed by id across categories."""
        return {device.id: device for device in await self.list_devices()}

    async def create_device(self, device: BaseDevice) -> BaseDevice:
        """Persist a new device with a server-side id and fresh score."""
        scored = with_score(device)
        row = await self.create(device_to_row(scored))
        logger.info(
            "Created %s %s (score %.1f)",
            CATEGORY_COLLECTIONS[DeviceCategory(row.category)],
            row.id,
            row.score,
        )
        return row_to_device(row)

    async def update_device(self, device_id: str, changes: dict[str, Any]) -> BaseDevice:
        """Merge field changes into a device and rescore it.

        Args:
            device_id: Device to update
            changes: Partial field values (domain field names)

        Returns:
            Updated device

        Raises:
            NotFoundError: If the device does not exist
            ValidationError: If the change would switch the device category
        """
        current = await self.get_device(device_id)
        if current is None:
            raise NotFoundError(
                f"Device {device_id} not found", collection=self.collection, record_id=device_id
            )
        if "category" in changes and changes["category"] != current.category:
            raise ValidationError("A device cannot change its category")

        merged = current.model_dump()
        merged.update({k: v for k, v in changes.items() if k not in ("id", "created_at", "score")})
        try:
            updated = with_score(type(current).model_validate(merged))
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid device update: {e}") from e
        row = await self.update(device_id, device_to_row(updated))
        return row_to_device(row)

    async def delete_device(self, device_id: str) -> bool:
        """Delete a device.

        Room instances and house gateway ids that reference it are left
        in place and skipped by every aggregation.
        """
        return await self.delete(device_id)
