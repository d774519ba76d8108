"""House configuration repository (singleton record)."""

import logging
from collections.abc import Iterable

from src.dal.base import BaseRepository
from src.dal.devices import DeviceRepository
from src.exceptions import ValidationError
from src.planner.enums import DeviceCategory
from src.planner.models import HouseConfig
from src.storage.entities import HOUSE_CONFIG_ID
from src.storage.entities import HouseConfig as HouseConfigRow

logger = logging.getLogger(__name__)


class HouseConfigRepository(BaseRepository[HouseConfigRow]):
    """Reads and writes the single ``main`` house configuration."""

    model = HouseConfigRow
    collection = "house_config"

    async def get_config(self) -> HouseConfig:
        """Current configuration; an empty one if it was never saved."""
        row = await self.get_by_id(HOUSE_CONFIG_ID)
        if row is None:
            return HouseConfig(id=HOUSE_CONFIG_ID)
        return HouseConfig.model_validate(row)

    async def set_gateways(self, gateway_ids: Iterable[str]) -> HouseConfig:
        """Replace the house-level gateway list.

        Raises:
            ValidationError: If an id is not a catalog gateway
        """
        config = HouseConfig(id=HOUSE_CONFIG_ID, gateway_ids=list(gateway_ids))
        current = set((await self.get_config()).gateway_ids)
        devices = DeviceRepository(self.session)
        # Ids already assigned may dangle after a device delete
        for gateway_id in config.gateway_ids:
            if gateway_id in current:
                continue
            device = await devices.get_device(gateway_id)
            if device is None or device.category != DeviceCategory.GATEWAY:
                raise ValidationError(f"{gateway_id} is not a gateway in the catalog")

        data = {"gateway_ids": config.gateway_ids}
        row = await self.update(HOUSE_CONFIG_ID, data)
        if row is None:
            row = await self.create({"id": HOUSE_CONFIG_ID, **data})
        logger.info("House gateways set to %s", config.gateway_ids)
        return HouseConfig.model_validate(row)

    async def add_gateway(self, gateway_id: str) -> HouseConfig:
        config = await self.get_config()
        return await self.set_gateways([*config.gateway_ids, gateway_id])

    async def remove_gateway(self, gateway_id: str) -> HouseConfig:
        config = await self.get_config()
        return await self.set_gateways([g for g in config.gateway_ids if g != gateway_id])
