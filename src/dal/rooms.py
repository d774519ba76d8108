"""Room repository.

Rooms are saved as whole documents. Every save checks that the floor
exists, that device instance ids stay unique across the house and that
newly owned instances fit the owned quantity of their base device.
"""

import logging
from typing import Any

from src.dal.base import BaseRepository
from src.dal.devices import DeviceRepository
from src.dal.floors import FloorRepository
from src.dal.house import HouseConfigRepository
from src.exceptions import NotFoundError
from src.planner.assignment import OwnershipLedger, ensure_quota, ensure_unique_instance_ids
from src.planner.models import Room
from src.storage.entities import Room as RoomRow

logger = logging.getLogger(__name__)


def room_to_row(room: Room) -> dict[str, Any]:
    return room.model_dump(
        mode="json", include={"name", "floor_id", "devices", "polygon", "bounds"}
    )


class RoomRepository(BaseRepository[RoomRow]):
    """Repository for rooms and their device placements."""

    model = RoomRow
    collection = "rooms"

    async def list_rooms(self, floor_id: str | None = None) -> list[Room]:
        """Rooms in creation order, optionally for one floor."""
        return [Room.model_validate(row) for row in await self.list_all(floor_id=floor_id)]

    async def get_room(self, room_id: str) -> Room | None:
        row = await self.get_by_id(room_id)
        return Room.model_validate(row) if row is not None else None

    async def require_room(self, room_id: str) -> Room:
        room = await self.get_room(room_id)
        if room is None:
            raise NotFoundError(
                f"Room {room_id} not found", collection=self.collection, record_id=room_id
            )
        return room

    async def ledger(self, draft: Room | None = None) -> OwnershipLedger:
        """Ownership ledger over all rooms, with ``draft`` replacing its stored copy."""
        devices = await DeviceRepository(self.session).get_device_map()
        config = await HouseConfigRepository(self.session).get_config()
        return OwnershipLedger(
            devices,
            await self.list_rooms(),
            draft=draft,
            house_gateway_ids=config.gateway_ids,
        )

    async def _validate(self, draft: Room, previous: Room | None, check_quota: bool) -> None:
        await FloorRepository(self.session).require_floor(draft.floor_id)
        rooms = [room for room in await self.list_rooms() if room.id != draft.id]
        ensure_unique_instance_ids([*rooms, draft])
        if not check_quota:
            return
        devices = await DeviceRepository(self.session).get_device_map()
        config = await HouseConfigRepository(self.session).get_config()
        ensure_quota(devices, rooms, draft, previous, config.gateway_ids)

    async def create_room(self, room: Room, check_quota: bool = True) -> Room:
        """Insert a new room.

        Owned flags copied from a template skip the quota check
        (``check_quota=False``).

        Raises:
            NotFoundError: If the floor does not exist
            ValidationError: If an instance id is already used elsewhere
            QuotaExceededError: If owned instances exceed a device quantity
        """
        await self._validate(room, None, check_quota)
        row = await self.create({"id": room.id, **room_to_row(room)})
        logger.info("Created room %s (%s) on floor %s", row.id, row.name, row.floor_id)
        return Room.model_validate(row)

    async def save_room(self, room: Room, check_quota: bool = True) -> Room:
        """Overwrite an existing room with a full document.

        Raises:
            NotFoundError: If the room or its floor does not exist
            ValidationError: If an instance id is already used elsewhere
            QuotaExceededError: If newly owned instances exceed a device quantity
        """
        previous = await self.require_room(room.id)
        await self._validate(room, previous, check_quota)
        row = await self.update(room.id, room_to_row(room))
        return Room.model_validate(row)

    async def delete_room(self, room_id: str) -> bool:
        return await self.delete(room_id)
