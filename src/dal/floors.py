"""Floor repository."""

import logging

from sqlalchemy import delete as sa_delete
from sqlalchemy import select

from src.dal.base import BaseRepository
from src.exceptions import NotFoundError
from src.planner.models import Floor, FloorLayout
from src.storage.entities import Floor as FloorRow
from src.storage.entities import Room as RoomRow

logger = logging.getLogger(__name__)


def row_to_floor(row: FloorRow) -> Floor:
    return Floor.model_validate(row)


class FloorRepository(BaseRepository[FloorRow]):
    """Repository for floors and their plan layouts."""

    model = FloorRow
    collection = "floors"

    async def list_floors(self) -> list[Floor]:
        """Floors in creation order."""
        return [row_to_floor(row) for row in await self.list_all()]

    async def get_floor(self, floor_id: str) -> Floor | None:
        row = await self.get_by_id(floor_id)
        return row_to_floor(row) if row is not None else None

    async def require_floor(self, floor_id: str) -> Floor:
        floor = await self.get_floor(floor_id)
        if floor is None:
            raise NotFoundError(
                f"Floor {floor_id} not found", collection=self.collection, record_id=floor_id
            )
        return floor

    async def create_floor(self, name: str) -> Floor:
        row = await self.create({"name": name, "layout": FloorLayout().model_dump(mode="json")})
        logger.info("Created floor %s (%s)", row.id, name)
        return row_to_floor(row)

    async def rename_floor(self, floor_id: str, name: str) -> Floor:
        row = await self.update(floor_id, {"name": name})
        if row is None:
            raise NotFoundError(
                f"Floor {floor_id} not found", collection=self.collection, record_id=floor_id
            )
        return row_to_floor(row)

    async def save_layout(self, floor_id: str, layout: FloorLayout) -> Floor:
        """Overwrite a floor's walls and placed device pins."""
        row = await self.update(floor_id, {"layout": layout.model_dump(mode="json")})
        if row is None:
            raise NotFoundError(
                f"Floor {floor_id} not found", collection=self.collection, record_id=floor_id
            )
        return row_to_floor(row)

    async def delete_floor(self, floor_id: str) -> list[str]:
        """Delete a floor after deleting its rooms one by one.

        Returns:
            Ids of the deleted rooms

        Raises:
            NotFoundError: If the floor does not exist
        """
        await self.require_floor(floor_id)
        result = await self.session.execute(
            select(RoomRow.id).where(RoomRow.floor_id == floor_id).order_by(RoomRow.created_at)
        )
        room_ids = list(result.scalars().all())
        for room_id in room_ids:
            await self.session.execute(sa_delete(RoomRow).where(RoomRow.id == room_id))
        await self.delete(floor_id)
        logger.info("Deleted floor %s and %d room(s)", floor_id, len(room_ids))
        return room_ids
