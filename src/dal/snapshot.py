"""Load a consistent snapshot of every collection for the aggregations."""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.dal.devices import DeviceRepository
from src.dal.floors import FloorRepository
from src.dal.house import HouseConfigRepository
from src.dal.room_templates import RoomTemplateRepository
from src.dal.rooms import RoomRepository
from src.planner.enums import COLLECTION_CATEGORIES
from src.planner.models import HouseSnapshot


async def load_snapshot(session: AsyncSession) -> HouseSnapshot:
    """Read all collections within one session."""
    return HouseSnapshot(
        devices=await DeviceRepository(session).list_devices(),
        floors=await FloorRepository(session).list_floors(),
        rooms=await RoomRepository(session).list_rooms(),
        templates=await RoomTemplateRepository(session).list_templates(),
        house_config=await HouseConfigRepository(session).get_config(),
    )


async def load_collection(session: AsyncSession, collection: str) -> list[dict[str, Any]]:
    """Full current result set of one collection as JSON-ready records.

    Raises:
        ValueError: For an unknown collection name
    """
    if collection in COLLECTION_CATEGORIES:
        records = await DeviceRepository(session).list_devices(COLLECTION_CATEGORIES[collection])
    elif collection == "floors":
        records = await FloorRepository(session).list_floors()
    elif collection == "rooms":
        records = await RoomRepository(session).list_rooms()
    elif collection == "room_templates":
        records = await RoomTemplateRepository(session).list_templates()
    elif collection == "house_config":
        records = [await HouseConfigRepository(session).get_config()]
    else:
        raise ValueError(f"Unknown collection: {collection}")
    return [record.model_dump(mode="json") for record in records]
