"""Database entity models.

All SQLAlchemy ORM models for the house planner.
"""

from src.storage.entities.device import CatalogDevice
from src.storage.entities.floor import Floor
from src.storage.entities.house_config import HOUSE_CONFIG_ID, HouseConfig
from src.storage.entities.room import Room, RoomTemplate

__all__ = [
    "CatalogDevice",
    "Floor",
    "HOUSE_CONFIG_ID",
    "HouseConfig",
    "Room",
    "RoomTemplate",
]
