"""Data Access Layer for the house planner.

Repositories turn table rows into the planner's domain models and
enforce the cross-record checks that run on every save.
"""

from src.dal.devices import DeviceRepository
from src.dal.floors import FloorRepository
from src.dal.house import HouseConfigRepository
from src.dal.room_templates import RoomTemplateRepository
from src.dal.rooms import RoomRepository
from src.dal.snapshot import load_collection, load_snapshot

__all__ = [
    "DeviceRepository",
    "FloorRepository",
    "HouseConfigRepository",
    "RoomRepository",
    "RoomTemplateRepository",
    "load_collection",
    "load_snapshot",
]
