"""House planner domain engines.

Pure functions over a ``HouseSnapshot``: scoring, room assignment and
ownership quotas, gateway compatibility, the shopping list, the
connectivity topology and floor plan geometry.
"""

from src.planner.assignment import OwnershipLedger, OwnershipQuota, ensure_quota
from src.planner.compatibility import active_gateways, missing_gateway_report
from src.planner.models import (
    DEVICE_MODELS,
    BaseDevice,
    Floor,
    HouseConfig,
    HouseSnapshot,
    Room,
    RoomTemplate,
)
from src.planner.scoring import score_device, with_score
from src.planner.shopping import ShoppingList, build_shopping_list
from src.planner.topology import build_topology, to_view

__all__ = [
    # Models
    "BaseDevice",
    "DEVICE_MODELS",
    "Floor",
    "HouseConfig",
    "HouseSnapshot",
    "Room",
    "RoomTemplate",
    # Scoring
    "score_device",
    "with_score",
    # Assignment
    "OwnershipLedger",
    "OwnershipQuota",
    "ensure_quota",
    # Compatibility
    "active_gateways",
    "missing_gateway_report",
    # Aggregations
    "ShoppingList",
    "build_shopping_list",
    "build_topology",
    "to_view",
]
