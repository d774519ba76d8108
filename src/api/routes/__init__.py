"""API route registration.

Aggregates all API routers into a single router
for inclusion in the main application.
"""

from fastapi import APIRouter

from src.api.routes.devices import router as devices_router
from src.api.routes.floors import router as floors_router
from src.api.routes.house import router as house_router
from src.api.routes.planner import router as planner_router
from src.api.routes.room_templates import router as room_templates_router
from src.api.routes.rooms import router as rooms_router
from src.api.routes.stream import router as stream_router
from src.api.routes.system import router as system_router

# Main API router
api_router = APIRouter()

# System
api_router.include_router(system_router, tags=["System"])
# Catalog
api_router.include_router(devices_router)
# House structure
api_router.include_router(floors_router)
api_router.include_router(rooms_router)
api_router.include_router(room_templates_router)
api_router.include_router(house_router)
# Aggregated views
api_router.include_router(planner_router)
# Realtime snapshots
api_router.include_router(stream_router)

__all__ = ["api_router"]
