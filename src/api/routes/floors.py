"""Floor and floor plan API routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.deps import get_db
from src.api.routes.stream import publish_changes
from src.api.schemas.house import (
    DrawRoomRequest,
    FloorCreate,
    FloorDeleteResponse,
    FloorListResponse,
    FloorUpdate,
    LayoutUpdate,
    PlaceDeviceRequest,
    PlaceDeviceResponse,
    PointRequest,
    WallCreate,
)
from src.dal import DeviceRepository, FloorRepository, RoomRepository
from src.planner import floor_plan
from src.planner.models import Floor, Room
from src.settings import get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/floors", tags=["Floors"])


@router.get("", response_model=FloorListResponse)
async def list_floors(session: AsyncSession = Depends(get_db)) -> FloorListResponse:
    floors = await FloorRepository(session).list_floors()
    return FloorListResponse(items=floors, total=len(floors))


@router.post("", response_model=Floor, status_code=201)
async def create_floor(
    body: FloorCreate,
    session: AsyncSession = Depends(get_db),
) -> Floor:
    floor = await FloorRepository(session).create_floor(body.name)
    await session.commit()
    await publish_changes(session, "floors")
    return floor


@router.get("/{floor_id}", response_model=Floor)
async def get_floor(floor_id: str, session: AsyncSession = Depends(get_db)) -> Floor:
    floor = await FloorRepository(session).get_floor(floor_id)
    if floor is None:
        raise HTTPException(status_code=404, detail=f"Floor {floor_id} not found")
    return floor


@router.patch("/{floor_id}", response_model=Floor)
async def rename_floor(
    floor_id: str,
    body: FloorUpdate,
    session: AsyncSession = Depends(get_db),
) -> Floor:
    floor = await FloorRepository(session).rename_floor(floor_id, body.name)
    await session.commit()
    await publish_changes(session, "floors")
    return floor


@router.delete("/{floor_id}", response_model=FloorDeleteResponse)
async def delete_floor(
    floor_id: str,
    session: AsyncSession = Depends(get_db),
) -> FloorDeleteResponse:
    """Delete a floor together with every room on it."""
    room_ids = await FloorRepository(session).delete_floor(floor_id)
    await session.commit()
    await publish_changes(session, "rooms", "floors")
    return FloorDeleteResponse(floor_id=floor_id, deleted_room_ids=room_ids)


@router.put("/{floor_id}/layout", response_model=Floor)
async def save_layout(
    floor_id: str,
    body: LayoutUpdate,
    session: AsyncSession = Depends(get_db),
) -> Floor:
    """Overwrite the floor plan (walls and device pins)."""
    floor = await FloorRepository(session).save_layout(floor_id, body.layout)
    await session.commit()
    await publish_changes(session, "floors")
    return floor


@router.post("/{floor_id}/walls", response_model=Floor, status_code=201)
async def add_wall(
    floor_id: str,
    body: WallCreate,
    session: AsyncSession = Depends(get_db),
) -> Floor:
    """Add a wall drawn with the pointer.

    The start snaps to a nearby wall endpoint or the grid; the end is
    additionally kept horizontal or vertical.
    """
    settings = get_settings()
    repo = FloorRepository(session)
    floor = await repo.require_floor(floor_id)
    walls = floor.layout.walls
    start = floor_plan.find_snap_point(
        body.start,
        walls,
        threshold=settings.plan_snap_threshold,
        grid_size=settings.plan_grid_size,
    )
    end = floor_plan.constrain_wall_end(
        start,
        body.end,
        walls,
        threshold=settings.plan_snap_threshold,
        grid_size=settings.plan_grid_size,
    )
    floor = await repo.save_layout(floor_id, floor_plan.add_wall(floor.layout, start, end))
    await session.commit()
    await publish_changes(session, "floors")
    return floor


@router.post("/{floor_id}/walls/erase", response_model=Floor)
async def erase_wall(
    floor_id: str,
    body: PointRequest,
    session: AsyncSession = Depends(get_db),
) -> Floor:
    """Delete the wall closest to the clicked point, if one is close enough."""
    repo = FloorRepository(session)
    floor = await repo.require_floor(floor_id)
    layout = floor_plan.delete_wall_at(
        floor.layout, body.point, get_settings().plan_wall_hit_threshold
    )
    if layout == floor.layout:
        return floor
    floor = await repo.save_layout(floor_id, layout)
    await session.commit()
    await publish_changes(session, "floors")
    return floor


@router.post("/{floor_id}/rooms", response_model=Room, status_code=201)
async def draw_room(
    floor_id: str,
    body: DrawRoomRequest,
    session: AsyncSession = Depends(get_db),
) -> Room:
    """Create a room from an outline drawn on this floor.

    A last point clicked next to the first one closes the outline and is
    dropped.
    """
    points = body.points
    if floor_plan.closes_polygon(points[:-1], points[-1], get_settings().plan_snap_threshold):
        points = points[:-1]
    polygon, bounds = floor_plan.room_outline(points)
    room = Room(name=body.name, floor_id=floor_id, polygon=polygon, bounds=bounds)
    created = await RoomRepository(session).create_room(room)
    await session.commit()
    await publish_changes(session, "rooms")
    return created


@router.post("/{floor_id}/devices", response_model=PlaceDeviceResponse, status_code=201)
async def place_device(
    floor_id: str,
    body: PlaceDeviceRequest,
    session: AsyncSession = Depends(get_db),
) -> PlaceDeviceResponse:
    """Drop a device pin; a pin inside a room outline also adds it to that room."""
    floor = await FloorRepository(session).require_floor(floor_id)
    device = await DeviceRepository(session).get_device(body.device_id)
    if device is None:
        raise HTTPException(status_code=404, detail=f"Device {body.device_id} not found")

    rooms = RoomRepository(session)
    floor, room, pin = floor_plan.place_device(
        floor,
        await rooms.list_rooms(floor_id),
        device,
        body.point,
        icon=body.icon,
        icon_color=body.icon_color,
    )
    floor = await FloorRepository(session).save_layout(floor_id, floor.layout)
    if room is not None:
        room = await rooms.save_room(room)
    await session.commit()
    await publish_changes(session, "floors", "rooms")
    return PlaceDeviceResponse(floor=floor, placed=pin, room=room)


@router.patch("/{floor_id}/devices/{instance_id}", response_model=Floor)
async def move_placed_device(
    floor_id: str,
    instance_id: str,
    body: PointRequest,
    session: AsyncSession = Depends(get_db),
) -> Floor:
    """Drag a device pin to a new position."""
    repo = FloorRepository(session)
    floor = await repo.require_floor(floor_id)
    if not any(pin.instance_id == instance_id for pin in floor.layout.placed_devices):
        raise HTTPException(status_code=404, detail=f"Placed device {instance_id} not found")
    floor = await repo.save_layout(
        floor_id, floor_plan.move_placed_device(floor.layout, instance_id, body.point)
    )
    await session.commit()
    await publish_changes(session, "floors")
    return floor


@router.delete("/{floor_id}/devices/{instance_id}", response_model=Floor)
async def remove_placed_device(
    floor_id: str,
    instance_id: str,
    session: AsyncSession = Depends(get_db),
) -> Floor:
    """Remove a device pin from the plan (room placements are kept)."""
    repo = FloorRepository(session)
    floor = await repo.require_floor(floor_id)
    floor = await repo.save_layout(
        floor_id, floor_plan.remove_placed_device(floor.layout, instance_id)
    )
    await session.commit()
    await publish_changes(session, "floors")
    return floor
