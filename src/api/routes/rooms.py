"""Room API routes: CRUD, device placements, owned flags and templates."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.deps import get_db
from src.api.routes.stream import publish_changes
from src.api.schemas.house import (
    AddDeviceRequest,
    ApplyTemplateRequest,
    InstanceOwnership,
    InstanceUpdate,
    RoomCreate,
    RoomListResponse,
    RoomOwnershipResponse,
    RoomUpdate,
    SaveTemplateRequest,
)
from src.dal import DeviceRepository, RoomRepository, RoomTemplateRepository
from src.planner import assignment, floor_plan
from src.planner.models import Room, RoomTemplate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rooms", tags=["Rooms"])


@router.get("", response_model=RoomListResponse)
async def list_rooms(
    floor_id: str | None = Query(None, description="Filter by floor"),
    session: AsyncSession = Depends(get_db),
) -> RoomListResponse:
    rooms = await RoomRepository(session).list_rooms(floor_id)
    return RoomListResponse(items=rooms, total=len(rooms))


@router.post("", response_model=Room, status_code=201)
async def create_room(
    body: RoomCreate,
    session: AsyncSession = Depends(get_db),
) -> Room:
    """Create a room, optionally seeded from a template."""
    polygon, bounds = None, None
    if body.polygon:
        polygon, bounds = floor_plan.room_outline(body.polygon)
    room = Room(
        name=body.name,
        floor_id=body.floor_id,
        devices=body.devices,
        polygon=polygon,
        bounds=bounds,
    )
    if body.template_id:
        template = await RoomTemplateRepository(session).require_template(body.template_id)
        room = assignment.apply_template(room, template)

    # Owned flags copied from a template are not quota-checked
    created = await RoomRepository(session).create_room(room, check_quota=not body.template_id)
    await session.commit()
    await publish_changes(session, "rooms")
    return created


@router.get("/{room_id}", response_model=Room)
async def get_room(room_id: str, session: AsyncSession = Depends(get_db)) -> Room:
    room = await RoomRepository(session).get_room(room_id)
    if room is None:
        raise HTTPException(status_code=404, detail=f"Room {room_id} not found")
    return room


@router.put("/{room_id}", response_model=Room)
async def replace_room(
    room_id: str,
    body: RoomUpdate,
    session: AsyncSession = Depends(get_db),
) -> Room:
    """Save the whole room document (the edit dialog's draft)."""
    bounds = body.bounds
    if body.polygon:
        _, bounds = floor_plan.room_outline(body.polygon)
    room = Room(id=room_id, **body.model_dump(exclude={"bounds"}), bounds=bounds)
    saved = await RoomRepository(session).save_room(room)
    await session.commit()
    await publish_changes(session, "rooms")
    return saved


@router.delete("/{room_id}", status_code=204)
async def delete_room(room_id: str, session: AsyncSession = Depends(get_db)) -> None:
    if not await RoomRepository(session).delete_room(room_id):
        raise HTTPException(status_code=404, detail=f"Room {room_id} not found")
    await session.commit()
    await publish_changes(session, "rooms")


def _ownership_response(room: Room, ledger: assignment.OwnershipLedger) -> RoomOwnershipResponse:
    instances = []
    for instance in room.devices:
        quota = ledger.quota(instance.device_id)
        instances.append(
            InstanceOwnership(
                instance_id=instance.instance_id,
                device_id=instance.device_id,
                is_owned=instance.is_owned,
                can_toggle=ledger.can_toggle_owned(instance),
                owned=quota.owned,
                used=quota.used,
            )
        )
    return RoomOwnershipResponse(room_id=room.id, instances=instances)


@router.get("/{room_id}/ownership", response_model=RoomOwnershipResponse)
async def room_ownership(
    room_id: str,
    session: AsyncSession = Depends(get_db),
) -> RoomOwnershipResponse:
    """Owned checkbox state for every device placed in the stored room."""
    repo = RoomRepository(session)
    room = await repo.require_room(room_id)
    return _ownership_response(room, await repo.ledger(draft=room))


@router.post("/{room_id}/ownership", response_model=RoomOwnershipResponse)
async def draft_ownership(
    room_id: str,
    body: RoomUpdate,
    session: AsyncSession = Depends(get_db),
) -> RoomOwnershipResponse:
    """Owned checkbox state for an unsaved edit of the room.

    The submitted document replaces the stored room when counting used
    units, so its instances are not counted twice. Nothing is saved.
    """
    draft = Room(id=room_id, **body.model_dump())
    return _ownership_response(draft, await RoomRepository(session).ledger(draft=draft))


@router.post("/{room_id}/devices", response_model=Room, status_code=201)
async def add_device(
    room_id: str,
    body: AddDeviceRequest,
    session: AsyncSession = Depends(get_db),
) -> Room:
    """Place a catalog device in the room as a new, not-owned instance."""
    repo = RoomRepository(session)
    room = await repo.require_room(room_id)
    device = await DeviceRepository(session).get_device(body.device_id)
    if device is None:
        raise HTTPException(status_code=404, detail=f"Device {body.device_id} not found")
    room, _ = assignment.add_instance(room, device)
    saved = await repo.save_room(room)
    await session.commit()
    await publish_changes(session, "rooms")
    return saved


@router.patch("/{room_id}/devices/{instance_id}", response_model=Room)
async def update_instance(
    room_id: str,
    instance_id: str,
    body: InstanceUpdate,
    session: AsyncSession = Depends(get_db),
) -> Room:
    """Rename a placed device or toggle its owned flag.

    Checking "owned" fails with 409 when every owned unit is in use.
    """
    repo = RoomRepository(session)
    room = await repo.require_room(room_id)
    if body.custom_name is not None:
        room = assignment.rename_instance(room, instance_id, body.custom_name)
    if body.is_owned is not None:
        ledger = await repo.ledger(draft=room)
        room = assignment.set_owned(room, instance_id, body.is_owned, ledger)
    saved = await repo.save_room(room)
    await session.commit()
    await publish_changes(session, "rooms")
    return saved


@router.delete("/{room_id}/devices/{instance_id}", response_model=Room)
async def remove_instance(
    room_id: str,
    instance_id: str,
    session: AsyncSession = Depends(get_db),
) -> Room:
    repo = RoomRepository(session)
    room = assignment.remove_instance(await repo.require_room(room_id), instance_id)
    saved = await repo.save_room(room)
    await session.commit()
    await publish_changes(session, "rooms")
    return saved


@router.post("/{room_id}/apply-template", response_model=Room)
async def apply_template(
    room_id: str,
    body: ApplyTemplateRequest,
    session: AsyncSession = Depends(get_db),
) -> Room:
    """Append copies of a template's devices with fresh instance ids."""
    repo = RoomRepository(session)
    room = await repo.require_room(room_id)
    template = await RoomTemplateRepository(session).require_template(body.template_id)
    saved = await repo.save_room(assignment.apply_template(room, template), check_quota=False)
    await session.commit()
    await publish_changes(session, "rooms")
    return saved


@router.post("/{room_id}/save-as-template", response_model=RoomTemplate, status_code=201)
async def save_as_template(
    room_id: str,
    body: SaveTemplateRequest,
    session: AsyncSession = Depends(get_db),
) -> RoomTemplate:
    """Store the room's device configuration as a reusable template."""
    room = await RoomRepository(session).require_room(room_id)
    template = assignment.template_from_room(room, body.name)
    created = await RoomTemplateRepository(session).create_template(template)
    await session.commit()
    await publish_changes(session, "room_templates")
    return created
