"""Floor, room, room template and house config API schemas."""

from pydantic import BaseModel, Field

from src.planner.models import (
    Bounds,
    Floor,
    FloorLayout,
    PlacedDevice,
    Point,
    Room,
    RoomDeviceInstance,
    RoomTemplate,
)

# =============================================================================
# FLOORS
# =============================================================================


class FloorCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class FloorUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class FloorListResponse(BaseModel):
    items: list[Floor]
    total: int


class FloorDeleteResponse(BaseModel):
    """Result of deleting a floor together with its rooms."""

    floor_id: str
    deleted_room_ids: list[str]


class LayoutUpdate(BaseModel):
    """Full replacement of a floor's walls and device pins."""

    layout: FloorLayout


class WallCreate(BaseModel):
    """A wall drawn with the pointer; both ends are snapped server-side."""

    start: Point
    end: Point


class PointRequest(BaseModel):
    point: Point


class PlaceDeviceRequest(BaseModel):
    device_id: str
    point: Point
    icon: str | None = None
    icon_color: str | None = None


class PlaceDeviceResponse(BaseModel):
    floor: Floor
    placed: PlacedDevice
    room: Room | None = Field(default=None, description="Room the pin landed in, if any")


class DrawRoomRequest(BaseModel):
    """A room outline drawn on the floor plan."""

    name: str = Field(..., min_length=1, max_length=255)
    points: list[Point] = Field(..., min_length=3)


# =============================================================================
# ROOMS
# =============================================================================


class RoomCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    floor_id: str
    devices: list[RoomDeviceInstance] = Field(default_factory=list)
    polygon: list[Point] | None = None
    template_id: str | None = Field(default=None, description="Seed the room from a template")


class RoomUpdate(BaseModel):
    """Full room document; it replaces the stored one."""

    name: str = Field(..., min_length=1, max_length=255)
    floor_id: str
    devices: list[RoomDeviceInstance] = Field(default_factory=list)
    polygon: list[Point] | None = None
    bounds: Bounds | None = None


class RoomListResponse(BaseModel):
    items: list[Room]
    total: int


class AddDeviceRequest(BaseModel):
    device_id: str


class InstanceUpdate(BaseModel):
    """Change the display name or owned flag of a placed device."""

    custom_name: str | None = None
    is_owned: bool | None = None


class ApplyTemplateRequest(BaseModel):
    template_id: str


class SaveTemplateRequest(BaseModel):
    name: str | None = Field(default=None, description='Defaults to "<room name> Template"')


class InstanceOwnership(BaseModel):
    """Owned checkbox state for one placed device."""

    instance_id: str
    device_id: str
    is_owned: bool
    can_toggle: bool
    owned: int
    used: int


class RoomOwnershipResponse(BaseModel):
    room_id: str
    instances: list[InstanceOwnership]


# =============================================================================
# TEMPLATES & HOUSE
# =============================================================================


class RoomTemplateCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    devices: list[RoomDeviceInstance] = Field(default_factory=list)


class RoomTemplateListResponse(BaseModel):
    items: list[RoomTemplate]
    total: int


class HouseGatewaysUpdate(BaseModel):
    gateway_ids: list[str] = Field(default_factory=list)

