"""Domain models for the device catalog and the house planner.

These are the whole-document shapes delivered by the record store.
Every aggregation in this package consumes them as an immutable
snapshot; none of them are mutated in place by the engines.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Annotated, Literal, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import (
    Connectivity,
    DeviceCategory,
    Evaluation,
    GatewayConnectivity,
    SwitchType,
)


def new_id() -> str:
    """Generate a fresh identifier for specs, walls and device instances."""
    return str(uuid4())


def _unique(values: list) -> list:
    """Drop duplicates while keeping first-seen order."""
    return list(dict.fromkeys(values))


# =============================================================================
# CATALOG DEVICES
# =============================================================================


class Specification(BaseModel):
    """A single rated spec line on a device card."""

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1)
    value: str = Field(..., min_length=1)
    evaluation: Evaluation


class BaseDevice(BaseModel):
    """Capabilities shared by every catalog device."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=2)
    brand: str = ""
    link: str | None = None
    price: float = Field(default=0.0, ge=0)
    price_evaluation: Evaluation = Evaluation.MEDIUM
    home_assistant_compatibility: int = Field(default=5, ge=1, le=5)
    tags: list[str] = Field(default_factory=list)
    specs: list[Specification] = Field(default_factory=list)
    quantity: int = Field(default=0, ge=0, description="Units the user already owns")
    score: float = Field(default=0.0, ge=0, le=10)
    created_at: datetime | None = None

    @field_validator("tags")
    @classmethod
    def _dedupe_tags(cls, tags: list[str]) -> list[str]:
        return _unique([t.strip() for t in tags if t.strip()])


class Sensor(BaseDevice):
    category: Literal["sensor"] = "sensor"
    connectivity: Connectivity = Connectivity.ZIGBEE


class Switch(BaseDevice):
    category: Literal["switch"] = "switch"
    connectivity: Connectivity = Connectivity.ZIGBEE
    switch_type: SwitchType = SwitchType.WALL


class Lighting(BaseDevice):
    category: Literal["lighting"] = "lighting"
    connectivity: Connectivity = Connectivity.ZIGBEE


class OtherDevice(BaseDevice):
    category: Literal["other-device"] = "other-device"
    connectivity: Connectivity = Connectivity.ZIGBEE


class VoiceAssistant(BaseDevice):
    category: Literal["voice-assistant"] = "voice-assistant"
    is_gateway: bool = False
    gateway_protocols: list[GatewayConnectivity] = Field(default_factory=list)

    @field_validator("gateway_protocols")
    @classmethod
    def _dedupe_protocols(cls, protocols: list[GatewayConnectivity]) -> list[GatewayConnectivity]:
        return _unique(protocols)


class Gateway(BaseDevice):
    category: Literal["gateway"] = "gateway"
    connectivity: list[GatewayConnectivity] = Field(default_factory=list)

    @field_validator("connectivity")
    @classmethod
    def _dedupe_protocols(cls, protocols: list[GatewayConnectivity]) -> list[GatewayConnectivity]:
        return _unique(protocols)


Device = Annotated[
    Union[Sensor, Switch, Lighting, OtherDevice, VoiceAssistant, Gateway],
    Field(discriminator="category"),
]


DEVICE_MODELS: dict[DeviceCategory, type[BaseDevice]] = {
    DeviceCategory.SENSOR: Sensor,
    DeviceCategory.SWITCH: Switch,
    DeviceCategory.LIGHTING: Lighting,
    DeviceCategory.OTHER_DEVICE: OtherDevice,
    DeviceCategory.VOICE_ASSISTANT: VoiceAssistant,
    DeviceCategory.GATEWAY: Gateway,
}


def device_connectivity(device: BaseDevice) -> Connectivity | None:
    """Return the single end-device protocol, or None for gateways and assistants."""
    if isinstance(device, (Sensor, Switch, Lighting, OtherDevice)):
        return device.connectivity
    return None


# =============================================================================
# GATEWAY-LIKE VARIANT
# =============================================================================


@dataclass(frozen=True)
class DedicatedGateway:
    """A catalog gateway acting as a protocol hub."""

    device: Gateway
    kind: Literal["gateway"] = "gateway"

    @property
    def id(self) -> str:
        return self.device.id

    @property
    def name(self) -> str:
        return self.device.name

    @property
    def protocols(self) -> tuple[GatewayConnectivity, ...]:
        return tuple(self.device.connectivity)


@dataclass(frozen=True)
class AssistantGateway:
    """A voice assistant that also bridges short-range protocols."""

    device: VoiceAssistant
    kind: Literal["voice-assistant"] = "voice-assistant"

    @property
    def id(self) -> str:
        return self.device.id

    @property
    def name(self) -> str:
        return self.device.name

    @property
    def protocols(self) -> tuple[GatewayConnectivity, ...]:
        return tuple(self.device.gateway_protocols)


GatewayLike = Union[DedicatedGateway, AssistantGateway]


def as_gateway(device: BaseDevice | None) -> GatewayLike | None:
    """Wrap a device as a protocol hub if it can act as one."""
    if isinstance(device, Gateway):
        return DedicatedGateway(device)
    if isinstance(device, VoiceAssistant) and device.is_gateway:
        return AssistantGateway(device)
    return None


# =============================================================================
# HOUSE STRUCTURE
# =============================================================================


class Point(BaseModel):
    x: float
    y: float


class Wall(BaseModel):
    """A line segment in a floor's 2D plan."""

    id: str = Field(default_factory=new_id)
    start: Point
    end: Point


class PlacedDevice(BaseModel):
    """A device pin placed on a floor plan."""

    instance_id: str = Field(default_factory=new_id)
    device_id: str
    x: float
    y: float
    icon: str | None = None
    icon_color: str | None = None


class FloorLayout(BaseModel):
    walls: list[Wall] = Field(default_factory=list)
    placed_devices: list[PlacedDevice] = Field(default_factory=list)


class Floor(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1)
    layout: FloorLayout = Field(default_factory=FloorLayout)
    created_at: datetime | None = None


class RoomDeviceInstance(BaseModel):
    """A placement of a base device inside a specific room."""

    instance_id: str = Field(default_factory=new_id)
    device_id: str
    custom_name: str = ""
    is_owned: bool = False


class Bounds(BaseModel):
    x: float
    y: float
    width: float
    height: float


class Room(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1)
    floor_id: str
    devices: list[RoomDeviceInstance] = Field(default_factory=list)
    polygon: list[Point] | None = None
    bounds: Bounds | None = None
    created_at: datetime | None = None


class RoomTemplate(BaseModel):
    """A reusable preset of device entries copied into new rooms."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1)
    devices: list[RoomDeviceInstance] = Field(default_factory=list)
    created_at: datetime | None = None


class HouseConfig(BaseModel):
    """House-level gateway assignment (singleton document)."""

    model_config = ConfigDict(from_attributes=True)

    id: str = "main"
    gateway_ids: list[str] = Field(default_factory=list)

    @field_validator("gateway_ids")
    @classmethod
    def _dedupe_ids(cls, gateway_ids: list[str]) -> list[str]:
        return _unique(gateway_ids)


# =============================================================================
# SNAPSHOT
# =============================================================================


@dataclass
class HouseSnapshot:
    """The latest full result sets of every collection.

    Aggregations are pure consumers of one snapshot; they never see a
    partially applied write because the store delivers whole documents.
    """

    devices: list[BaseDevice] = field(default_factory=list)
    floors: list[Floor] = field(default_factory=list)
    rooms: list[Room] = field(default_factory=list)
    templates: list[RoomTemplate] = field(default_factory=list)
    house_config: HouseConfig = field(default_factory=HouseConfig)

    @property
    def device_map(self) -> dict[str, BaseDevice]:
        return {device.id: device for device in self.devices}

    def house_gateways(self) -> list[Gateway]:
        """Gateways assigned at house level, skipping dangling ids."""
        devices = self.device_map
        return [
            device
            for gateway_id in self.house_config.gateway_ids
            if isinstance(device := devices.get(gateway_id), Gateway)
        ]
