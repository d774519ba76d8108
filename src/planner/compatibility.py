"""Gateway/protocol compatibility.

Works out which protocols the house can service through its gateways
and flags room devices whose protocol needs a local gateway that the
house does not have.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from .enums import GATEWAY_REQUIRED_PROTOCOLS, Connectivity
from .models import (
    AssistantGateway,
    BaseDevice,
    DedicatedGateway,
    GatewayLike,
    HouseSnapshot,
    Room,
    VoiceAssistant,
    device_connectivity,
)


@dataclass
class RoomGatewayWarning:
    """Devices in one room that have no gateway for their protocol."""

    room_id: str
    room_name: str
    missing: dict[str, list[str]] = field(default_factory=dict)

    @property
    def device_count(self) -> int:
        return sum(len(names) for names in self.missing.values())


def assistant_gateways_in_rooms(
    rooms: Iterable[Room],
    devices: Mapping[str, BaseDevice],
) -> list[AssistantGateway]:
    """Gateway-capable voice assistants placed in at least one room.

    Returned in order of first appearance, each listed once.
    """
    found: dict[str, AssistantGateway] = {}
    for room in rooms:
        for instance in room.devices:
            device = devices.get(instance.device_id)
            if isinstance(device, VoiceAssistant) and device.is_gateway:
                found.setdefault(device.id, AssistantGateway(device))
    return list(found.values())


def active_gateways(snapshot: HouseSnapshot) -> list[GatewayLike]:
    """House-assigned gateways followed by gateway-capable assistants in rooms."""
    devices = snapshot.device_map
    hubs: dict[str, GatewayLike] = {}
    for gateway in snapshot.house_gateways():
        hubs.setdefault(gateway.id, DedicatedGateway(gateway))
    for assistant in assistant_gateways_in_rooms(snapshot.rooms, devices):
        hubs.setdefault(assistant.id, assistant)
    return list(hubs.values())


def house_gateway_protocols(snapshot: HouseSnapshot) -> set[str]:
    """Union of the protocol sets of every active gateway."""
    protocols: set[str] = set()
    for hub in active_gateways(snapshot):
        protocols.update(hub.protocols)
    return protocols


def display_name(custom_name: str, device: BaseDevice) -> str:
    return custom_name or device.name


def missing_gateways_for_room(
    room: Room,
    devices: Mapping[str, BaseDevice],
    covered: set[str],
) -> RoomGatewayWarning:
    """Group a room's uncovered zigbee/matter devices by protocol.

    Instances whose base device is missing from the catalog are skipped.
    """
    warning = RoomGatewayWarning(room_id=room.id, room_name=room.name)
    for instance in room.devices:
        device = devices.get(instance.device_id)
        if device is None:
            continue
        protocol = device_connectivity(device)
        if protocol is None or protocol not in GATEWAY_REQUIRED_PROTOCOLS:
            continue
        if protocol in covered:
            continue
        warning.missing.setdefault(Connectivity(protocol).value, []).append(
            display_name(instance.custom_name, device)
        )
    return warning


def missing_gateway_report(snapshot: HouseSnapshot) -> dict[str, RoomGatewayWarning]:
    """Per-room warnings keyed by room id; rooms without problems are omitted."""
    covered = house_gateway_protocols(snapshot)
    devices = snapshot.device_map
    report: dict[str, RoomGatewayWarning] = {}
    for room in snapshot.rooms:
        warning = missing_gateways_for_room(room, devices, covered)
        if warning.missing:
            report[room.id] = warning
    return report
