"""Connectivity topology view.

Builds a three-layer graph for the mind-map view: a root hub node, a
middle layer of protocol hubs (gateways, gateway-capable assistants and
synthetic cloud/local integration nodes) and room nodes. Node positions
are a presentation concern and are not computed here.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

import networkx as nx
from pydantic import BaseModel, Field

from .compatibility import active_gateways
from .enums import Connectivity
from .models import GatewayLike, HouseSnapshot, as_gateway, device_connectivity

logger = logging.getLogger(__name__)

ROOT_NODE_ID = "home_assistant"
ROOT_NODE_NAME = "Home Assistant"

# Synthetic hub for every protocol that does not route through a gateway
SYNTHETIC_HUBS: dict[Connectivity, tuple[str, str]] = {
    Connectivity.TUYA: ("cloud_tuya", "Tuya Cloud"),
    Connectivity.OTHER_APP: ("local_other_app", "Local integration"),
    Connectivity.BLUETOOTH: ("local_bluetooth", "Bluetooth"),
}

# Protocols that stop working without internet access
CLOUD_PROTOCOLS: frozenset[Connectivity] = frozenset({Connectivity.TUYA, Connectivity.OTHER_APP})

PROTOCOL_COLORS: dict[str, str] = {
    "matter": "hsl(var(--chart-1))",
    "zigbee": "hsl(var(--chart-2))",
    "tuya": "hsl(var(--chart-3))",
    "other_app": "hsl(var(--chart-4))",
    "bluetooth": "hsl(var(--chart-5))",
}
DEFAULT_EDGE_COLOR = "gray"
ROOT_EDGE_COLOR = "hsl(var(--muted-foreground))"


class TopologyNode(BaseModel):
    id: str
    kind: str = Field(..., description="root, gateway, voice-assistant, synthetic or room")
    name: str
    protocols: list[str] = Field(default_factory=list)
    floor_id: str | None = None
    hidden: bool = False
    devices: list[str] = Field(default_factory=list, description="Display names; empty when collapsed")


class TopologyEdge(BaseModel):
    source: str
    target: str
    protocol: str | None = None
    color: str


class TopologyView(BaseModel):
    nodes: list[TopologyNode]
    edges: list[TopologyEdge]


def _synthetic_protocols(snapshot: HouseSnapshot) -> list[Connectivity]:
    devices = snapshot.device_map
    used: set[Connectivity] = set()
    for room in snapshot.rooms:
        for instance in room.devices:
            protocol = device_connectivity(devices.get(instance.device_id))
            if protocol is not None:
                used.add(Connectivity(protocol))
    return [protocol for protocol in SYNTHETIC_HUBS if protocol in used]


def _room_local_hubs(room_devices: Iterable, devices: dict, hub_ids: set[str]) -> dict[str, str]:
    """Protocol -> hub id for gateway-like devices placed in the room itself."""
    local: dict[str, str] = {}
    for instance in room_devices:
        hub = as_gateway(devices.get(instance.device_id))
        if hub is None or hub.id not in hub_ids:
            continue
        for protocol in hub.protocols:
            local[str(protocol)] = hub.id
    return local


def _gateway_target(protocol: str, local: dict[str, str], hubs: list[GatewayLike]) -> str | None:
    if protocol in local:
        return local[protocol]
    for hub in hubs:
        if protocol in hub.protocols:
            return hub.id
    return None


def build_topology(
    snapshot: HouseSnapshot,
    hidden_room_ids: Iterable[str] = (),
    *,
    internet_offline: bool = False,
) -> nx.MultiDiGraph:
    """Build the connectivity graph.

    Args:
        snapshot: Current store snapshot
        hidden_room_ids: Rooms toggled hidden; they contribute no edges
        internet_offline: Drop edges that depend on cloud services

    Returns:
        MultiDiGraph keyed by protocol so one room may reach the same hub
        over several protocols
    """
    hidden = set(hidden_room_ids)
    devices = snapshot.device_map
    graph = nx.MultiDiGraph()
    graph.add_node(ROOT_NODE_ID, kind="root", name=ROOT_NODE_NAME, protocols=[])

    hubs = active_gateways(snapshot)
    for hub in hubs:
        graph.add_node(hub.id, kind=hub.kind, name=hub.name, protocols=[str(p) for p in hub.protocols])

    for protocol in _synthetic_protocols(snapshot):
        node_id, name = SYNTHETIC_HUBS[protocol]
        if node_id not in graph:
            graph.add_node(node_id, kind="synthetic", name=name, protocols=[protocol.value])

    middle_nodes = [n for n, kind in graph.nodes(data="kind") if kind != "root"]
    for node_id in middle_nodes:
        node = graph.nodes[node_id]
        if internet_offline and node["kind"] == "synthetic" and any(
            p in CLOUD_PROTOCOLS for p in node["protocols"]
        ):
            continue
        graph.add_edge(node_id, ROOT_NODE_ID, protocol=None, color=ROOT_EDGE_COLOR)

    hub_ids = {hub.id for hub in hubs}
    for room in snapshot.rooms:
        is_hidden = room.id in hidden
        names = []
        for instance in room.devices:
            device = devices.get(instance.device_id)
            if device is not None:
                names.append(instance.custom_name or device.name)
        graph.add_node(
            room.id,
            kind="room",
            name=room.name,
            protocols=[],
            floor_id=room.floor_id,
            hidden=is_hidden,
            devices=[] if is_hidden else names,
        )
        if is_hidden:
            continue

        local = _room_local_hubs(room.devices, devices, hub_ids)
        targets: dict[str, str] = {}
        for instance in room.devices:
            device = devices.get(instance.device_id)
            if device is None or as_gateway(device) is not None:
                continue
            protocol = device_connectivity(device)
            if protocol is None:
                continue
            protocol = Connectivity(protocol)
            if protocol in SYNTHETIC_HUBS:
                target = SYNTHETIC_HUBS[protocol][0]
            else:
                target = _gateway_target(protocol.value, local, hubs)
            if target is not None:
                targets[protocol.value] = target

        for protocol, target in targets.items():
            if internet_offline and Connectivity(protocol) in CLOUD_PROTOCOLS:
                continue
            graph.add_edge(
                room.id,
                target,
                key=protocol,
                protocol=protocol,
                color=PROTOCOL_COLORS.get(protocol, DEFAULT_EDGE_COLOR),
            )
        graph.nodes[room.id]["protocols"] = list(targets)

    logger.debug(
        "Topology: %d node(s), %d edge(s)", graph.number_of_nodes(), graph.number_of_edges()
    )
    return graph


def to_view(graph: nx.MultiDiGraph) -> TopologyView:
    """Serialize the graph for rendering."""
    nodes = [TopologyNode(id=node_id, **data) for node_id, data in graph.nodes(data=True)]
    edges = [
        TopologyEdge(source=source, target=target, protocol=data["protocol"], color=data["color"])
        for source, target, data in graph.edges(data=True)
    ]
    return TopologyView(nodes=nodes, edges=edges)
