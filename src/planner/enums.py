"""Enums for catalog devices and the house planner."""

from enum import StrEnum


class Evaluation(StrEnum):
    """Three-level rating used for specs and price."""

    GOOD = "good"
    MEDIUM = "medium"
    BAD = "bad"


class Connectivity(StrEnum):
    """Communication protocol of an end device."""

    MATTER = "matter"
    ZIGBEE = "zigbee"
    TUYA = "tuya"
    OTHER_APP = "other_app"
    BLUETOOTH = "bluetooth"


class GatewayConnectivity(StrEnum):
    """Protocols a gateway (or gateway-capable assistant) can bridge."""

    MATTER = "matter"
    ZIGBEE = "zigbee"
    BLUETOOTH = "bluetooth"
    TUYA = "tuya"


class DeviceCategory(StrEnum):
    """Catalog device categories."""

    SENSOR = "sensor"
    SWITCH = "switch"
    LIGHTING = "lighting"
    OTHER_DEVICE = "other-device"
    VOICE_ASSISTANT = "voice-assistant"
    GATEWAY = "gateway"


class SwitchType(StrEnum):
    """Mounting style of a switch."""

    WALL = "wall"
    IN_WALL = "in-wall"


# Store collection name for every device category
CATEGORY_COLLECTIONS: dict[DeviceCategory, str] = {
    DeviceCategory.SENSOR: "sensors",
    DeviceCategory.SWITCH: "switches",
    DeviceCategory.LIGHTING: "lighting",
    DeviceCategory.OTHER_DEVICE: "other_devices",
    DeviceCategory.VOICE_ASSISTANT: "voice_assistants",
    DeviceCategory.GATEWAY: "gateways",
}

COLLECTION_CATEGORIES: dict[str, DeviceCategory] = {
    collection: category for category, collection in CATEGORY_COLLECTIONS.items()
}

# Protocols that cannot reach the house without a local gateway
GATEWAY_REQUIRED_PROTOCOLS: frozenset[Connectivity] = frozenset(
    {Connectivity.ZIGBEE, Connectivity.MATTER}
)
