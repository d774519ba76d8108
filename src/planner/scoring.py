"""Device scoring.

Maps a device's categorical ratings to a single score in [0, 10],
rounded to one decimal. Each category keeps its own formula:

- Sensors use a 3/2/1 point scale normalised against a maximum.
- Switches, lighting and other devices average 0/5/10 points together
  with a Home Assistant compatibility term.
- Voice assistants drop the connectivity term and, when they act as a
  gateway, add a protocol-coverage term.
- Gateways are scored like gateway-capable assistants.

The two point scales are independent and must not be unified.
"""

import math
from collections.abc import Iterable

from .enums import Connectivity, Evaluation
from .models import (
    BaseDevice,
    Gateway,
    Lighting,
    OtherDevice,
    Sensor,
    Specification,
    Switch,
    VoiceAssistant,
)

EVALUATION_POINTS: dict[Evaluation, float] = {
    Evaluation.GOOD: 10.0,
    Evaluation.MEDIUM: 5.0,
    Evaluation.BAD: 0.0,
}

CONNECTIVITY_POINTS: dict[Connectivity, float] = {
    Connectivity.MATTER: 10.0,
    Connectivity.ZIGBEE: 10.0,
    Connectivity.TUYA: 5.0,
    Connectivity.OTHER_APP: 0.0,
    Connectivity.BLUETOOTH: 0.0,
}

SENSOR_EVALUATION_POINTS: dict[Evaluation, int] = {
    Evaluation.GOOD: 3,
    Evaluation.MEDIUM: 2,
    Evaluation.BAD: 1,
}

SENSOR_CONNECTIVITY_POINTS: dict[Connectivity, int] = {
    Connectivity.MATTER: 3,
    Connectivity.ZIGBEE: 3,
    Connectivity.TUYA: 2,
    Connectivity.OTHER_APP: 1,
    Connectivity.BLUETOOTH: 1,
}

SENSOR_MAX_POINTS_PER_ITEM = 3
PROTOCOL_POINTS_PER_PROTOCOL = 3.4
MAX_POINTS = 10.0


def round_score(value: float) -> float:
    """Round half-up to one decimal place."""
    return math.floor(value * 10 + 0.5) / 10


def evaluation_to_points(evaluation: Evaluation | str) -> float:
    """Convert an evaluation to the 0/5/10 scale."""
    return EVALUATION_POINTS[Evaluation(evaluation)]


def ha_compatibility_points(rating: int) -> float:
    """Map a 1-5 Home Assistant rating linearly onto 0-10."""
    return (rating - 1) * 2.5


def protocol_coverage_points(protocol_count: int) -> float:
    if protocol_count <= 0:
        return 0.0
    return min(protocol_count * PROTOCOL_POINTS_PER_PROTOCOL, MAX_POINTS)


def _mean_score(points: list[float]) -> float:
    if not points:
        return 0.0
    return round_score(sum(points) / len(points))


def sensor_score(
    specs: Iterable[Specification],
    price_evaluation: Evaluation | str,
    connectivity: Connectivity | str,
) -> float:
    """Score a sensor on the 3/2/1 scale.

    Args:
        specs: Rated spec lines
        price_evaluation: Price rating
        connectivity: Sensor protocol

    Returns:
        Score in [0, 10] rounded to one decimal
    """
    specs = list(specs)
    spec_points = sum(SENSOR_EVALUATION_POINTS[Evaluation(s.evaluation)] for s in specs)
    price_points = SENSOR_EVALUATION_POINTS[Evaluation(price_evaluation)]
    connectivity_points = SENSOR_CONNECTIVITY_POINTS[Connectivity(connectivity)]

    total_points = spec_points + price_points + connectivity_points
    max_points = len(specs) * SENSOR_MAX_POINTS_PER_ITEM + SENSOR_MAX_POINTS_PER_ITEM * 2
    if max_points == 0:
        return 0.0
    return round_score(total_points / max_points * 10)


def end_device_score(
    specs: Iterable[Specification],
    price_evaluation: Evaluation | str,
    connectivity: Connectivity | str,
    home_assistant_compatibility: int,
) -> float:
    """Score a switch, lighting fixture or other device.

    Averages one 0-10 value per spec, one for price, one for
    connectivity and one for Home Assistant compatibility.
    """
    points = [evaluation_to_points(s.evaluation) for s in specs]
    points.append(evaluation_to_points(price_evaluation))
    points.append(CONNECTIVITY_POINTS[Connectivity(connectivity)])
    points.append(ha_compatibility_points(home_assistant_compatibility))
    return _mean_score(points)


def voice_assistant_score(
    specs: Iterable[Specification],
    price_evaluation: Evaluation | str,
    home_assistant_compatibility: int,
    is_gateway: bool = False,
    gateway_protocols: Iterable[str] = (),
) -> float:
    """Score a voice assistant.

    Same as end devices without the connectivity term. A gateway-capable
    assistant gets one extra value for the number of bridged protocols.
    """
    points = [evaluation_to_points(s.evaluation) for s in specs]
    points.append(evaluation_to_points(price_evaluation))
    points.append(ha_compatibility_points(home_assistant_compatibility))
    if is_gateway:
        points.append(protocol_coverage_points(len(set(gateway_protocols))))
    return _mean_score(points)


def gateway_score(
    specs: Iterable[Specification],
    price_evaluation: Evaluation | str,
    home_assistant_compatibility: int,
    connectivity: Iterable[str],
) -> float:
    return voice_assistant_score(
        specs,
        price_evaluation,
        home_assistant_compatibility,
        is_gateway=True,
        gateway_protocols=connectivity,
    )


def score_device(device: BaseDevice) -> float:
    """Compute the score for any catalog device from its current fields."""
    if isinstance(device, Sensor):
        return sensor_score(device.specs, device.price_evaluation, device.connectivity)
    if isinstance(device, (Switch, Lighting, OtherDevice)):
        return end_device_score(
            device.specs,
            device.price_evaluation,
            device.connectivity,
            device.home_assistant_compatibility,
        )
    if isinstance(device, VoiceAssistant):
        return voice_assistant_score(
            device.specs,
            device.price_evaluation,
            device.home_assistant_compatibility,
            is_gateway=device.is_gateway,
            gateway_protocols=device.gateway_protocols,
        )
    if isinstance(device, Gateway):
        return gateway_score(
            device.specs,
            device.price_evaluation,
            device.home_assistant_compatibility,
            device.connectivity,
        )
    raise TypeError(f"Unsupported device type: {type(device).__name__}")


def with_score(device: BaseDevice) -> BaseDevice:
    """Return a copy of the device carrying its recomputed score."""
    return device.model_copy(update={"score": score_device(device)})
