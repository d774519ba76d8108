"""Floor plan editing geometry.

Walls are drawn on a snapping grid, wall ends snap to existing wall
endpoints, rooms are closed polygons and device pins dropped inside a
room polygon are also assigned to that room.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

from shapely.geometry import LineString
from shapely.geometry import Point as ShapelyPoint
from shapely.geometry import Polygon

from src.exceptions import ValidationError

from .assignment import new_instance
from .models import (
    BaseDevice,
    Bounds,
    Floor,
    FloorLayout,
    PlacedDevice,
    Point,
    Room,
    RoomDeviceInstance,
    Wall,
)

GRID_SIZE = 20
SNAP_THRESHOLD = 10.0
WALL_HIT_THRESHOLD = 15.0


def _distance(a: Point, b: Point) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


def snap_to_grid(point: Point, grid_size: int = GRID_SIZE) -> Point:
    return Point(
        x=round(point.x / grid_size) * grid_size,
        y=round(point.y / grid_size) * grid_size,
    )


def nearest_wall_endpoint(
    point: Point,
    walls: Iterable[Wall],
    threshold: float = SNAP_THRESHOLD,
) -> Point | None:
    """Closest wall endpoint strictly within the threshold, if any."""
    closest: Point | None = None
    best = threshold
    for wall in walls:
        for endpoint in (wall.start, wall.end):
            distance = _distance(point, endpoint)
            if distance < best:
                best = distance
                closest = endpoint
    return closest


def find_snap_point(
    point: Point,
    walls: Iterable[Wall],
    *,
    threshold: float = SNAP_THRESHOLD,
    grid_size: int = GRID_SIZE,
    skip_grid: bool = False,
) -> Point:
    """Snap to a nearby wall endpoint, else to the grid (unless skipped)."""
    endpoint = nearest_wall_endpoint(point, walls, threshold)
    if endpoint is not None:
        return endpoint
    if skip_grid:
        return point
    return snap_to_grid(point, grid_size)


def constrain_wall_end(
    start: Point,
    pointer: Point,
    walls: Iterable[Wall],
    *,
    threshold: float = SNAP_THRESHOLD,
    grid_size: int = GRID_SIZE,
) -> Point:
    """End point for a wall being drawn from ``start``.

    Snaps to an existing endpoint when close enough; otherwise the wall is
    kept horizontal or vertical along its dominant axis on the grid.
    """
    endpoint = nearest_wall_endpoint(pointer, walls, threshold)
    if endpoint is not None:
        return endpoint
    grid_point = snap_to_grid(pointer, grid_size)
    if abs(grid_point.x - start.x) > abs(grid_point.y - start.y):
        return Point(x=grid_point.x, y=start.y)
    return Point(x=start.x, y=grid_point.y)


def add_wall(layout: FloorLayout, start: Point, end: Point) -> FloorLayout:
    """Append a wall; zero-length walls are ignored."""
    if _distance(start, end) == 0:
        return layout
    wall = Wall(start=start, end=end)
    return layout.model_copy(update={"walls": [*layout.walls, wall]})


def find_closest_wall(
    point: Point,
    walls: Iterable[Wall],
    threshold: float = WALL_HIT_THRESHOLD,
) -> Wall | None:
    """Wall whose segment passes closest to the point, within the threshold."""
    target = ShapelyPoint(point.x, point.y)
    closest: Wall | None = None
    best = threshold
    for wall in walls:
        if _distance(wall.start, wall.end) == 0:
            distance = target.distance(ShapelyPoint(wall.start.x, wall.start.y))
        else:
            segment = LineString([(wall.start.x, wall.start.y), (wall.end.x, wall.end.y)])
            distance = segment.distance(target)
        if distance < best:
            best = distance
            closest = wall
    return closest


def delete_wall_at(
    layout: FloorLayout,
    point: Point,
    threshold: float = WALL_HIT_THRESHOLD,
) -> FloorLayout:
    wall = find_closest_wall(point, layout.walls, threshold)
    if wall is None:
        return layout
    return layout.model_copy(update={"walls": [w for w in layout.walls if w.id != wall.id]})


def closes_polygon(
    points: Sequence[Point],
    candidate: Point,
    threshold: float = SNAP_THRESHOLD,
) -> bool:
    """Whether clicking ``candidate`` closes a polygon of at least three points."""
    return len(points) > 2 and _distance(candidate, points[0]) < threshold


def polygon_bounds(points: Sequence[Point]) -> Bounds:
    if not points:
        raise ValidationError("A room outline needs at least one point")
    xs = [p.x for p in points]
    ys = [p.y for p in points]
    return Bounds(x=min(xs), y=min(ys), width=max(xs) - min(xs), height=max(ys) - min(ys))


def room_outline(points: Sequence[Point]) -> tuple[list[Point], Bounds]:
    """Validate a drawn room outline and compute its bounding box.

    Raises:
        ValidationError: If the outline is not a valid polygon
    """
    if len(points) < 3:
        raise ValidationError("A room outline needs at least three points")
    polygon = Polygon([(p.x, p.y) for p in points])
    if not polygon.is_valid or polygon.area == 0:
        raise ValidationError("Room outline must be a simple polygon with a non-zero area")
    return list(points), polygon_bounds(points)


def room_at_point(point: Point, rooms: Iterable[Room]) -> Room | None:
    """First room whose outline contains the point."""
    target = ShapelyPoint(point.x, point.y)
    for room in rooms:
        if not room.polygon or len(room.polygon) < 3:
            continue
        if Polygon([(p.x, p.y) for p in room.polygon]).contains(target):
            return room
    return None


def place_device(
    floor: Floor,
    rooms: Iterable[Room],
    device: BaseDevice,
    point: Point,
    *,
    icon: str | None = None,
    icon_color: str | None = None,
) -> tuple[Floor, Room | None, PlacedDevice]:
    """Drop a device pin on the plan.

    When the pin lands inside a room outline on this floor, the device is
    also added to that room, sharing the pin's instance id.

    Returns:
        Tuple of (updated floor, updated room or None, new pin)
    """
    floor_rooms = [room for room in rooms if room.floor_id == floor.id]
    instance: RoomDeviceInstance = new_instance(device)
    pin = PlacedDevice(
        instance_id=instance.instance_id,
        device_id=device.id,
        x=point.x,
        y=point.y,
        icon=icon,
        icon_color=icon_color,
    )
    layout = floor.layout.model_copy(
        update={"placed_devices": [*floor.layout.placed_devices, pin]}
    )
    updated_floor = floor.model_copy(update={"layout": layout})

    room = room_at_point(point, floor_rooms)
    if room is not None:
        room = room.model_copy(update={"devices": [*room.devices, instance]})
    return updated_floor, room, pin


def move_placed_device(layout: FloorLayout, instance_id: str, point: Point) -> FloorLayout:
    pins = [
        pin.model_copy(update={"x": point.x, "y": point.y}) if pin.instance_id == instance_id else pin
        for pin in layout.placed_devices
    ]
    return layout.model_copy(update={"placed_devices": pins})


def remove_placed_device(layout: FloorLayout, instance_id: str) -> FloorLayout:
    pins = [pin for pin in layout.placed_devices if pin.instance_id != instance_id]
    return layout.model_copy(update={"placed_devices": pins})
