"""Unit tests for floor plan geometry."""

import pytest

from src.exceptions import ValidationError
from src.planner.floor_plan import (
    add_wall,
    closes_polygon,
    constrain_wall_end,
    delete_wall_at,
    find_closest_wall,
    find_snap_point,
    move_placed_device,
    place_device,
    remove_placed_device,
    room_at_point,
    room_outline,
    snap_to_grid,
)
from src.planner.models import FloorLayout, Point, Wall
from tests.factories import FloorFactory, RoomFactory, SensorFactory

SQUARE = [Point(x=0, y=0), Point(x=100, y=0), Point(x=100, y=100), Point(x=0, y=100)]


@pytest.fixture
def walls():
    return [
        Wall(id="w-1", start=Point(x=0, y=0), end=Point(x=100, y=0)),
        Wall(id="w-2", start=Point(x=100, y=0), end=Point(x=100, y=100)),
    ]


class TestSnapping:
    def test_snap_to_grid(self):
        assert snap_to_grid(Point(x=29, y=11)) == Point(x=20, y=20)

    def test_endpoint_beats_grid(self, walls):
        assert find_snap_point(Point(x=104, y=3), walls) == Point(x=100, y=0)

    def test_outside_threshold_snaps_to_grid(self, walls):
        assert find_snap_point(Point(x=52, y=47), walls) == Point(x=60, y=40)

    def test_skip_grid_keeps_point(self, walls):
        assert find_snap_point(Point(x=52, y=47), walls, skip_grid=True) == Point(x=52, y=47)

    def test_constrain_horizontal(self):
        end = constrain_wall_end(Point(x=0, y=0), Point(x=95, y=18), [])
        assert end == Point(x=100, y=0)

    def test_constrain_vertical(self):
        end = constrain_wall_end(Point(x=0, y=0), Point(x=12, y=77), [])
        assert end == Point(x=0, y=80)

    def test_constrain_prefers_endpoint(self, walls):
        end = constrain_wall_end(Point(x=0, y=100), Point(x=97, y=96), walls)
        assert end == Point(x=100, y=100)


class TestWalls:
    def test_add_wall(self):
        layout = add_wall(FloorLayout(), Point(x=0, y=0), Point(x=0, y=40))
        assert len(layout.walls) == 1

    def test_zero_length_wall_ignored(self):
        layout = FloorLayout()
        assert add_wall(layout, Point(x=5, y=5), Point(x=5, y=5)) is layout

    def test_closest_wall(self, walls):
        assert find_closest_wall(Point(x=50, y=8), walls).id == "w-1"
        assert find_closest_wall(Point(x=95, y=60), walls).id == "w-2"
        assert find_closest_wall(Point(x=50, y=50), walls) is None

    def test_delete_wall_at(self, walls):
        layout = delete_wall_at(FloorLayout(walls=walls), Point(x=50, y=2))
        assert [w.id for w in layout.walls] == ["w-2"]


class TestRoomOutline:
    def test_valid_square(self):
        points, bounds = room_outline(SQUARE)
        assert points == SQUARE
        assert (bounds.x, bounds.y, bounds.width, bounds.height) == (0, 0, 100, 100)

    def test_too_few_points(self):
        with pytest.raises(ValidationError):
            room_outline(SQUARE[:2])

    def test_self_intersecting(self):
        bowtie = [SQUARE[0], SQUARE[2], SQUARE[1], SQUARE[3]]
        with pytest.raises(ValidationError):
            room_outline(bowtie)

    def test_collinear_points(self):
        line = [Point(x=0, y=0), Point(x=50, y=0), Point(x=100, y=0)]
        with pytest.raises(ValidationError):
            room_outline(line)

    def test_closes_polygon(self):
        assert closes_polygon(SQUARE[:3], Point(x=3, y=4))
        assert not closes_polygon(SQUARE[:2], Point(x=0, y=0))
        assert not closes_polygon(SQUARE[:3], Point(x=30, y=30))


class TestPlaceDevice:
    @pytest.fixture
    def floor(self):
        return FloorFactory()

    @pytest.fixture
    def room(self, floor):
        return RoomFactory(floor_id=floor.id, polygon=SQUARE)

    def test_room_at_point(self, room):
        assert room_at_point(Point(x=50, y=50), [room]) == room
        assert room_at_point(Point(x=150, y=50), [room]) is None

    def test_room_without_outline_never_matches(self):
        assert room_at_point(Point(x=1, y=1), [RoomFactory()]) is None

    def test_pin_inside_room_adds_instance(self, floor, room):
        sensor = SensorFactory(name="Motion")
        updated_floor, updated_room, pin = place_device(floor, [room], sensor, Point(x=40, y=60))

        assert updated_floor.layout.placed_devices == [pin]
        assert updated_room is not None
        assert updated_room.devices[-1].instance_id == pin.instance_id
        assert updated_room.devices[-1].custom_name == "Motion"

    def test_pin_outside_rooms(self, floor, room):
        _, updated_room, pin = place_device(floor, [room], SensorFactory(), Point(x=300, y=300))
        assert updated_room is None
        assert (pin.x, pin.y) == (300, 300)

    def test_rooms_on_other_floors_ignored(self, floor):
        elsewhere = RoomFactory(polygon=SQUARE)
        _, updated_room, _ = place_device(floor, [elsewhere], SensorFactory(), Point(x=50, y=50))
        assert updated_room is None

    def test_move_and_remove_pin(self, floor, room):
        updated_floor, _, pin = place_device(
            floor, [room], SensorFactory(), Point(x=10, y=10), icon="motion", icon_color="#ff0000"
        )
        layout = move_placed_device(updated_floor.layout, pin.instance_id, Point(x=70, y=20))

        assert (layout.placed_devices[0].x, layout.placed_devices[0].y) == (70, 20)
        assert layout.placed_devices[0].icon == "motion"
        assert remove_placed_device(layout, pin.instance_id).placed_devices == []
