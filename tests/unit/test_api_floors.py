"""Unit tests for floor and floor plan API routes."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

from src.planner.models import FloorLayout, PlacedDevice, Point, Wall
from tests.factories import FloorFactory, RoomFactory, SensorFactory
from tests.helpers.api import make_test_app

SQUARE = [{"x": 0, "y": 0}, {"x": 100, "y": 0}, {"x": 100, "y": 100}, {"x": 0, "y": 100}]


@pytest.fixture
async def floor_client():
    from src.api.routes.floors import router

    async with AsyncClient(
        transport=ASGITransport(app=make_test_app(router)),
        base_url="http://test",
    ) as client:
        yield client


@pytest.fixture
def floor():
    return FloorFactory(
        name="Ground",
        layout=FloorLayout(
            walls=[Wall(id="w-1", start=Point(x=0, y=0), end=Point(x=100, y=0))],
            placed_devices=[PlacedDevice(instance_id="p-1", device_id="d-1", x=10, y=10)],
        ),
    )


@pytest.fixture
def mock_floor_repo(floor):
    """FloorRepository whose layout saves echo the new layout."""
    repo = MagicMock()
    repo.list_floors = AsyncMock(return_value=[floor])
    repo.get_floor = AsyncMock(return_value=floor)
    repo.require_floor = AsyncMock(return_value=floor)
    repo.create_floor = AsyncMock(side_effect=lambda name: FloorFactory(name=name))
    repo.save_layout = AsyncMock(
        side_effect=lambda floor_id, layout: floor.model_copy(update={"layout": layout})
    )
    repo.delete_floor = AsyncMock(return_value=["r-1", "r-2"])
    return repo


@pytest.mark.asyncio
class TestFloorCrud:
    async def test_list_floors(self, floor_client, mock_floor_repo):
        with patch("src.api.routes.floors.FloorRepository", return_value=mock_floor_repo):
            response = await floor_client.get("/api/v1/floors")

        assert response.json()["total"] == 1
        assert response.json()["items"][0]["name"] == "Ground"

    async def test_create_floor(self, floor_client, mock_floor_repo):
        with patch("src.api.routes.floors.FloorRepository", return_value=mock_floor_repo):
            response = await floor_client.post("/api/v1/floors", json={"name": "Attic"})

        assert response.status_code == 201
        assert response.json()["layout"] == {"walls": [], "placed_devices": []}

    async def test_create_floor_requires_name(self, floor_client, mock_floor_repo):
        with patch("src.api.routes.floors.FloorRepository", return_value=mock_floor_repo):
            response = await floor_client.post("/api/v1/floors", json={"name": ""})

        assert response.status_code == 422

    async def test_delete_cascades_rooms(self, floor_client, mock_floor_repo, floor):
        with patch("src.api.routes.floors.FloorRepository", return_value=mock_floor_repo):
            response = await floor_client.delete(f"/api/v1/floors/{floor.id}")

        assert response.json() == {"floor_id": floor.id, "deleted_room_ids": ["r-1", "r-2"]}


@pytest.mark.asyncio
class TestWalls:
    async def test_add_wall_is_snapped(self, floor_client, mock_floor_repo, floor):
        body = {"start": {"x": 103, "y": 4}, "end": {"x": 96, "y": 77}}
        with patch("src.api.routes.floors.FloorRepository", return_value=mock_floor_repo):
            response = await floor_client.post(f"/api/v1/floors/{floor.id}/walls", json=body)

        assert response.status_code == 201
        new_wall = response.json()["layout"]["walls"][-1]
        assert new_wall["start"] == {"x": 100, "y": 0}
        assert new_wall["end"] == {"x": 100, "y": 80}

    async def test_erase_wall(self, floor_client, mock_floor_repo, floor):
        with patch("src.api.routes.floors.FloorRepository", return_value=mock_floor_repo):
            response = await floor_client.post(
                f"/api/v1/floors/{floor.id}/walls/erase", json={"point": {"x": 50, "y": 5}}
            )

        assert response.json()["layout"]["walls"] == []

    async def test_erase_miss_keeps_floor(self, floor_client, mock_floor_repo, floor):
        with patch("src.api.routes.floors.FloorRepository", return_value=mock_floor_repo):
            response = await floor_client.post(
                f"/api/v1/floors/{floor.id}/walls/erase", json={"point": {"x": 50, "y": 80}}
            )

        assert len(response.json()["layout"]["walls"]) == 1
        mock_floor_repo.save_layout.assert_not_awaited()


@pytest.mark.asyncio
class TestDrawRoom:
    async def test_closing_click_is_dropped(self, floor_client, floor):
        rooms = MagicMock()
        rooms.create_room = AsyncMock(side_effect=lambda room: room)
        body = {"name": "Kitchen", "points": [*SQUARE, {"x": 3, "y": 2}]}

        with patch("src.api.routes.floors.RoomRepository", return_value=rooms):
            response = await floor_client.post(f"/api/v1/floors/{floor.id}/rooms", json=body)

        assert response.status_code == 201
        data = response.json()
        assert len(data["polygon"]) == 4
        assert data["floor_id"] == floor.id
        assert data["bounds"] == {"x": 0, "y": 0, "width": 100, "height": 100}


@pytest.mark.asyncio
class TestPlacedDevices:
    async def test_pin_inside_room(self, floor_client, mock_floor_repo, floor):
        sensor = SensorFactory(name="Motion")
        room = RoomFactory(floor_id=floor.id, polygon=SQUARE)
        devices = MagicMock()
        devices.get_device = AsyncMock(return_value=sensor)
        rooms = MagicMock()
        rooms.list_rooms = AsyncMock(return_value=[room])
        rooms.save_room = AsyncMock(side_effect=lambda r: r)

        with (
            patch("src.api.routes.floors.FloorRepository", return_value=mock_floor_repo),
            patch("src.api.routes.floors.DeviceRepository", return_value=devices),
            patch("src.api.routes.floors.RoomRepository", return_value=rooms),
        ):
            response = await floor_client.post(
                f"/api/v1/floors/{floor.id}/devices",
                json={"device_id": sensor.id, "point": {"x": 50, "y": 50}, "icon": "motion"},
            )

        assert response.status_code == 201
        data = response.json()
        assert data["room"]["id"] == room.id
        assert data["room"]["devices"][0]["instance_id"] == data["placed"]["instance_id"]
        assert data["placed"]["icon"] == "motion"
        assert len(data["floor"]["layout"]["placed_devices"]) == 2

    async def test_unknown_device(self, floor_client, mock_floor_repo, floor):
        devices = MagicMock()
        devices.get_device = AsyncMock(return_value=None)

        with (
            patch("src.api.routes.floors.FloorRepository", return_value=mock_floor_repo),
            patch("src.api.routes.floors.DeviceRepository", return_value=devices),
        ):
            response = await floor_client.post(
                f"/api/v1/floors/{floor.id}/devices",
                json={"device_id": "ghost", "point": {"x": 1, "y": 1}},
            )

        assert response.status_code == 404

    async def test_move_pin(self, floor_client, mock_floor_repo, floor):
        with patch("src.api.routes.floors.FloorRepository", return_value=mock_floor_repo):
            response = await floor_client.patch(
                f"/api/v1/floors/{floor.id}/devices/p-1", json={"point": {"x": 70, "y": 30}}
            )

        pin = response.json()["layout"]["placed_devices"][0]
        assert (pin["x"], pin["y"]) == (70, 30)

    async def test_move_unknown_pin(self, floor_client, mock_floor_repo, floor):
        with patch("src.api.routes.floors.FloorRepository", return_value=mock_floor_repo):
            response = await floor_client.patch(
                f"/api/v1/floors/{floor.id}/devices/ghost", json={"point": {"x": 70, "y": 30}}
            )

        assert response.status_code == 404

    async def test_remove_pin(self, floor_client, mock_floor_repo, floor):
        with patch("src.api.routes.floors.FloorRepository", return_value=mock_floor_repo):
            response = await floor_client.delete(f"/api/v1/floors/{floor.id}/devices/p-1")

        assert response.json()["layout"]["placed_devices"] == []
