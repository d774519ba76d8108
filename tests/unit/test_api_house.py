"""Unit tests for house configuration and room template API routes."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

from src.exceptions import NotFoundError, ValidationError
from src.planner.models import HouseConfig
from tests.factories import GatewayFactory, InstanceFactory, RoomTemplateFactory, SensorFactory
from tests.helpers.api import make_test_app


@pytest.fixture
async def house_client():
    from src.api.routes.house import router as house_router
    from src.api.routes.room_templates import router as template_router

    async with AsyncClient(
        transport=ASGITransport(app=make_test_app(house_router, template_router)),
        base_url="http://test",
    ) as client:
        yield client


@pytest.mark.asyncio
class TestHouseGateways:
    async def test_get_config(self, house_client):
        repo = MagicMock()
        repo.get_config = AsyncMock(return_value=HouseConfig(gateway_ids=["g-1"]))

        with patch("src.api.routes.house.HouseConfigRepository", return_value=repo):
            response = await house_client.get("/api/v1/house")

        assert response.json() == {"id": "main", "gateway_ids": ["g-1"]}

    async def test_set_gateways_dedupes(self, house_client):
        repo = MagicMock()
        repo.set_gateways = AsyncMock(side_effect=lambda ids: HouseConfig(gateway_ids=ids))

        with patch("src.api.routes.house.HouseConfigRepository", return_value=repo):
            response = await house_client.put(
                "/api/v1/house/gateways", json={"gateway_ids": ["g-1", "g-2", "g-1"]}
            )

        assert response.json()["gateway_ids"] == ["g-1", "g-2"]

    async def test_non_gateway_rejected(self, house_client):
        repo = MagicMock()
        repo.add_gateway = AsyncMock(side_effect=ValidationError("s-1 is not a gateway in the catalog"))

        with patch("src.api.routes.house.HouseConfigRepository", return_value=repo):
            response = await house_client.post("/api/v1/house/gateways/s-1")

        assert response.status_code == 400
        assert "not a gateway" in response.json()["error"]["message"]

    async def test_remove_gateway(self, house_client):
        repo = MagicMock()
        repo.remove_gateway = AsyncMock(return_value=HouseConfig())

        with patch("src.api.routes.house.HouseConfigRepository", return_value=repo):
            response = await house_client.delete("/api/v1/house/gateways/g-1")

        assert response.json()["gateway_ids"] == []
        repo.remove_gateway.assert_awaited_once_with("g-1")

    async def test_gateway_candidates(self, house_client):
        gateway = GatewayFactory()
        devices = MagicMock()
        devices.list_devices = AsyncMock(return_value=[SensorFactory(), gateway])

        with patch("src.api.routes.house.DeviceRepository", return_value=devices):
            response = await house_client.get("/api/v1/house/gateway-candidates")

        assert [d["id"] for d in response.json()] == [gateway.id]


@pytest.mark.asyncio
class TestRoomTemplates:
    async def test_create_template(self, house_client):
        repo = MagicMock()
        repo.create_template = AsyncMock(side_effect=lambda t: t)
        body = {"name": "Bedroom kit", "devices": [InstanceFactory(device_id="d-1").model_dump()]}

        with patch("src.api.routes.room_templates.RoomTemplateRepository", return_value=repo):
            response = await house_client.post("/api/v1/room-templates", json=body)

        assert response.status_code == 201
        assert response.json()["devices"][0]["device_id"] == "d-1"

    async def test_list_templates(self, house_client):
        repo = MagicMock()
        repo.list_templates = AsyncMock(return_value=RoomTemplateFactory.build_batch(2))

        with patch("src.api.routes.room_templates.RoomTemplateRepository", return_value=repo):
            response = await house_client.get("/api/v1/room-templates")

        assert response.json()["total"] == 2

    async def test_missing_template(self, house_client):
        repo = MagicMock()
        repo.require_template = AsyncMock(side_effect=NotFoundError("Room template t-x not found"))

        with patch("src.api.routes.room_templates.RoomTemplateRepository", return_value=repo):
            response = await house_client.get("/api/v1/room-templates/t-x")

        assert response.status_code == 404

    async def test_delete_missing_template(self, house_client):
        repo = MagicMock()
        repo.delete = AsyncMock(return_value=False)

        with patch("src.api.routes.room_templates.RoomTemplateRepository", return_value=repo):
            response = await house_client.delete("/api/v1/room-templates/t-x")

        assert response.status_code == 404
