"""House configuration API routes (house-level gateways)."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.deps import get_db
from src.api.routes.stream import publish_changes
from src.api.schemas.house import HouseGatewaysUpdate
from src.dal import DeviceRepository, HouseConfigRepository
from src.planner.catalog import gateway_candidates
from src.planner.models import BaseDevice, Device, HouseConfig

router = APIRouter(prefix="/house", tags=["House"])


@router.get("", response_model=HouseConfig)
async def get_house_config(session: AsyncSession = Depends(get_db)) -> HouseConfig:
    return await HouseConfigRepository(session).get_config()


@router.put("/gateways", response_model=HouseConfig)
async def set_house_gateways(
    body: HouseGatewaysUpdate,
    session: AsyncSession = Depends(get_db),
) -> HouseConfig:
    """Replace the gateways assigned to the whole house."""
    config = await HouseConfigRepository(session).set_gateways(body.gateway_ids)
    await session.commit()
    await publish_changes(session, "house_config")
    return config


@router.post("/gateways/{gateway_id}", response_model=HouseConfig)
async def add_house_gateway(
    gateway_id: str,
    session: AsyncSession = Depends(get_db),
) -> HouseConfig:
    config = await HouseConfigRepository(session).add_gateway(gateway_id)
    await session.commit()
    await publish_changes(session, "house_config")
    return config


@router.delete("/gateways/{gateway_id}", response_model=HouseConfig)
async def remove_house_gateway(
    gateway_id: str,
    session: AsyncSession = Depends(get_db),
) -> HouseConfig:
    config = await HouseConfigRepository(session).remove_gateway(gateway_id)
    await session.commit()
    await publish_changes(session, "house_config")
    return config


@router.get("/gateway-candidates", response_model=list[Device])
async def list_gateway_candidates(session: AsyncSession = Depends(get_db)) -> list[BaseDevice]:
    """Catalog gateways that can be assigned to the whole house."""
    return gateway_candidates(await DeviceRepository(session).list_devices())
