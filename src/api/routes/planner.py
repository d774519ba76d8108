"""Planner view API routes.

Read-only aggregations computed from one snapshot of every collection:
shopping list, gateway coverage, connectivity topology and ownership.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.deps import get_db
from src.api.schemas import GatewayReportResponse, OwnershipResponse, ShoppingListResponse
from src.api.schemas.planner import (
    GatewayInfo,
    OwnershipQuotaResponse,
    RoomGatewayWarningResponse,
)
from src.dal import load_snapshot
from src.planner.assignment import OwnershipLedger
from src.planner.compatibility import (
    active_gateways,
    house_gateway_protocols,
    missing_gateway_report,
)
from src.planner.shopping import build_shopping_list, format_price
from src.planner.topology import TopologyView, build_topology, to_view
from src.settings import get_settings

router = APIRouter(prefix="/planner", tags=["Planner"])


@router.get("/shopping-list", response_model=ShoppingListResponse)
async def shopping_list(session: AsyncSession = Depends(get_db)) -> ShoppingListResponse:
    """Everything still to buy, grouped by category, with the running total."""
    result = build_shopping_list(await load_snapshot(session))
    return ShoppingListResponse(
        items=result.items,
        sections=result.sections(),
        total_price=result.total_price,
        total_display=format_price(result.total_price, get_settings().currency_symbol),
        used_owned_quantities=result.used_owned_quantities,
    )


@router.get("/gateways", response_model=GatewayReportResponse)
async def gateway_report(session: AsyncSession = Depends(get_db)) -> GatewayReportResponse:
    """Active gateways and rooms whose devices lack a gateway for their protocol."""
    snapshot = await load_snapshot(session)
    return GatewayReportResponse(
        active_gateways=[
            GatewayInfo(id=hub.id, name=hub.name, kind=hub.kind, protocols=list(hub.protocols))
            for hub in active_gateways(snapshot)
        ],
        covered_protocols=sorted(house_gateway_protocols(snapshot)),
        warnings=[
            RoomGatewayWarningResponse(
                room_id=warning.room_id,
                room_name=warning.room_name,
                missing=warning.missing,
                device_count=warning.device_count,
            )
            for warning in missing_gateway_report(snapshot).values()
        ],
    )


@router.get("/topology", response_model=TopologyView)
async def topology(
    hidden: str | None = Query(None, description="Comma-separated room ids to collapse"),
    offline: bool = Query(False, description="Show the house with internet access down"),
    session: AsyncSession = Depends(get_db),
) -> TopologyView:
    hidden_ids = [room_id for room_id in (hidden or "").split(",") if room_id]
    graph = build_topology(await load_snapshot(session), hidden_ids, internet_offline=offline)
    return to_view(graph)


@router.get("/ownership", response_model=OwnershipResponse)
async def ownership(session: AsyncSession = Depends(get_db)) -> OwnershipResponse:
    """Owned vs. used units of every catalog device."""
    snapshot = await load_snapshot(session)
    ledger = OwnershipLedger(
        snapshot.device_map,
        snapshot.rooms,
        house_gateway_ids=snapshot.house_config.gateway_ids,
    )
    return OwnershipResponse(
        items=[
            OwnershipQuotaResponse(
                device_id=quota.device_id,
                owned=quota.owned,
                used=quota.used,
                remaining=quota.remaining,
            )
            for quota in ledger.quotas().values()
        ]
    )
