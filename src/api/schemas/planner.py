"""Planner view API schemas (shopping list, gateways, ownership)."""

from pydantic import BaseModel, Field

from src.planner.shopping import ShoppingItem, ShoppingSection


class ShoppingListResponse(BaseModel):
    items: list[ShoppingItem]
    sections: list[ShoppingSection]
    total_price: float
    total_display: str = Field(..., description="Total formatted with the configured currency")
    used_owned_quantities: dict[str, int]


class GatewayInfo(BaseModel):
    id: str
    name: str
    kind: str = Field(..., description="gateway or voice-assistant")
    protocols: list[str]


class RoomGatewayWarningResponse(BaseModel):
    room_id: str
    room_name: str
    missing: dict[str, list[str]] = Field(..., description="protocol -> device display names")
    device_count: int


class GatewayReportResponse(BaseModel):
    active_gateways: list[GatewayInfo]
    covered_protocols: list[str]
    warnings: list[RoomGatewayWarningResponse]


class OwnershipQuotaResponse(BaseModel):
    device_id: str
    owned: int
    used: int
    remaining: int


class OwnershipResponse(BaseModel):
    items: list[OwnershipQuotaResponse]
