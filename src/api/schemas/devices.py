"""Catalog device API schemas."""

from pydantic import BaseModel, Field

from src.planner.models import Device


class DeviceListResponse(BaseModel):
    """Response for device list."""

    items: list[Device]
    total: int


class TagListResponse(BaseModel):
    tags: list[str]


class ScorePreviewResponse(BaseModel):
    """Score a device would get with the submitted fields."""

    category: str
    score: float = Field(..., ge=0, le=10)
