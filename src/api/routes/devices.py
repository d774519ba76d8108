"""Catalog device API routes.

Devices are addressed by collection name (sensors, switches, lighting,
other_devices, voice_assistants, gateways). Scores are always computed
server-side; a score in the request body is ignored.
"""

from typing import Any, Literal

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.deps import get_db
from src.api.rate_limit import limiter
from src.api.routes.stream import publish_changes
from src.api.schemas import DeviceListResponse, ScorePreviewResponse, TagListResponse
from src.dal import DeviceRepository
from src.planner.catalog import all_tags, filter_devices, sort_devices
from src.planner.enums import CATEGORY_COLLECTIONS, COLLECTION_CATEGORIES, DeviceCategory
from src.planner.models import DEVICE_MODELS, BaseDevice, Device
from src.planner.scoring import score_device

router = APIRouter(prefix="/devices", tags=["Devices"])

# Server-owned fields
_IGNORED_FIELDS = ("id", "score", "created_at")


def _category_for(collection: str) -> DeviceCategory:
    category = COLLECTION_CATEGORIES.get(collection)
    if category is None:
        raise HTTPException(status_code=404, detail=f"Unknown device collection '{collection}'")
    return category


def _parse_device(category: DeviceCategory, payload: dict[str, Any]) -> BaseDevice:
    data = {k: v for k, v in payload.items() if k not in _IGNORED_FIELDS}
    data["category"] = str(category)
    try:
        return DEVICE_MODELS[category].model_validate(data)
    except PydanticValidationError as e:
        raise RequestValidationError(e.errors()) from e


async def _require_device(
    repo: DeviceRepository, category: DeviceCategory, device_id: str
) -> BaseDevice:
    device = await repo.get_device(device_id)
    if device is None or device.category != category:
        raise HTTPException(
            status_code=404,
            detail=f"Device {device_id} not found in {CATEGORY_COLLECTIONS[category]}",
        )
    return device


@router.get("", response_model=DeviceListResponse)
async def list_all_devices(
    tag: str | None = Query(None, description="Only devices with this tag"),
    search: str | None = Query(None, description="Case-insensitive name or brand match"),
    sort: Literal["newest", "score", "price", "name"] = Query("newest"),
    session: AsyncSession = Depends(get_db),
) -> DeviceListResponse:
    """List devices across every category."""
    devices = await DeviceRepository(session).list_devices(tag=tag)
    devices = sort_devices(filter_devices(devices, search=search), sort)
    return DeviceListResponse(items=devices, total=len(devices))


@router.get("/tags", response_model=TagListResponse)
async def list_tags(session: AsyncSession = Depends(get_db)) -> TagListResponse:
    return TagListResponse(tags=all_tags(await DeviceRepository(session).list_devices()))


@router.post("/score", response_model=ScorePreviewResponse)
@limiter.limit("120/minute")
async def preview_score(
    request: Request,
    payload: dict[str, Any] = Body(..., description="Device fields including 'category'"),
) -> ScorePreviewResponse:
    """Score unsaved form values without storing anything."""
    raw_category = payload.get("category")
    try:
        category = DeviceCategory(raw_category)
    except ValueError:
        raise HTTPException(
            status_code=400, detail=f"Unknown device category '{raw_category}'"
        ) from None
    device = _parse_device(category, payload)
    return ScorePreviewResponse(category=category, score=score_device(device))


@router.get("/{collection}", response_model=DeviceListResponse)
async def list_devices(
    collection: str,
    tag: str | None = Query(None, description="Only devices with this tag"),
    sort: Literal["newest", "score", "price", "name"] = Query("newest"),
    session: AsyncSession = Depends(get_db),
) -> DeviceListResponse:
    """List one device collection, newest first by default."""
    category = _category_for(collection)
    devices = await DeviceRepository(session).list_devices(category, tag=tag)
    devices = sort_devices(devices, sort)
    return DeviceListResponse(items=devices, total=len(devices))


@router.post("/{collection}", response_model=Device, status_code=201)
async def create_device(
    collection: str,
    payload: dict[str, Any] = Body(...),
    session: AsyncSession = Depends(get_db),
) -> BaseDevice:
    category = _category_for(collection)
    device = _parse_device(category, payload)
    created = await DeviceRepository(session).create_device(device)
    await session.commit()
    await publish_changes(session, collection)
    return created


@router.get("/{collection}/{device_id}", response_model=Device)
async def get_device(
    collection: str,
    device_id: str,
    session: AsyncSession = Depends(get_db),
) -> BaseDevice:
    return await _require_device(DeviceRepository(session), _category_for(collection), device_id)


@router.patch("/{collection}/{device_id}", response_model=Device)
async def update_device(
    collection: str,
    device_id: str,
    payload: dict[str, Any] = Body(...),
    session: AsyncSession = Depends(get_db),
) -> BaseDevice:
    """Merge field changes into a device; its score is recomputed."""
    category = _category_for(collection)
    repo = DeviceRepository(session)
    await _require_device(repo, category, device_id)
    changes = {k: v for k, v in payload.items() if k not in _IGNORED_FIELDS}
    updated = await repo.update_device(device_id, changes)
    await session.commit()
    await publish_changes(session, collection)
    return updated


@router.delete("/{collection}/{device_id}", status_code=204)
async def delete_device(
    collection: str,
    device_id: str,
    session: AsyncSession = Depends(get_db),
) -> None:
    """Delete a device. Rooms still referencing it simply skip it."""
    category = _category_for(collection)
    repo = DeviceRepository(session)
    await _require_device(repo, category, device_id)
    await repo.delete_device(device_id)
    await session.commit()
    await publish_changes(session, collection)
