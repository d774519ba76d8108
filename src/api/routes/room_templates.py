"""Room template API routes."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.deps import get_db
from src.api.routes.stream import publish_changes
from src.api.schemas.house import RoomTemplateCreate, RoomTemplateListResponse
from src.dal import RoomTemplateRepository
from src.planner.models import RoomTemplate

router = APIRouter(prefix="/room-templates", tags=["Room templates"])


@router.get("", response_model=RoomTemplateListResponse)
async def list_templates(session: AsyncSession = Depends(get_db)) -> RoomTemplateListResponse:
    templates = await RoomTemplateRepository(session).list_templates()
    return RoomTemplateListResponse(items=templates, total=len(templates))


@router.post("", response_model=RoomTemplate, status_code=201)
async def create_template(
    body: RoomTemplateCreate,
    session: AsyncSession = Depends(get_db),
) -> RoomTemplate:
    created = await RoomTemplateRepository(session).create_template(
        RoomTemplate(name=body.name, devices=body.devices)
    )
    await session.commit()
    await publish_changes(session, "room_templates")
    return created


@router.get("/{template_id}", response_model=RoomTemplate)
async def get_template(template_id: str, session: AsyncSession = Depends(get_db)) -> RoomTemplate:
    return await RoomTemplateRepository(session).require_template(template_id)


@router.put("/{template_id}", response_model=RoomTemplate)
async def replace_template(
    template_id: str,
    body: RoomTemplateCreate,
    session: AsyncSession = Depends(get_db),
) -> RoomTemplate:
    updated = await RoomTemplateRepository(session).update_template(
        RoomTemplate(id=template_id, name=body.name, devices=body.devices)
    )
    await session.commit()
    await publish_changes(session, "room_templates")
    return updated


@router.delete("/{template_id}", status_code=204)
async def delete_template(template_id: str, session: AsyncSession = Depends(get_db)) -> None:
    """Delete a template. Rooms created from it are unaffected."""
    if not await RoomTemplateRepository(session).delete(template_id):
        raise HTTPException(status_code=404, detail=f"Room template {template_id} not found")
    await session.commit()
    await publish_changes(session, "room_templates")
