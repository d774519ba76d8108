"""Room template repository."""

import logging

from src.dal.base import BaseRepository
from src.exceptions import NotFoundError
from src.planner.models import RoomTemplate
from src.storage.entities import RoomTemplate as RoomTemplateRow

logger = logging.getLogger(__name__)


class RoomTemplateRepository(BaseRepository[RoomTemplateRow]):
    model = RoomTemplateRow
    collection = "room_templates"

    async def list_templates(self) -> list[RoomTemplate]:
        return [RoomTemplate.model_validate(row) for row in await self.list_all()]

    async def get_template(self, template_id: str) -> RoomTemplate | None:
        row = await self.get_by_id(template_id)
        return RoomTemplate.model_validate(row) if row is not None else None

    async def require_template(self, template_id: str) -> RoomTemplate:
        template = await self.get_template(template_id)
        if template is None:
            raise NotFoundError(
                f"Room template {template_id} not found",
                collection=self.collection,
                record_id=template_id,
            )
        return template

    async def create_template(self, template: RoomTemplate) -> RoomTemplate:
        row = await self.create(
            {
                "name": template.name,
                "devices": [d.model_dump(mode="json") for d in template.devices],
            }
        )
        logger.info("Created room template %s (%s)", row.id, template.name)
        return RoomTemplate.model_validate(row)

    async def update_template(self, template: RoomTemplate) -> RoomTemplate:
        row = await self.update(
            template.id,
            {
                "name": template.name,
                "devices": [d.model_dump(mode="json") for d in template.devices],
            },
        )
        if row is None:
            raise NotFoundError(
                f"Room template {template.id} not found",
                collection=self.collection,
                record_id=template.id,
            )
        return RoomTemplate.model_validate(row)
