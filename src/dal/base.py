"""Base repository with common CRUD operations."""

from typing import Any, Generic, Literal, TypeVar
from uuid import uuid4

from sqlalchemy import delete as sa_delete
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.exceptions import DALError

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """Base repository with common CRUD operations.

    Subclasses must set:
    - model: The SQLAlchemy model class
    - collection: Store collection name used in errors and change events
    - order_by_field: Field to use for ordering in list_all() (default: "created_at")
    """

    model: type[T]  # Set by subclasses
    collection: str
    order_by_field: str = "created_at"

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def get_by_id(self, id: str) -> T | None:
        """Get a row by ID.

        Args:
            id: Record ID

        Returns:
            Row or None
        """
        try:
            result = await self.session.execute(select(self.model).where(self.model.id == id))
        except SQLAlchemyError as e:
            raise DALError(f"Failed to load {self.collection}/{id}", collection=self.collection) from e
        return result.scalar_one_or_none()

    async def list_all(
        self,
        direction: Literal["asc", "desc"] = "asc",
        limit: int | None = None,
        offset: int = 0,
        **filters,
    ) -> list[T]:
        """List rows with optional equality filters.

        Args:
            direction: Sort direction on order_by_field
            limit: Max results (None for all)
            offset: Skip results
            **filters: Column equality filters; None values are ignored

        Returns:
            List of rows
        """
        query = select(self.model)

        for key, value in filters.items():
            if value is not None and hasattr(self.model, key):
                query = query.where(getattr(self.model, key) == value)

        order_by_attr = getattr(self.model, self.order_by_field, None)
        if order_by_attr is not None:
            query = query.order_by(order_by_attr.desc() if direction == "desc" else order_by_attr)

        if limit is not None:
            query = query.limit(limit)
        query = query.offset(offset)

        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as e:
            raise DALError(f"Failed to list {self.collection}", collection=self.collection) from e
        return list(result.scalars().all())

    async def count(self, **filters) -> int:
        """Count rows, optionally with filters."""
        query = select(func.count(self.model.id))
        for key, value in filters.items():
            if value is not None and hasattr(self.model, key):
                query = query.where(getattr(self.model, key) == value)
        result = await self.session.execute(query)
        return result.scalar() or 0

    async def create(self, data: dict[str, Any]) -> T:
        """Insert a row.

        The id is generated here unless given; created_at is set by the
        database.

        Args:
            data: Column values

        Returns:
            Created row
        """
        create_data = {"id": str(uuid4()), **data}
        entity = self.model(**create_data)
        self.session.add(entity)
        try:
            await self.session.flush()
            await self.session.refresh(entity)
        except SQLAlchemyError as e:
            raise DALError(f"Failed to create {self.collection} record", collection=self.collection) from e
        return entity

    async def update(self, id: str, data: dict[str, Any]) -> T | None:
        """Merge the given fields into an existing row.

        Args:
            id: Record ID
            data: Fields to overwrite; other columns are untouched

        Returns:
            Updated row, or None if it does not exist
        """
        entity = await self.get_by_id(id)
        if entity is None:
            return None
        for key, value in data.items():
            if hasattr(entity, key) and key not in ("id", "created_at"):
                setattr(entity, key, value)
        try:
            await self.session.flush()
            await self.session.refresh(entity)
        except SQLAlchemyError as e:
            raise DALError(f"Failed to update {self.collection}/{id}", collection=self.collection) from e
        return entity

    async def delete(self, id: str) -> bool:
        """Delete a row by ID.

        Returns:
            True if a row was removed
        """
        try:
            result = await self.session.execute(sa_delete(self.model).where(self.model.id == id))
        except SQLAlchemyError as e:
            raise DALError(f"Failed to delete {self.collection}/{id}", collection=self.collection) from e
        return result.rowcount > 0
