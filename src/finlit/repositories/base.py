"""Generic base repository with async CRUD operations.

Usage:
    from finlit.repositories.base import BaseRepository
    from finlit.models.video import Video

    class VideoRepository(BaseRepository[Video]):
        pass

    repo = VideoRepository(session)
    video = await repo.get_by_id(video_id)
    await repo.delete(video)
"""

from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from finlit.models.base import Base

# Type variable for model classes
T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """Generic repository providing async CRUD operations.

    Type Parameters:
        T: The SQLAlchemy model class

    Attributes:
        session: The async database session
        model_class: The model class for this repository
    """

    model_class: type[T]

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def __init_subclass__(cls, **kwargs: Any) -> None:
        """Extract model class from Generic type parameter."""
        super().__init_subclass__(**kwargs)
        for base in cls.__orig_bases__:  # type: ignore[attr-defined]
            if hasattr(base, "__args__"):
                cls.model_class = base.__args__[0]
                break

    async def get_by_id(self, id: UUID) -> T | None:
        """Get a single entity by its UUID.

        Args:
            id: The entity's UUID

        Returns:
            The entity if found, None otherwise
        """
        result = await self.session.execute(
            select(self.model_class).where(self.model_class.id == id)
        )
        return result.scalar_one_or_none()

    async def count(self) -> int:
        """Count total entities."""
        result = await self.session.execute(
            select(func.count()).select_from(self.model_class)
        )
        return result.scalar_one()

    async def create(self, entity: T) -> T:
        """Insert a new entity and load generated fields (id, timestamps)."""
        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def update(self, entity: T, values: dict[str, Any] | None = None) -> T:
        """Apply field updates to an entity and flush them.

        Args:
            entity: The entity to update
            values: Attribute values to set before flushing

        Returns:
            The refreshed entity
        """
        for name, value in (values or {}).items():
            setattr(entity, name, value)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def delete(self, entity: T) -> None:
        """Permanently delete an entity."""
        await self.session.delete(entity)
        await self.session.flush()

    async def commit(self) -> None:
        """Commit the current unit of work."""
        await self.session.commit()

    async def exists(self, id: UUID) -> bool:
        """Check if an entity exists."""
        result = await self.session.execute(
            select(func.count())
            .select_from(self.model_class)
            .where(self.model_class.id == id)
        )
        return result.scalar_one() > 0
