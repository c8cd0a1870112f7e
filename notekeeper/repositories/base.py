"""
Base Repository.

Base class for all repositories with the operations shared by every table.
A repository is bound to one session and never commits: the caller owns
the transaction.
"""

from typing import Generic, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository with common operations.

    Subclasses should set the model class:

        class ScheduleRepository(BaseRepository[Schedule]):
            model = Schedule
    """

    model: type[ModelType]

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id_or_none(self, id: int) -> ModelType | None:
        """Get a single record by ID, returning None if not found."""
        return await self.session.get(self.model, id)

    async def get_all(self) -> list[ModelType]:
        """Get all records ordered by ID."""
        result = await self.session.execute(
            select(self.model).order_by(self.model.id)
        )
        return list(result.scalars().all())

    async def insert(self, instance: ModelType) -> int:
        """
        Insert a record.

        Returns:
            The ID assigned by the database
        """
        self.session.add(instance)
        await self.session.flush()
        return instance.id

    async def count(self) -> int:
        """Get the number of records."""
        result = await self.session.execute(
            select(func.count()).select_from(self.model)
        )
        return result.scalar_one()

    async def delete_all(self) -> int:
        """
        Delete every record.

        Returns:
            Number of deleted rows
        """
        result = await self.session.execute(delete(self.model))
        return result.rowcount
