"""
Repository abstract base class and generic implementation.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Generic, TypeVar, Optional, List, Type, Any
from sqlalchemy.exc import MultipleResultsFound
from sqlmodel import SQLModel, select, func
from sqlmodel.ext.asyncio.session import AsyncSession
from framework.exceptions.errors import PersistenceError

T = TypeVar("T", bound=SQLModel)


class IRepository(ABC, Generic[T]):
    """Repository interface; defines standard data access API."""

    @abstractmethod
    async def get_by_id(self, id: int) -> Optional[T]:
        """Get entity by ID, or None."""

    @abstractmethod
    async def get_all(self, limit: Optional[int] = None, offset: int = 0) -> List[T]:
        """Get all entities."""

    @abstractmethod
    async def find(self, *criteria: Any, **filters: Any) -> List[T]:
        """Get entities matching every criterion."""

    @abstractmethod
    async def single_or_default(self, *criteria: Any, **filters: Any) -> Optional[T]:
        """Get the only matching entity, None if there is none."""

    @abstractmethod
    async def add(self, entity: T) -> T:
        """Stage an insert."""

    @abstractmethod
    async def update(self, entity: T) -> T:
        """Stage an update."""

    @abstractmethod
    async def delete(self, entity: T) -> None:
        """Stage a delete."""


class BaseRepository(IRepository[T]):
    """
    Generic repository over one SQLModel table.

    Criteria are SQLAlchemy column expressions (``User.email == email``) and
    keyword filters are column equality matches, so every query goes out with
    bound parameters. Mutations are only staged on the session; the
    UnitOfWork makes them durable.
    """

    def __init__(self, session: AsyncSession, model: Type[T]):
        """Initialize repository with session and model."""
        self.session = session
        self.model = model

    def _where(self, statement, criteria, filters):
        for criterion in criteria:
            statement = statement.where(criterion)
        for key, value in filters.items():
            if not hasattr(self.model, key):
                raise AttributeError(f"{self.model.__name__} has no column '{key}'")
            statement = statement.where(getattr(self.model, key) == value)
        return statement

    async def get_by_id(self, id: int) -> Optional[T]:
        """Get entity by ID."""
        return await self.session.get(self.model, id)

    async def get_all(self, limit: Optional[int] = None, offset: int = 0) -> List[T]:
        """Get all entities, optionally paginated."""
        statement = select(self.model).order_by(self.model.id)
        if limit is not None:
            statement = statement.limit(limit)
        if offset:
            statement = statement.offset(offset)
        result = await self.session.exec(statement)
        return list(result.all())

    async def find(self, *criteria: Any, **filters: Any) -> List[T]:
        """Find entities by expressions and/or equality filters."""
        statement = self._where(select(self.model), criteria, filters).order_by(self.model.id)
        result = await self.session.exec(statement)
        return list(result.all())

    async def find_one(self, **filters: Any) -> Optional[T]:
        """Find one entity by filters (e.g. username='admin')."""
        statement = self._where(select(self.model), (), filters)
        result = await self.session.exec(statement)
        return result.first()

    async def single_or_default(self, *criteria: Any, **filters: Any) -> Optional[T]:
        """Find the single match; more than one match is a data error."""
        statement = self._where(select(self.model), criteria, filters)
        result = await self.session.exec(statement)
        try:
            return result.one_or_none()
        except MultipleResultsFound as e:
            raise PersistenceError(
                f"More than one {self.model.__name__} matches a unique lookup",
                detail=str(e)
            ) from e

    async def count(self, *criteria: Any, **filters: Any) -> int:
        """Count entities matching criteria."""
        statement = self._where(select(func.count(self.model.id)), criteria, filters)
        result = await self.session.exec(statement)
        return result.one()

    async def exists(self, *criteria: Any, **filters: Any) -> bool:
        statement = self._where(select(self.model.id), criteria, filters).limit(1)
        result = await self.session.exec(statement)
        return result.first() is not None

    async def add(self, entity: T) -> T:
        """Stage entity for insert."""
        self.session.add(entity)
        return entity

    async def update(self, entity: T) -> T:
        """Stage entity for update and refresh its updated_at."""
        if hasattr(entity, "updated_at"):
            entity.updated_at = datetime.now(timezone.utc)
        self.session.add(entity)
        return entity

    async def delete(self, entity: T) -> None:
        """Stage entity for delete."""
        await self.session.delete(entity)
