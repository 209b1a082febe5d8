"""Catalog module repository implementations."""

from typing import Any, List, Optional, Tuple
from sqlmodel import select, or_
from framework.repository.base import BaseRepository
from .models import Category, Product


def like_pattern(keyword: str) -> str:
    """Substring LIKE pattern with the wildcard characters escaped."""
    escaped = keyword.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class CategoryRepository(BaseRepository[Category]):
    """Category repository."""

    def __init__(self, session):
        super().__init__(session, Category)

    async def get_by_name(self, name: str) -> Optional[Category]:
        """Find category by exact name."""
        return await self.single_or_default(Category.name == name)

    async def name_taken(self, name: str, exclude_id: Optional[int] = None) -> bool:
        """Whether another category already uses this name."""
        criteria = [Category.name == name]
        if exclude_id is not None:
            criteria.append(Category.id != exclude_id)
        return await self.exists(*criteria)


class ProductRepository(BaseRepository[Product]):
    """
    Product repository.

    The *_with_category queries return ``(product, category_name)`` pairs,
    joining categories explicitly instead of loading a relationship.
    """

    def __init__(self, session):
        super().__init__(session, Product)

    async def list_with_category(self, *criteria: Any) -> List[Tuple[Product, Optional[str]]]:
        """Products matching criteria, each paired with its category name."""
        statement = (
            select(Product, Category.name)
            .join(Category, Product.category_id == Category.id, isouter=True)
            .order_by(Product.id)
        )
        for criterion in criteria:
            statement = statement.where(criterion)
        result = await self.session.exec(statement)
        return [(product, category_name) for product, category_name in result.all()]

    async def get_with_category(self, product_id: int) -> Optional[Tuple[Product, Optional[str]]]:
        rows = await self.list_with_category(Product.id == product_id)
        return rows[0] if rows else None

    async def search_with_category(self, keyword: str) -> List[Tuple[Product, Optional[str]]]:
        """Case-insensitive substring match over name and description."""
        pattern = like_pattern(keyword)
        return await self.list_with_category(
            or_(
                Product.name.ilike(pattern, escape="\\"),
                Product.description.ilike(pattern, escape="\\"),
            )
        )

    async def count_by_category(self, category_id: int) -> int:
        """Number of products referencing a category."""
        return await self.count(Product.category_id == category_id)
