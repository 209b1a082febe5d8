"""Unit of Work bound to the application's entity repositories."""

from framework.repository.unit_of_work import UnitOfWork
from apps.auth.models import User
from apps.auth.repository import UserRepository
from apps.catalog.models import Category, Product
from apps.catalog.repository import CategoryRepository, ProductRepository


class InventoryUnitOfWork(UnitOfWork):
    """One repository per entity over a single shared session."""

    @property
    def users(self) -> UserRepository:
        return self.get_repository(UserRepository, User)

    @property
    def categories(self) -> CategoryRepository:
        return self.get_repository(CategoryRepository, Category)

    @property
    def products(self) -> ProductRepository:
        return self.get_repository(ProductRepository, Product)
