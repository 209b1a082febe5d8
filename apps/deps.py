"""Request-scoped dependencies shared by the routers."""

from fastapi import Depends
from sqlmodel.ext.asyncio.session import AsyncSession
from framework.database.manager import get_db
from apps.unit_of_work import InventoryUnitOfWork
from apps.auth.service import AuthService
from apps.catalog.images import ImageStorage
from apps.catalog.service import CategoryService, ProductService


async def get_uow(db: AsyncSession = Depends(get_db)):
    """Dependency: one UnitOfWork per request, disposed when the request ends."""
    uow = InventoryUnitOfWork(session=db)
    try:
        yield uow
    finally:
        await uow.dispose()


def get_image_storage() -> ImageStorage:
    """Dependency: image storage configured from settings."""
    return ImageStorage()


def get_auth_service(uow: InventoryUnitOfWork = Depends(get_uow)) -> AuthService:
    """Dependency: create AuthService."""
    return AuthService(uow)


def get_category_service(uow: InventoryUnitOfWork = Depends(get_uow)) -> CategoryService:
    """Dependency: create CategoryService."""
    return CategoryService(uow)


def get_product_service(
    uow: InventoryUnitOfWork = Depends(get_uow),
    images: ImageStorage = Depends(get_image_storage)
) -> ProductService:
    """Dependency: create ProductService."""
    return ProductService(uow, images)
