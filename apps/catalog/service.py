from typing import List, Optional
from framework.exceptions.errors import ConflictError, DuplicateError, NotFoundError, ValidationError
from framework.logging.logger import get_logger
from apps.unit_of_work import InventoryUnitOfWork
from .images import ImageStorage
from .models import Category, Product
from .schemas import CategoryCreate, CategoryRead, CategoryUpdate, ProductCreate, ProductRead, ProductUpdate

logger = get_logger("catalog_service")


class CategoryService:
    """Category CRUD with name uniqueness and delete protection."""

    def __init__(self, uow: InventoryUnitOfWork):
        self.uow = uow

    async def list_categories(self) -> List[CategoryRead]:
        categories = await self.uow.categories.get_all()
        return [CategoryRead.model_validate(c) for c in categories]

    async def get_category(self, category_id: int) -> CategoryRead:
        category = await self._require(category_id)
        return CategoryRead.model_validate(category)

    async def create_category(self, data: CategoryCreate) -> CategoryRead:
        if await self.uow.categories.name_taken(data.name):
            raise DuplicateError("Category with this name already exists")

        category = Category(name=data.name, description=data.description)
        await self.uow.categories.add(category)
        await self._save_unique()

        logger.info(f"Category created: id={category.id} name={category.name!r}")
        return CategoryRead.model_validate(category)

    async def update_category(self, category_id: int, data: CategoryUpdate) -> CategoryRead:
        category = await self._require(category_id)
        if await self.uow.categories.name_taken(data.name, exclude_id=category_id):
            raise DuplicateError("Another category with this name already exists")

        category.name = data.name
        category.description = data.description
        await self.uow.categories.update(category)
        await self._save_unique()

        logger.info(f"Category updated: id={category.id}")
        return CategoryRead.model_validate(category)

    async def delete_category(self, category_id: int) -> bool:
        """Delete a category. False when it does not exist."""
        category = await self.uow.categories.get_by_id(category_id)
        if category is None:
            return False

        if await self.uow.products.count_by_category(category_id) > 0:
            raise ConflictError("Cannot delete category that contains products")

        await self.uow.categories.delete(category)
        await self.uow.save()
        logger.info(f"Category deleted: id={category_id}")
        return True

    async def _require(self, category_id: int) -> Category:
        category = await self.uow.categories.get_by_id(category_id)
        if category is None:
            raise NotFoundError(f"Category with ID {category_id} not found")
        return category

    async def _save_unique(self) -> None:
        try:
            await self.uow.save()
        except DuplicateError as e:
            raise DuplicateError("Category with this name already exists", detail=e.detail) from e


class ProductService:
    """
    Product CRUD. Category names are attached to every returned product at
    read time; image payloads are either inline Base64 or a stored file.
    """

    def __init__(self, uow: InventoryUnitOfWork, images: Optional[ImageStorage] = None):
        self.uow = uow
        self.images = images or ImageStorage()

    def to_read(self, product: Product, category_name: Optional[str]) -> ProductRead:
        read = ProductRead.model_validate(product)
        read.category_name = category_name
        read.image_url = self.images.url_for(product.image_path)
        return read

    async def list_products(self) -> List[ProductRead]:
        rows = await self.uow.products.list_with_category()
        return [self.to_read(p, name) for p, name in rows]

    async def get_product(self, product_id: int) -> ProductRead:
        row = await self.uow.products.get_with_category(product_id)
        if row is None:
            raise NotFoundError(f"Product with ID {product_id} not found")
        return self.to_read(*row)

    async def list_by_category(self, category_id: int) -> List[ProductRead]:
        await self._require_category(category_id)
        rows = await self.uow.products.list_with_category(Product.category_id == category_id)
        return [self.to_read(p, name) for p, name in rows]

    async def search(self, keyword: Optional[str]) -> List[ProductRead]:
        """Case-insensitive match on name or description; blank lists everything."""
        if keyword is None or not keyword.strip():
            return await self.list_products()
        rows = await self.uow.products.search_with_category(keyword)
        return [self.to_read(p, name) for p, name in rows]

    async def create_product(self, data: ProductCreate, image_path: Optional[str] = None) -> ProductRead:
        category = await self._require_category(data.category_id)

        product = Product(
            name=data.name,
            description=data.description,
            price=data.price,
            stock=data.stock,
            category_id=data.category_id,
        )
        self._set_image(product, data.image_base64, image_path)
        await self.uow.products.add(product)
        await self._save_with_category(data.category_id)

        logger.info(f"Product created: id={product.id} category={category.id}")
        return self.to_read(product, category.name)

    async def update_product(
        self,
        product_id: int,
        data: ProductUpdate,
        image_path: Optional[str] = None
    ) -> ProductRead:
        product = await self._require_product(product_id)
        category = await self._require_category(data.category_id)

        product.name = data.name
        product.description = data.description
        product.price = data.price
        product.stock = data.stock
        product.category_id = data.category_id
        replaced = self._set_image(product, data.image_base64, image_path)
        await self.uow.products.update(product)
        await self._save_with_category(data.category_id)
        self.images.delete(replaced)

        logger.info(f"Product updated: id={product.id}")
        return self.to_read(product, category.name)

    async def attach_image(
        self,
        product_id: int,
        image_base64: Optional[str] = None,
        image_path: Optional[str] = None
    ) -> ProductRead:
        """Replace a product's image with an inline payload or a stored file."""
        if not image_base64 and not image_path:
            raise ValidationError("Image file is required")
        product = await self._require_product(product_id)

        replaced = self._set_image(product, image_base64, image_path)
        await self.uow.products.update(product)
        await self.uow.save()
        self.images.delete(replaced)

        return await self.get_product(product_id)

    async def delete_product(self, product_id: int) -> bool:
        """Delete a product and its stored image. False when it does not exist."""
        product = await self.uow.products.get_by_id(product_id)
        if product is None:
            return False

        image_path = product.image_path
        await self.uow.products.delete(product)
        await self.uow.save()
        self.images.delete(image_path)

        logger.info(f"Product deleted: id={product_id}")
        return True

    @staticmethod
    def _set_image(product: Product, image_base64: Optional[str], image_path: Optional[str]) -> Optional[str]:
        """
        Apply a new image, keeping the two storage forms mutually exclusive.
        Returns the path of a file that is no longer referenced, if any.
        """
        if image_base64 and image_path:
            raise ValidationError("Provide either an inline image or an uploaded file, not both")
        if not image_base64 and not image_path:
            return None

        previous_path = product.image_path
        if image_base64:
            product.image_base64 = image_base64
            product.image_path = None
        else:
            product.image_path = image_path
            product.image_base64 = None
        return previous_path if previous_path != product.image_path else None

    async def _save_with_category(self, category_id: int) -> None:
        # The category can disappear between the lookup and the write
        try:
            await self.uow.save()
        except ConflictError as e:
            raise NotFoundError(f"Category with ID {category_id} not found", detail=e.detail) from e

    async def _require_product(self, product_id: int) -> Product:
        product = await self.uow.products.get_by_id(product_id)
        if product is None:
            raise NotFoundError(f"Product with ID {product_id} not found")
        return product

    async def _require_category(self, category_id: int) -> Category:
        category = await self.uow.categories.get_by_id(category_id)
        if category is None:
            raise NotFoundError(f"Category with ID {category_id} not found")
        return category
