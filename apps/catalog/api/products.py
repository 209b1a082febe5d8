from decimal import Decimal
from typing import Optional, Tuple
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as SchemaValidationError
from framework.exceptions.errors import NotFoundError
from framework.response import ResponseModel
from framework.security import get_current_user
from apps.deps import get_image_storage, get_product_service
from ..images import ImageStorage
from ..schemas import ProductCreate, ProductUpdate
from ..service import ProductService

router = APIRouter(dependencies=[Depends(get_current_user)])


def _build(schema, **fields):
    """Validate multipart form fields with the JSON body schema."""
    try:
        return schema(**fields)
    except SchemaValidationError as e:
        raise RequestValidationError(e.errors())


async def _store_upload(
    images: ImageStorage,
    image_file: Optional[UploadFile],
    use_base64: bool,
    subfolder: str
) -> Tuple[Optional[str], Optional[str]]:
    """Returns (image_base64, image_path); both None when no file was sent."""
    if image_file is None or not image_file.filename:
        return None, None
    if use_base64:
        return await images.to_base64(image_file), None
    return None, await images.save(image_file, subfolder)


@router.get("")
async def list_products(service: ProductService = Depends(get_product_service)):
    """List all products with their category names."""
    products = await service.list_products()
    return ResponseModel.success(data=[p.model_dump(mode="json") for p in products])


@router.get("/search")
async def search_products(
    q: Optional[str] = Query(default=None, description="Keyword matched against name and description"),
    service: ProductService = Depends(get_product_service)
):
    """Case-insensitive keyword search; an empty keyword lists everything."""
    products = await service.search(q)
    return ResponseModel.success(data=[p.model_dump(mode="json") for p in products])


@router.get("/category/{category_id}")
async def list_products_by_category(
    category_id: int,
    service: ProductService = Depends(get_product_service)
):
    """List products in one category."""
    products = await service.list_by_category(category_id)
    return ResponseModel.success(data=[p.model_dump(mode="json") for p in products])


@router.get("/{product_id}")
async def get_product(product_id: int, service: ProductService = Depends(get_product_service)):
    """Get one product."""
    product = await service.get_product(product_id)
    return ResponseModel.success(data=product.model_dump(mode="json"))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: ProductCreate,
    service: ProductService = Depends(get_product_service)
):
    """Create a product; image_base64 may carry an inline image."""
    product = await service.create_product(payload)
    return ResponseModel.success(data=product.model_dump(mode="json"), code=201)


@router.post("/upload", status_code=status.HTTP_201_CREATED)
async def create_product_with_file(
    name: str = Form(...),
    price: Decimal = Form(...),
    stock: int = Form(...),
    category_id: int = Form(...),
    description: Optional[str] = Form(None),
    image_file: Optional[UploadFile] = File(None),
    use_base64: bool = Form(False),
    subfolder: str = Form("products"),
    service: ProductService = Depends(get_product_service),
    images: ImageStorage = Depends(get_image_storage)
):
    """Create a product from a multipart form with an optional image file."""
    payload = _build(
        ProductCreate,
        name=name, description=description, price=price, stock=stock, category_id=category_id
    )
    image_base64, image_path = await _store_upload(images, image_file, use_base64, subfolder)
    payload.image_base64 = image_base64
    try:
        product = await service.create_product(payload, image_path=image_path)
    except Exception:
        images.delete(image_path)
        raise
    return ResponseModel.success(data=product.model_dump(mode="json"), code=201)


@router.put("/{product_id}")
async def update_product(
    product_id: int,
    payload: ProductUpdate,
    service: ProductService = Depends(get_product_service)
):
    """Update a product; the current image is kept unless image_base64 is sent."""
    product = await service.update_product(product_id, payload)
    return ResponseModel.success(data=product.model_dump(mode="json"))


@router.put("/{product_id}/upload")
async def update_product_with_file(
    product_id: int,
    name: str = Form(...),
    price: Decimal = Form(...),
    stock: int = Form(...),
    category_id: int = Form(...),
    description: Optional[str] = Form(None),
    image_file: Optional[UploadFile] = File(None),
    use_base64: bool = Form(False),
    subfolder: str = Form("products"),
    service: ProductService = Depends(get_product_service),
    images: ImageStorage = Depends(get_image_storage)
):
    """Update a product from a multipart form with an optional replacement image."""
    payload = _build(
        ProductUpdate,
        name=name, description=description, price=price, stock=stock, category_id=category_id
    )
    image_base64, image_path = await _store_upload(images, image_file, use_base64, subfolder)
    payload.image_base64 = image_base64
    try:
        product = await service.update_product(product_id, payload, image_path=image_path)
    except Exception:
        images.delete(image_path)
        raise
    return ResponseModel.success(data=product.model_dump(mode="json"))


@router.post("/{product_id}/image")
async def upload_product_image(
    product_id: int,
    image_file: UploadFile = File(...),
    use_base64: bool = Form(False),
    subfolder: str = Form("products"),
    service: ProductService = Depends(get_product_service),
    images: ImageStorage = Depends(get_image_storage)
):
    """Attach or replace the image of an existing product."""
    image_base64, image_path = await _store_upload(images, image_file, use_base64, subfolder)
    try:
        product = await service.attach_image(product_id, image_base64=image_base64, image_path=image_path)
    except Exception:
        images.delete(image_path)
        raise
    return ResponseModel.success(data=product.model_dump(mode="json"))


@router.delete("/{product_id}")
async def delete_product(product_id: int, service: ProductService = Depends(get_product_service)):
    """Delete a product and any stored image file."""
    if not await service.delete_product(product_id):
        raise NotFoundError(f"Product with ID {product_id} not found")
    return ResponseModel.success(data={"message": "Product deleted successfully"})
