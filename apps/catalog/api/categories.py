from fastapi import APIRouter, Depends, status
from framework.exceptions.errors import NotFoundError
from framework.response import ResponseModel
from framework.security import get_current_user
from apps.deps import get_category_service
from ..schemas import CategoryCreate, CategoryUpdate
from ..service import CategoryService

router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get("")
async def list_categories(service: CategoryService = Depends(get_category_service)):
    """List all categories."""
    categories = await service.list_categories()
    return ResponseModel.success(data=[c.model_dump(mode="json") for c in categories])


@router.get("/{category_id}")
async def get_category(category_id: int, service: CategoryService = Depends(get_category_service)):
    """Get one category."""
    category = await service.get_category(category_id)
    return ResponseModel.success(data=category.model_dump(mode="json"))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: CategoryCreate,
    service: CategoryService = Depends(get_category_service)
):
    """Create a category; the name must be unique."""
    category = await service.create_category(payload)
    return ResponseModel.success(data=category.model_dump(mode="json"), code=201)


@router.put("/{category_id}")
async def update_category(
    category_id: int,
    payload: CategoryUpdate,
    service: CategoryService = Depends(get_category_service)
):
    """Rename or re-describe a category."""
    category = await service.update_category(category_id, payload)
    return ResponseModel.success(data=category.model_dump(mode="json"))


@router.delete("/{category_id}")
async def delete_category(category_id: int, service: CategoryService = Depends(get_category_service)):
    """Delete a category that no product references."""
    if not await service.delete_category(category_id):
        raise NotFoundError(f"Category with ID {category_id} not found")
    return ResponseModel.success(data={"message": "Category deleted successfully"})
