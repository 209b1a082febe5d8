"""Request and response schemas for categories and products."""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Optional
from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator
from .images import ImageStorage

Price = Annotated[
    Decimal,
    Field(gt=0, le=Decimal("999999.99"), max_digits=8, decimal_places=2),
]
# Prices go out as JSON numbers rather than strings
PriceOut = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)


class CategoryUpdate(CategoryCreate):
    pass


class CategoryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ProductBase(BaseModel):
    name: str = Field(min_length=2, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    price: Price
    stock: int = Field(ge=0)
    category_id: int = Field(ge=1)


class ProductCreate(ProductBase):
    image_base64: Optional[str] = None

    @field_validator("image_base64")
    @classmethod
    def check_image(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return ImageStorage().validate_base64(value)


class ProductUpdate(ProductCreate):
    pass


class ProductRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    price: PriceOut
    stock: int
    category_id: int
    category_name: Optional[str] = None
    image_base64: Optional[str] = None
    image_path: Optional[str] = None
    image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime
