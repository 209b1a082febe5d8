from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlalchemy import Column, ForeignKey, Integer, Text
from sqlmodel import SQLModel, Field
from ..auth.models import utc_now


class Category(SQLModel, table=True):
    """Product category; name is unique."""
    __tablename__ = "categories"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=100, unique=True, index=True)
    description: Optional[str] = Field(default=None, max_length=500)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class Product(SQLModel, table=True):
    """
    Product in a category.

    Only the category_id foreign key is stored; the category name shown to
    clients is joined in at read time. At most one of image_base64 (data URI)
    and image_path (relative to IMAGE_ROOT) is set.
    """
    __tablename__ = "products"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=200, index=True)
    description: Optional[str] = Field(default=None, max_length=1000)
    price: Decimal = Field(max_digits=18, decimal_places=2)
    stock: int = Field(default=0, ge=0)
    category_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("categories.id", ondelete="RESTRICT"),
            nullable=False,
            index=True,
        )
    )
    image_base64: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    image_path: Optional[str] = Field(default=None, max_length=500)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
