"""
Model registration for migrations and create_all: import every table model here.
"""
from apps.auth.models import User
from apps.catalog.models import Category, Product

__all__ = ["User", "Category", "Product"]
