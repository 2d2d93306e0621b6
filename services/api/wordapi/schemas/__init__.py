"""Pydantic schemas for API request/response validation."""

from wordapi.schemas.categories import Category, CategoryCreate, CategoryCreated
from wordapi.schemas.common import ErrorDetail, ErrorResponse

__all__ = [
    "Category",
    "CategoryCreate",
    "CategoryCreated",
    "ErrorDetail",
    "ErrorResponse",
]
