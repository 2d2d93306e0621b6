"""API routes."""

from fastapi import APIRouter

from wordapi.routes import categories

api_router = APIRouter()

# Word categories (read with refresh, user create)
api_router.include_router(categories.router, prefix="/categories", tags=["categories"])
