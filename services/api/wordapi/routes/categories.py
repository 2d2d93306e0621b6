"""Category endpoints.

GET  /categories?limit=N - refresh if needed, return newest categories.
POST /categories         - insert one user-supplied category.

Routers are thin: call the gateway for business logic.
"""

from fastapi import APIRouter, Depends, Query, Request, status

from wordapi.schemas import Category, CategoryCreate, CategoryCreated, ErrorResponse
from wordapi.services.gateway import CategoryGateway

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid categoryName or words"},
    409: {"model": ErrorResponse, "description": "categoryName already exists"},
    503: {"model": ErrorResponse, "description": "Store not ready"},
}


def get_gateway(request: Request) -> CategoryGateway:
    """Gateway built by the app factory. Tests can override this dependency."""
    return request.app.state.gateway


@router.get(
    "",
    response_model=list[Category],
    responses={503: ERROR_RESPONSES[503]},
)
async def list_categories(
    limit: str | None = Query(
        default=None,
        description="Page size, clamped to 1..1000 (default 100 when missing or not a number)",
        examples=["100"],
    ),
    gateway: CategoryGateway = Depends(get_gateway),
) -> list[Category]:
    """Get the newest categories, regenerating first if the set is stale or over capacity."""
    records = await gateway.get(limit)
    return [Category.from_record(r) for r in records]


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=CategoryCreated,
    responses=ERROR_RESPONSES,
)
async def create_category(
    payload: CategoryCreate,
    gateway: CategoryGateway = Depends(get_gateway),
) -> CategoryCreated:
    """Create a category from user input."""
    new_id = await gateway.create(payload.category_name, payload.words)
    return CategoryCreated(inserted_id=new_id)
