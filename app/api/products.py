from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from app.config import Settings, get_settings
from app.database import get_db
from app.services.product_service import ProductService, ProductQueryError
from app.schemas.common import ErrorResponse
from app.schemas.product import (
    ProductFilters,
    ProductResponse,
    ProductListResponse,
    CategoryListResponse,
    ProductStats,
)
from app.utils.pagination import MAX_PAGE

router = APIRouter(tags=["Products"])

ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
}


def get_product_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> ProductService:
    return ProductService(
        db,
        query_timeout=settings.QUERY_TIMEOUT,
        aggregate_timeout=settings.AGGREGATE_TIMEOUT,
    )


def _query_failed(e: ProductQueryError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error": e.action, "message": str(e.cause)},
    )


@router.get(
    "/products",
    response_model=ProductListResponse,
    responses=ERROR_RESPONSES,
    summary="List products",
    description="Get a paginated list of products with optional name, category and price filters."
)
def list_products(
    product_name: Optional[str] = Query(None, alias="productName", description="Substring of the product name"),
    category: Optional[str] = Query(None, description="Exact category"),
    min_price: Optional[float] = Query(None, alias="minPrice", description="Minimum price"),
    max_price: Optional[float] = Query(None, alias="maxPrice", description="Maximum price"),
    page: Optional[int] = Query(None, le=MAX_PAGE, description="Page number, defaults to 1"),
    page_size: Optional[int] = Query(None, alias="pageSize", description="Items per page, 1-100, defaults to 10"),
    service: ProductService = Depends(get_product_service),
):
    """
    Get paginated list of products.

    Out-of-range page, pageSize and price values are clamped rather than
    rejected. Values that are not numbers, or pages whose offset would
    overflow a 64-bit integer, yield a 400.
    """
    filters = ProductFilters(
        product_name=product_name,
        category=category,
        min_price=min_price,
        max_price=max_price,
        page=page,
        page_size=page_size,
    )

    try:
        products, total, total_pages = service.list_products(filters)
    except ProductQueryError as e:
        raise _query_failed(e)

    return ProductListResponse(
        data=[ProductResponse.model_validate(p) for p in products],
        total=total,
        page=filters.page,
        page_size=filters.page_size,
        total_pages=total_pages
    )


@router.get(
    "/categories",
    response_model=CategoryListResponse,
    responses=ERROR_RESPONSES,
    summary="List categories",
    description="Get every distinct product category in lexicographic order."
)
def list_categories(service: ProductService = Depends(get_product_service)):
    """Get distinct categories."""
    try:
        categories = service.get_categories()
    except ProductQueryError as e:
        raise _query_failed(e)

    return CategoryListResponse(categories=categories, total=len(categories))


@router.get(
    "/stats",
    response_model=ProductStats,
    responses=ERROR_RESPONSES,
    summary="Catalog statistics",
    description="Get product count, category count, price aggregates and total stock."
)
def get_stats(service: ProductService = Depends(get_product_service)):
    """Get aggregate statistics. Empty catalogs report zeros."""
    try:
        return service.get_stats()
    except ProductQueryError as e:
        raise _query_failed(e)
