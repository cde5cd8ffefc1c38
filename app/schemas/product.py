from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
from datetime import datetime
from typing import Optional
from uuid import UUID

from app.utils.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, page_offset


class ProductFilters(BaseModel):
    """
    Normalized filter set for product listing.

    Out-of-range values are clamped instead of rejected:
    page < 1 becomes 1, page_size outside [1, 100] becomes 10 (too small)
    or 100 (too large), negative prices become 0.
    """
    product_name: Optional[str] = None
    category: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    page: Optional[int] = None
    page_size: Optional[int] = None

    @model_validator(mode="after")
    def apply_defaults(self) -> "ProductFilters":
        if self.page is None or self.page < 1:
            self.page = 1
        if self.page_size is None or self.page_size < 1:
            self.page_size = DEFAULT_PAGE_SIZE
        if self.page_size > MAX_PAGE_SIZE:
            self.page_size = MAX_PAGE_SIZE
        if self.min_price is None or self.min_price < 0:
            self.min_price = 0.0
        if self.max_price is None or self.max_price < 0:
            self.max_price = 0.0
        if not self.product_name:
            self.product_name = None
        if not self.category:
            self.category = None
        return self

    @property
    def offset(self) -> int:
        return page_offset(self.page, self.page_size)

    @property
    def limit(self) -> int:
        return self.page_size


class ProductResponse(BaseModel):
    """Schema for a product row in API responses."""
    id: UUID
    name: str
    category: str
    price: float
    description: Optional[str] = None
    stock: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductListResponse(BaseModel):
    """Schema for paginated product list response."""
    data: list[ProductResponse]
    total: int
    page: int
    page_size: int = Field(..., alias="pageSize")
    total_pages: int = Field(..., alias="totalPages")

    model_config = ConfigDict(populate_by_name=True)


class CategoryListResponse(BaseModel):
    """Distinct categories present in the catalog."""
    categories: list[str]
    total: int


class ProductStats(BaseModel):
    """
    Aggregate statistics over all products.

    Aggregates come back as NULL from the database when the table is
    empty; they are reported as 0.
    """
    total_products: int = 0
    total_categories: int = 0
    average_price: float = 0.0
    min_price: float = 0.0
    max_price: float = 0.0
    total_stock: int = 0

    @field_validator("*", mode="before")
    @classmethod
    def null_to_zero(cls, value):
        return 0 if value is None else value
