from sqlalchemy.orm import Session
from sqlalchemy import distinct, func, text
from sqlalchemy.exc import SQLAlchemyError
from typing import List
import logging

from app.models.product import Product
from app.schemas.product import ProductFilters, ProductStats
from app.utils.pagination import total_pages

logger = logging.getLogger(__name__)


class ProductQueryError(Exception):
    """Exception raised when a catalog query fails in the database."""

    def __init__(self, action: str, cause: Exception):
        super().__init__(str(cause))
        self.action = action
        self.cause = cause


class ProductService:
    """
    Read-only queries over the products table.

    This service handles:
    - Filtered, paginated product listing and its matching count
    - Distinct categories
    - Aggregate statistics

    Every query runs under a deadline. On PostgreSQL the deadline is a
    transaction-local ``statement_timeout`` so the server cancels the
    statement instead of the request hanging.
    """

    def __init__(self, db: Session, query_timeout: float = 5.0, aggregate_timeout: float = 3.0):
        self.db = db
        self.query_timeout = query_timeout
        self.aggregate_timeout = aggregate_timeout

    def _set_deadline(self, seconds: float) -> None:
        if self.db.get_bind().dialect.name != "postgresql":
            return
        # SET does not accept bind parameters
        self.db.execute(text(f"SET LOCAL statement_timeout = {int(seconds * 1000)}"))

    def _filtered_query(self, query, filters: ProductFilters):
        if filters.product_name:
            query = query.filter(Product.name.ilike(f"%{filters.product_name}%"))
        if filters.category:
            query = query.filter(Product.category == filters.category)
        if filters.min_price > 0:
            query = query.filter(Product.price >= filters.min_price)
        if filters.max_price > 0:
            query = query.filter(Product.price <= filters.max_price)
        return query

    def get_products(self, filters: ProductFilters) -> List[Product]:
        """
        Get one page of products matching the filters, ordered by id.

        Args:
            filters: Normalized filter set

        Returns:
            At most ``filters.limit`` products
        """
        try:
            self._set_deadline(self.query_timeout)
            query = self._filtered_query(self.db.query(Product), filters)
            return (
                query.order_by(Product.id)
                .offset(filters.offset)
                .limit(filters.limit)
                .all()
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error fetching products: {e}")
            raise ProductQueryError("Failed to fetch products", e)

    def count_products(self, filters: ProductFilters) -> int:
        """Count all products matching the filters, ignoring pagination."""
        try:
            self._set_deadline(self.query_timeout)
            query = self._filtered_query(self.db.query(func.count(Product.id)), filters)
            return query.scalar() or 0
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error counting products: {e}")
            raise ProductQueryError("Failed to count products", e)

    def list_products(self, filters: ProductFilters) -> tuple[List[Product], int, int]:
        """
        Get a page of products plus pagination metadata.

        Returns:
            Tuple of (products list, total count, total pages)
        """
        logger.info(
            "Listing products: name=%s category=%s min_price=%.2f max_price=%.2f page=%d page_size=%d",
            filters.product_name, filters.category, filters.min_price,
            filters.max_price, filters.page, filters.page_size,
        )
        products = self.get_products(filters)
        total = self.count_products(filters)
        pages = total_pages(total, filters.page_size)

        logger.info(
            "Returning %d of %d products (page %d of %d)",
            len(products), total, filters.page, pages,
        )
        return products, total, pages

    def get_categories(self) -> List[str]:
        """Distinct categories in lexicographic order."""
        try:
            self._set_deadline(self.aggregate_timeout)
            rows = (
                self.db.query(Product.category)
                .distinct()
                .order_by(Product.category)
                .all()
            )
            return [row[0] for row in rows]
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error fetching categories: {e}")
            raise ProductQueryError("Failed to fetch categories", e)

    def get_stats(self) -> ProductStats:
        """
        Aggregate statistics over the whole table.

        Returns:
            ProductStats with empty-table aggregates reported as 0
        """
        try:
            self._set_deadline(self.aggregate_timeout)
            row = self.db.query(
                func.count(Product.id).label("total_products"),
                func.count(distinct(Product.category)).label("total_categories"),
                func.avg(Product.price).label("average_price"),
                func.min(Product.price).label("min_price"),
                func.max(Product.price).label("max_price"),
                func.sum(Product.stock).label("total_stock"),
            ).one()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error fetching stats: {e}")
            raise ProductQueryError("Failed to fetch stats", e)

        return ProductStats(**row._asdict())
