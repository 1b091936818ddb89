# catalog/services/product_service.py
from typing import List, Optional, Dict, Any
import logging
from catalog.db.repositories.product_repository import ProductRepository
from catalog.db.models.product import Product
from catalog.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductInDB,
    ProductStats,
)

logger = logging.getLogger(__name__)

LOW_STOCK_THRESHOLD = 30


class DuplicateSkuError(ValueError):
    """Raised when a create or update would reuse another product's SKU."""

    pass


class ProductService:
    """Service for product-related business logic"""

    def __init__(self, db_session):
        self.db_session = db_session
        self.product_repo = ProductRepository(db_session)

    def get_product(self, product_id: int) -> Optional[ProductInDB]:
        """Get product by ID"""
        product = self.product_repo.get_by_id(product_id)
        if not product:
            return None
        return ProductInDB.model_validate(product)

    def get_by_sku(self, sku: str) -> Optional[ProductInDB]:
        """Get product by SKU"""
        product = self.product_repo.get_by_sku(sku)
        if not product:
            return None
        return ProductInDB.model_validate(product)

    def list_products(
        self, filters: Optional[Dict[str, Any]] = None, skip: int = 0, limit: int = 100
    ) -> List[ProductInDB]:
        """List products with filters and pagination"""
        products = self.product_repo.list_by_filter(filters or {}, skip, limit)
        return [ProductInDB.model_validate(p) for p in products]

    def count_products(self, filters: Optional[Dict[str, Any]] = None) -> int:
        return self.product_repo.count_by_filter(filters or {})

    def search_products(self, term: str, skip: int = 0, limit: int = 100) -> List[ProductInDB]:
        products = self.product_repo.search(term.strip(), skip, limit)
        return [ProductInDB.model_validate(p) for p in products]

    def list_low_stock(self, threshold: int = LOW_STOCK_THRESHOLD, limit: int = 100) -> List[ProductInDB]:
        products = self.product_repo.list_low_stock(threshold, limit)
        return [ProductInDB.model_validate(p) for p in products]

    def list_categories(self) -> List[str]:
        return self.product_repo.distinct_categories()

    def get_stats(self) -> ProductStats:
        total = self.product_repo.count()
        active = self.product_repo.count_active()
        average_price, average_rating = self.product_repo.averages()
        return ProductStats(
            total_products=total,
            active_products=active,
            inactive_products=total - active,
            average_price=round(average_price, 2),
            average_rating=round(average_rating, 2),
            low_stock_products=self.product_repo.count_low_stock(LOW_STOCK_THRESHOLD),
            by_category=dict(self.product_repo.count_by(Product.category)),
            by_department=dict(self.product_repo.count_by(Product.department)),
        )

    def create_product(self, product_data: ProductCreate) -> ProductInDB:
        """Create a new product"""
        if self.product_repo.get_by_sku(product_data.sku):
            raise DuplicateSkuError(f"Product with SKU '{product_data.sku}' already exists")
        product = self.product_repo.create(product_data)
        logger.info(f"Created product {product.id} ({product.sku})")
        return ProductInDB.model_validate(product)

    def update_product(self, product_id: int, product_data: ProductUpdate) -> Optional[ProductInDB]:
        """Update an existing product"""
        if product_data.sku:
            existing = self.product_repo.get_by_sku(product_data.sku)
            if existing and existing.id != product_id:
                raise DuplicateSkuError(f"Product with SKU '{product_data.sku}' already exists")

        product = self.product_repo.update(product_id, product_data)
        if not product:
            return None
        return ProductInDB.model_validate(product)

    def update_stock(self, product_id: int, stock: int) -> Optional[ProductInDB]:
        product = self.product_repo.set_fields(product_id, stock=stock)
        if not product:
            return None
        return ProductInDB.model_validate(product)

    def deactivate_product(self, product_id: int) -> Optional[ProductInDB]:
        """Soft delete: the product stays in the store with is_active=False"""
        product = self.product_repo.set_fields(product_id, is_active=False)
        if not product:
            return None
        logger.info(f"Deactivated product {product_id}")
        return ProductInDB.model_validate(product)

    def restore_product(self, product_id: int) -> Optional[ProductInDB]:
        product = self.product_repo.set_fields(product_id, is_active=True)
        if not product:
            return None
        logger.info(f"Restored product {product_id}")
        return ProductInDB.model_validate(product)

    def delete_product(self, product_id: int) -> bool:
        """Permanently delete a product; its deals are left untouched"""
        deleted = self.product_repo.delete(product_id)
        if deleted:
            logger.info(f"Hard-deleted product {product_id}")
        return deleted
