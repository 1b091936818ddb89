# catalog/db/repositories/product_repository.py
from typing import List, Optional, Dict, Any, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import or_, func
from sqlalchemy.exc import IntegrityError
from catalog.db.models.product import Product, SEARCH_DOCUMENT
from catalog.schemas.product import ProductCreate, ProductUpdate


class ProductRepository:
    """Repository for CRUD operations on Product model"""

    def __init__(self, db_session: Session):
        self.db_session = db_session

    def get_by_id(self, product_id: int) -> Optional[Product]:
        """Get product by ID"""
        return self.db_session.query(Product).filter(Product.id == product_id).first()

    def get_by_sku(self, sku: str) -> Optional[Product]:
        """Get product by SKU"""
        return self.db_session.query(Product).filter(Product.sku == sku).first()

    def _filtered(self, filters: Dict[str, Any]):
        query = self.db_session.query(Product)

        if not filters.get("include_inactive"):
            query = query.filter(Product.is_active.is_(True))

        if filters.get("department") is not None:
            query = query.filter(Product.department == filters["department"])

        if filters.get("category") is not None:
            query = query.filter(Product.category == filters["category"])

        if filters.get("brand") is not None:
            query = query.filter(func.lower(Product.brand) == filters["brand"].lower())

        if filters.get("price_min") is not None:
            query = query.filter(Product.price >= filters["price_min"])

        if filters.get("price_max") is not None:
            query = query.filter(Product.price <= filters["price_max"])

        return query

    def list_by_filter(
        self, filters: Dict[str, Any], skip: int = 0, limit: int = 100
    ) -> List[Product]:
        """
        List products with flexible filtering.

        Filters can include:
        - department, category, brand: exact match (brand is case-insensitive)
        - price_min / price_max: inclusive price bounds
        - include_inactive: also return soft-deleted products
        """
        return (
            self._filtered(filters)
            .order_by(Product.id)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count_by_filter(self, filters: Dict[str, Any]) -> int:
        return self._filtered(filters).count()

    def count(self) -> int:
        return self.db_session.query(func.count(Product.id)).scalar() or 0

    def search(self, term: str, skip: int = 0, limit: int = 100) -> List[Product]:
        """Search active products by title, description, brand or SKU"""
        search_term = f"%{term}%"
        conditions = [
            Product.title.ilike(search_term),
            Product.description.ilike(search_term),
            Product.brand.ilike(search_term),
            Product.sku.ilike(search_term),
        ]
        if self.db_session.get_bind().dialect.name == "postgresql":
            # Word matches through idx_products_search
            conditions.append(
                SEARCH_DOCUMENT.op("@@")(func.plainto_tsquery("english", term))
            )
        return (
            self.db_session.query(Product)
            .filter(Product.is_active.is_(True), or_(*conditions))
            .order_by(Product.rating.desc(), Product.id)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def list_low_stock(self, threshold: int, limit: int = 100) -> List[Product]:
        """Active products whose stock is below the threshold, lowest first"""
        return (
            self.db_session.query(Product)
            .filter(Product.is_active.is_(True), Product.stock < threshold)
            .order_by(Product.stock, Product.id)
            .limit(limit)
            .all()
        )

    def distinct_categories(self) -> List[str]:
        rows = (
            self.db_session.query(Product.category)
            .distinct()
            .order_by(Product.category)
            .all()
        )
        return [row[0] for row in rows]

    def count_by(self, column) -> List[Tuple[str, int]]:
        """(value, count) pairs for a grouping column, largest group first"""
        return (
            self.db_session.query(column, func.count(Product.id))
            .group_by(column)
            .order_by(func.count(Product.id).desc(), column)
            .all()
        )

    def averages(self) -> Tuple[float, float]:
        avg_price, avg_rating = self.db_session.query(
            func.avg(Product.price), func.avg(Product.rating)
        ).one()
        return float(avg_price or 0), float(avg_rating or 0)

    def count_active(self) -> int:
        return (
            self.db_session.query(func.count(Product.id))
            .filter(Product.is_active.is_(True))
            .scalar()
            or 0
        )

    def count_low_stock(self, threshold: int) -> int:
        return (
            self.db_session.query(func.count(Product.id))
            .filter(Product.is_active.is_(True), Product.stock < threshold)
            .scalar()
            or 0
        )

    def all_skus(self) -> List[str]:
        return [row[0] for row in self.db_session.query(Product.sku).all()]

    def list_deal_candidates(
        self, min_stock: int, min_rating: float, min_price: int
    ) -> List[Product]:
        """Active products with enough stock, rating, price and an image"""
        return (
            self.db_session.query(Product)
            .filter(
                Product.is_active.is_(True),
                Product.stock >= min_stock,
                Product.rating >= min_rating,
                Product.price >= min_price,
                Product.image.isnot(None),
                Product.image != "",
            )
            .order_by(Product.id)
            .all()
        )

    def create(self, product_data: ProductCreate) -> Product:
        """Create a new product"""
        db_product = Product(**product_data.model_dump())
        self.db_session.add(db_product)
        self.db_session.commit()
        self.db_session.refresh(db_product)
        return db_product

    def update(self, product_id: int, product_data: ProductUpdate) -> Optional[Product]:
        """Update an existing product"""
        db_product = self.get_by_id(product_id)

        if not db_product:
            return None

        for key, value in product_data.model_dump(exclude_unset=True).items():
            setattr(db_product, key, value)

        self.db_session.commit()
        self.db_session.refresh(db_product)
        return db_product

    def set_fields(self, product_id: int, **fields) -> Optional[Product]:
        db_product = self.get_by_id(product_id)
        if not db_product:
            return None
        for key, value in fields.items():
            setattr(db_product, key, value)
        self.db_session.commit()
        self.db_session.refresh(db_product)
        return db_product

    def delete(self, product_id: int) -> bool:
        """Delete a product by ID"""
        db_product = self.get_by_id(product_id)

        if not db_product:
            return False

        self.db_session.delete(db_product)
        self.db_session.commit()
        return True

    def delete_all(self) -> int:
        deleted = self.db_session.query(Product).delete(synchronize_session=False)
        self.db_session.commit()
        return deleted

    def bulk_insert(self, records: List[Dict[str, Any]]) -> int:
        """
        Insert a batch in one transaction.

        Raises:
            SQLAlchemyError: the whole batch is rolled back
        """
        try:
            self.db_session.add_all([Product(**record) for record in records])
            self.db_session.commit()
        except Exception:
            self.db_session.rollback()
            raise
        return len(records)

    def insert_each(self, records: List[Dict[str, Any]]) -> Tuple[int, List[str]]:
        """
        Insert rows one at a time, skipping those the store rejects.

        Returns:
            (inserted count, SKUs of rejected rows)
        """
        inserted = 0
        rejected = []
        for record in records:
            try:
                self.db_session.add(Product(**record))
                self.db_session.commit()
                inserted += 1
            except IntegrityError:
                self.db_session.rollback()
                rejected.append(record.get("sku"))
        return inserted, rejected
