# catalog/db/models/product.py
from sqlalchemy import (
    Column,
    String,
    Text,
    Float,
    Integer,
    Boolean,
    DateTime,
    Index,
    func,
    literal_column,
)
from catalog.db.base import Base


class Product(Base):
    """
    Catalog product imported from the category CSV files.
    Prices are whole units of the target currency.
    """

    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    sku = Column(
        String,
        unique=True,
        nullable=False,
        index=True,
        comment="{brand}-{category}-{model}-{suffix} stock keeping unit",
    )
    title = Column(String, nullable=False)
    description = Column(Text)
    price = Column(Integer, nullable=False, index=True)
    currency = Column(String(3), nullable=False, comment="Currency code (e.g., 'DZD')")
    category = Column(String, nullable=False, index=True)
    department = Column(String, nullable=False, index=True)
    image = Column(String, default="")
    stock = Column(Integer, nullable=False, default=0)
    rating = Column(Float, nullable=False)
    brand = Column(String, nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self):
        return f"<Product(id={self.id}, title='{self.title}', sku='{self.sku}')>"


# Must stay identical to the indexed expression for PostgreSQL to use the index
SEARCH_DOCUMENT = func.to_tsvector(
    literal_column("'english'"),
    Product.title
    + literal_column("' '")
    + func.coalesce(Product.description, literal_column("''")),
)

search_index = Index(
    "idx_products_search", SEARCH_DOCUMENT, postgresql_using="gin"
).ddl_if(dialect="postgresql")
