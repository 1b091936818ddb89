from catalog.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductInDB,
    StockUpdate,
)
from catalog.schemas.deal import DealCreate, DealUpdate, DealInDB

__all__ = [
    "ProductCreate",
    "ProductUpdate",
    "ProductInDB",
    "StockUpdate",
    "DealCreate",
    "DealUpdate",
    "DealInDB",
]
