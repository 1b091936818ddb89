from catalog.db.repositories.product_repository import ProductRepository
from catalog.db.repositories.deal_repository import DealRepository

__all__ = [
    "ProductRepository",
    "DealRepository",
]
