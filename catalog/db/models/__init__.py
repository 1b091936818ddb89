# catalog/db/models/__init__.py
from catalog.db.models.product import Product
from catalog.db.models.deal import Deal

__all__ = ["Product", "Deal"]
