from .products import products_router, categories_router
from .deals import deals_router
from .health import health_router

catalog_routers = [
    ("products", products_router),
    ("categories", categories_router),
    ("deals", deals_router),
]

__all__ = ["catalog_routers", "health_router"]
