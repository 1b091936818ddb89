from .routes import catalog_routers, health_router

__all__ = ["catalog_routers", "health_router"]
