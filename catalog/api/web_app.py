# Standard library
import time
import traceback
import uuid
from contextlib import asynccontextmanager

# Third party
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute

# Local imports
from catalog.core.config import settings
from catalog.core.logging import get_logger
from catalog.db.base import check_database_connection
import catalog.api as api


logger = get_logger(__name__)


def log_routes(app: FastAPI) -> None:
    logger.info("Available routes:")
    for route in app.routes:
        if isinstance(route, APIRoute):
            methods = ",".join(sorted(route.methods))
            logger.info(f"   {methods:<12} {route.path}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI application startup and shutdown events"""
    # Startup
    logger.info(f"Catalog API starting up ({settings.ENVIRONMENT})...")

    try:
        check_database_connection()
        logger.info("Database connection successful")
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        raise

    log_routes(app)
    logger.info(f"API docs available at /api-docs (port {settings.PORT})")

    yield  # This is where FastAPI serves the application

    # Shutdown
    logger.info("Catalog API shutting down...")


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""

    app = FastAPI(
        title="Tech Deals Catalog",
        description="Product and deal catalog for consumer electronics.",
        version="1.0.0",
        docs_url="/api-docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        default_response_class=JSONResponse,
    )

    for name, router in api.catalog_routers:
        app.include_router(router, tags=[name])

    app.include_router(api.health_router)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    if not settings.is_production:

        @app.middleware("http")
        async def log_requests(request: Request, call_next):
            request_id = str(uuid.uuid4())[:8]
            start_time = time.time()
            logger.info(f"[{request_id}] {request.method} {request.url.path}")

            response = await call_next(request)

            process_time = time.time() - start_time
            logger.info(
                f"[{request_id}] {response.status_code} in {process_time:.4f}s"
            )
            return response

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled error on {request.method} {request.url.path}: {exc}",
            exc_info=exc,
        )
        content = {"success": False, "error": "Internal server error"}
        if not settings.is_production:
            content["message"] = str(exc)
            content["stack"] = traceback.format_exception(
                type(exc), exc, exc.__traceback__
            )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content
        )

    return app


app = create_app()
