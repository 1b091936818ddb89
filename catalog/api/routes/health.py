"""Health check endpoint for monitoring service status"""
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session
from datetime import datetime, timezone

from catalog.core.config import settings
from catalog.db.base import get_db_session

health_router = APIRouter(tags=["health"])


@health_router.get(
    "/health",
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Check that the API is up and the database answers",
)
async def health_check(db: Session = Depends(get_db_session)):
    """Health check including the database"""
    health_status = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": "catalog-api",
        "environment": settings.ENVIRONMENT,
    }

    try:
        db.execute(text("SELECT 1"))
        health_status["database"] = "connected"
    except Exception as e:
        health_status["status"] = "unhealthy"
        health_status["database"] = f"Database connection failed: {str(e)}"
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=health_status
        )

    return health_status
