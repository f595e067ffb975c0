from datetime import datetime, UTC
import time

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from src.app.core.config import logger
from src.app.db.session import check_db_connection

router = APIRouter()

STARTED_AT = time.monotonic()


@router.get("/health")
def health():
    """
    Report liveness and database connectivity.

    Returns 503 when the database cannot be reached.
    """
    timestamp = datetime.now(UTC).isoformat()
    try:
        check_db_connection()
    except SQLAlchemyError as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "unhealthy",
                "tier": "application",
                "timestamp": timestamp,
                "database": "disconnected",
                "error": "Database connection failed",
            },
        )

    return {
        "status": "healthy",
        "tier": "application",
        "timestamp": timestamp,
        "database": "connected",
        "uptime": round(time.monotonic() - STARTED_AT, 3),
    }
