import logging
import os
from pathlib import Path

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from formexport.core.config import settings
from formexport.core.database import get_db

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Health check endpoint - verifies database connectivity and blob storage access."""
    health_status = {
        "status": "healthy",
        "database": "disconnected",
        "storage": "unavailable",
    }

    # Check database
    try:
        db.execute(text("SELECT 1"))
        health_status["database"] = "connected"
    except Exception as e:
        logger.warning("Health check: database error: %s", e)
        health_status["status"] = "unhealthy"
        health_status["database"] = f"error: {str(e)}"

    # Check storage
    storage_path = Path(settings.STORAGE_PATH)
    if storage_path.is_dir() and os.access(storage_path, os.W_OK):
        health_status["storage"] = "writable"
    else:
        health_status["status"] = "unhealthy"
        health_status["storage"] = f"error: {storage_path} is not a writable directory"

    return health_status
