from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session
import logging
import time
import psutil

from ....core.cache import cache
from ....core.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
def get_health(db: Session = Depends(get_db)):
    """Database, cache and host health - no authentication required"""
    health_status = {
        "status": "healthy",
        "timestamp": time.time(),
        "service": "examguard-api",
        "services": {}
    }

    try:
        db.execute(text("SELECT 1"))
        health_status["services"]["database"] = "healthy"
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        health_status["services"]["database"] = f"error: {e}"
        health_status["status"] = "unhealthy"

    if cache.enabled:
        health_status["services"]["cache"] = "healthy" if cache.health_check() else "unhealthy"
    else:
        health_status["services"]["cache"] = "disabled"

    try:
        health_status["system"] = {
            "cpu_percent": psutil.cpu_percent(),
            "memory_percent": psutil.virtual_memory().percent,
            "disk_percent": psutil.disk_usage('/').percent
        }
    except Exception as e:
        health_status["system"] = f"error: {e}"

    return health_status
