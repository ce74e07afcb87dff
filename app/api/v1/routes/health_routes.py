from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.database.connection import get_db, ping
from app.core.logger import get_logger

logger = get_logger("health_routes")

router = APIRouter(tags=["Health"])


@router.get("/health", summary="Liveness check")
async def health_check():
    return {"status": "healthy", "environment": settings.ENVIRONMENT}


@router.get("/ready", summary="Readiness check", description="Verifies the database answers a round-trip.")
async def readiness_check(db: AsyncSession = Depends(get_db)):
    try:
        await ping(db)
    except Exception as e:
        logger.error(f"Readiness check failed: {e}")
        return JSONResponse(status_code=503, content={"status": "unavailable", "database": "unreachable"})
    return {"status": "ready", "database": "ok"}
