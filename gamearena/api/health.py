"""
Health check endpoint
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from gamearena.db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check(session: AsyncSession = Depends(get_db)):
    """
    Liveness plus a database round trip.
    Returns 200 {"status": "ok"} or 503 when the database is unreachable.
    """
    try:
        await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Health check database probe failed: {e}")
        return JSONResponse(
            status_code=503,
            content={"status": "degraded", "database": "unreachable"}
        )
    return {"status": "ok"}
