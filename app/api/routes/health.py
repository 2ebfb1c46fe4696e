import logging

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.config.settings import settings
from app.core.db import engine

logger = logging.getLogger("health")

router = APIRouter()


@router.get("/")
async def health():
    return {"status": "ok", "message": f"{settings.APP_NAME} running"}


@router.get("/health/db")
async def health_db():
    """Round-trip a trivial query to the database."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.error("Database health check failed: %s", exc)
        return {"status": "error", "database": "unreachable"}
    return {"status": "ok", "database": "ok"}
