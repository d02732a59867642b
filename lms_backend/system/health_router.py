import logging
from datetime import datetime

from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from lms_backend.config import STORE_TIMEOUT_SECONDS
from lms_backend.database import bounded, get_db
from lms_backend.errors import StoreTimeoutError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["System"])


@router.get("")
async def health():
    """Process liveness, never touches the database"""
    return {"status": "ok"}


@router.get("/db")
async def database_health(db: AsyncIOMotorDatabase = Depends(get_db)):
    """
    Pings MongoDB and reports UP/DOWN with the round-trip latency
    """
    record = {
        "timestamp": datetime.utcnow(),
        "status": "UP",
        "latency_ms": None
    }

    start = datetime.utcnow()
    try:
        await bounded(db.command("ping"), STORE_TIMEOUT_SECONDS, "ping")
        record["latency_ms"] = round((datetime.utcnow() - start).total_seconds() * 1000, 2)
    except (StoreTimeoutError, PyMongoError) as exc:
        logger.warning("Database ping failed: %s", exc)
        record["status"] = "DOWN"

    return record
