import asyncio
import logging
import math
import re
import secrets
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import ExecutionTimeout, NetworkTimeout, ServerSelectionTimeoutError

from lms_backend.config import (
    MONGO_URL, MONGO_DB_NAME, MONGO_SERVER_SELECTION_TIMEOUT_MS,
    DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
)
from lms_backend.errors import StoreTimeoutError

logger = logging.getLogger(__name__)

_client: Optional[AsyncIOMotorClient] = None


def get_client() -> AsyncIOMotorClient:
    """Create the Motor client on first use"""
    global _client
    if _client is None:
        _client = AsyncIOMotorClient(
            MONGO_URL,
            serverSelectionTimeoutMS=MONGO_SERVER_SELECTION_TIMEOUT_MS,
        )
    return _client


def get_db_instance() -> AsyncIOMotorDatabase:
    return get_client()[MONGO_DB_NAME]


def close_client():
    global _client
    if _client is not None:
        _client.close()
        _client = None


# ==================== DEPENDENCY FUNCTIONS ====================

async def get_db() -> AsyncIOMotorDatabase:
    """Database dependency (overridden in tests)"""
    return get_db_instance()


# ==================== HELPERS ====================

def generate_id(prefix: str) -> str:
    """Generate unique ID with prefix"""
    return f"{prefix}_{secrets.token_hex(8).upper()}"


def clean_doc(doc: Optional[dict]) -> Optional[dict]:
    """Drop Mongo's internal _id (we key everything by our own ids)"""
    if doc is not None:
        doc.pop("_id", None)
    return doc


def clean_many(docs: list) -> list:
    return [clean_doc(doc) for doc in docs]


def page_window(page: int, limit: Optional[int]) -> tuple[int, int, int]:
    """Normalize page/limit query params into (page, limit, skip)"""
    page = max(page, 1)
    limit = min(max(limit or DEFAULT_PAGE_SIZE, 1), MAX_PAGE_SIZE)
    return page, limit, (page - 1) * limit


def pagination_block(page: int, limit: int, total: int, total_key: str) -> dict:
    total_pages = math.ceil(total / limit) if total else 0
    return {
        "current_page": page,
        "total_pages": total_pages,
        total_key: total,
        "has_next": page < total_pages,
        "has_prev": page > 1,
    }


# ==================== DATABASE INDEXES ====================

async def create_indexes(db: AsyncIOMotorDatabase):
    """
    Create database indexes (unique constraints included)
    Called during application startup
    """

    # Identities
    await db.students.create_index("student_id", unique=True)
    await db.students.create_index("email", unique=True)
    await db.students.create_index("student_number", unique=True)
    await db.students.create_index([("status", 1), ("academic_level", 1)])

    await db.instructors.create_index("instructor_id", unique=True)
    await db.instructors.create_index("email", unique=True)

    # Conversations: one document per unordered participant pair
    await db.conversations.create_index("conversation_id", unique=True)
    await db.conversations.create_index("pair_key", unique=True)
    await db.conversations.create_index([("participant_ids", 1), ("updated_at", -1)])

    # Courses
    await db.courses.create_index("course_id", unique=True)
    await db.courses.create_index("title", unique=True)
    await db.courses.create_index("instructor_id")
    await db.courses.create_index([("category", 1), ("status", 1)])

    # Enrollments
    await db.enrollments.create_index("enrollment_id", unique=True)
    await db.enrollments.create_index([("student_id", 1), ("course_id", 1)], unique=True)
    await db.enrollments.create_index("course_id")
    await db.enrollments.create_index([("enrollment_date", -1)])

    # Contact messages
    await db.contacts.create_index("contact_id", unique=True)
    await db.contacts.create_index("email", unique=True)
    await db.contacts.create_index([("created_at", -1)])

    # Profiles: at most one per identity
    await db.profiles.create_index("profile_id", unique=True)
    await db.profiles.create_index([("owner_id", 1), ("owner_variant", 1)], unique=True)

    # Platform users
    await db.users.create_index("user_id", unique=True)
    await db.users.create_index("email", unique=True)

    logger.info("Database indexes created")


# ==================== BOUNDED CALLS ====================

async def bounded(awaitable, timeout: float, operation: str):
    """
    Await a database call with an upper time bound
    Client-side and server-side timeouts both surface as StoreTimeoutError
    """
    try:
        return await asyncio.wait_for(awaitable, timeout)
    except (asyncio.TimeoutError, NetworkTimeout, ExecutionTimeout, ServerSelectionTimeoutError) as exc:
        logger.warning("Database call %s timed out after %.1fs: %s", operation, timeout, exc)
        raise StoreTimeoutError(f"Database timed out during {operation}, please retry") from exc


# ==================== QUERY HELPERS ====================

def search_filter(query: Optional[str], fields) -> dict:
    """Case-insensitive substring match over several fields"""
    if not query or not query.strip():
        return {}
    pattern = re.escape(query.strip())
    return {"$or": [{field: {"$regex": pattern, "$options": "i"}} for field in fields]}
