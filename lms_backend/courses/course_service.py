import logging
from datetime import datetime
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from lms_backend.courses.course_models import Course, CourseStatus
from lms_backend.courses.course_schemas import CourseCreate, CourseUpdate
from lms_backend.database import generate_id, page_window, pagination_block, search_filter
from lms_backend.errors import ConflictError, NotFoundError
from lms_backend.identity.identity_models import IdentityVariant, make_ref, display_name
from lms_backend.identity.identity_store import IdentityStore

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("title", "description", "tags")


async def attach_instructors(db: AsyncIOMotorDatabase, courses: List[dict]) -> List[dict]:
    """
    Fill in course["instructor"] = {id, display_name, email}
    One identity query for the whole page, deleted instructors stay null
    """
    refs = [make_ref(c["instructor_id"], IdentityVariant.INSTRUCTOR) for c in courses]
    records = await IdentityStore(db).resolve_many(refs)

    for course in courses:
        record = records.get((course["instructor_id"], IdentityVariant.INSTRUCTOR.value))
        course["instructor"] = {
            "id": course["instructor_id"],
            "display_name": display_name(record) if record else None,
            "email": record.get("email") if record else None,
        }
    return courses

# ==================== COURSE CRUD ====================


async def create_course(db: AsyncIOMotorDatabase, data: CourseCreate) -> dict:
    """
    Raises:
        404: Instructor does not exist
        409: Title already used
    """
    if not await IdentityStore(db).exists(data.instructor_id, IdentityVariant.INSTRUCTOR):
        raise NotFoundError("Instructor not found")

    if await db.courses.find_one({"title": data.title}, {"_id": 1}):
        raise ConflictError("Course with this title already exists")

    course = Course(course_id=generate_id("CRS"), **data.model_dump())
    doc = course.model_dump()

    try:
        await db.courses.insert_one(doc)
    except DuplicateKeyError:
        raise ConflictError("Course with this title already exists")

    doc.pop("_id", None)
    logger.info("Course %s created by %s", doc["course_id"], doc["instructor_id"])
    return (await attach_instructors(db, [doc]))[0]


async def get_course(db: AsyncIOMotorDatabase, course_id: str) -> dict:
    course = await db.courses.find_one({"course_id": course_id}, {"_id": 0})
    if not course:
        raise NotFoundError("Course not found")
    return (await attach_instructors(db, [course]))[0]


async def list_courses(
    db: AsyncIOMotorDatabase,
    page: int = 1,
    limit: Optional[int] = None,
    category: Optional[str] = None,
    level: Optional[str] = None,
    status: Optional[str] = None,
    search: Optional[str] = None
) -> dict:
    page, limit, skip = page_window(page, limit)

    query = search_filter(search, SEARCH_FIELDS)
    if category:
        query["category"] = category
    if level:
        query["level"] = level
    if status:
        query["status"] = status

    cursor = db.courses.find(query, {"_id": 0}).sort("created_at", -1).skip(skip).limit(limit)
    courses = await cursor.to_list(length=limit)
    total = await db.courses.count_documents(query)

    return {
        "courses": await attach_instructors(db, courses),
        "pagination": pagination_block(page, limit, total, "total_courses")
    }


async def list_featured_courses(db: AsyncIOMotorDatabase) -> List[dict]:
    cursor = db.courses.find(
        {"is_featured": True, "status": CourseStatus.PUBLISHED.value},
        {"_id": 0}
    ).sort("created_at", -1)
    return await attach_instructors(db, await cursor.to_list(length=None))


async def list_courses_by_category(db: AsyncIOMotorDatabase, category: str) -> List[dict]:
    """Published courses only"""
    cursor = db.courses.find(
        {"category": category, "status": CourseStatus.PUBLISHED.value},
        {"_id": 0}
    ).sort("created_at", -1)
    return await attach_instructors(db, await cursor.to_list(length=None))


async def list_instructor_courses(db: AsyncIOMotorDatabase, instructor_id: str) -> dict:
    """
    Every course of an instructor (any status) with summary counts
    """
    cursor = db.courses.find({"instructor_id": instructor_id}, {"_id": 0}).sort("created_at", -1)
    courses = await attach_instructors(db, await cursor.to_list(length=None))

    def count(status: CourseStatus) -> int:
        return sum(1 for c in courses if c.get("status") == status.value)

    return {
        "courses": courses,
        "total_courses": len(courses),
        "instructor_stats": {
            "total_courses": len(courses),
            "published_courses": count(CourseStatus.PUBLISHED),
            "draft_courses": count(CourseStatus.DRAFT),
            "archived_courses": count(CourseStatus.ARCHIVED),
            "total_enrollments": sum(c.get("enrollment_count", 0) for c in courses),
        }
    }


async def update_course(db: AsyncIOMotorDatabase, course_id: str, data: CourseUpdate) -> dict:
    """
    Raises:
        404: Course not found
        409: New title already used by another course
    """
    updates = data.model_dump(exclude_unset=True, exclude_none=True, mode="json")

    if "title" in updates:
        taken = await db.courses.find_one(
            {"title": updates["title"], "course_id": {"$ne": course_id}},
            {"_id": 1}
        )
        if taken:
            raise ConflictError("Course with this title already exists")

    return await _apply_update(db, course_id, updates)


async def update_course_status(db: AsyncIOMotorDatabase, course_id: str, status: CourseStatus) -> dict:
    course = await _apply_update(db, course_id, {"status": status.value})
    logger.info("Course %s status set to %s", course_id, status.value)
    return course


async def delete_course(db: AsyncIOMotorDatabase, course_id: str):
    result = await db.courses.delete_one({"course_id": course_id})
    if result.deleted_count == 0:
        raise NotFoundError("Course not found")
    logger.info("Course %s deleted", course_id)


async def _apply_update(db: AsyncIOMotorDatabase, course_id: str, updates: dict) -> dict:
    updates["updated_at"] = datetime.utcnow()
    try:
        course = await db.courses.find_one_and_update(
            {"course_id": course_id},
            {"$set": updates},
            projection={"_id": 0},
            return_document=ReturnDocument.AFTER
        )
    except DuplicateKeyError:
        raise ConflictError("Course with this title already exists")

    if not course:
        raise NotFoundError("Course not found")
    return (await attach_instructors(db, [course]))[0]
