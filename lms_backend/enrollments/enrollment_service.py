import logging
from datetime import datetime
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from lms_backend.config import SEARCH_RESULT_LIMIT
from lms_backend.database import generate_id, page_window, pagination_block, search_filter
from lms_backend.enrollments.enrollment_models import Enrollment, EnrollmentStatus
from lms_backend.errors import ConflictError, NotFoundError, ValidationError
from lms_backend.identity.identity_store import PRIVATE_FIELDS
from lms_backend.identity.identity_models import display_name

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("student_name", "course_title", "student_email")

# ==================== ENROLLMENT CRUD ====================


async def create_enrollment(db: AsyncIOMotorDatabase, student_id: str, course_id: str) -> dict:
    """
    Enroll a student and take one seat in the course

    Raises:
        404: Student or course not found
        409: Already enrolled, or the course is full
    """
    student = await db.students.find_one({"student_id": student_id}, PRIVATE_FIELDS)
    if not student:
        raise NotFoundError("Student not found")

    course = await db.courses.find_one({"course_id": course_id}, {"_id": 0})
    if not course:
        raise NotFoundError("Course not found")

    existing = await db.enrollments.find_one({"student_id": student_id, "course_id": course_id}, {"_id": 1})
    if existing:
        raise ConflictError("Student is already enrolled in this course")

    # Reserve the seat first, the guard on the count keeps it within max_students
    seat = await db.courses.update_one(
        {"course_id": course_id, "enrollment_count": {"$lt": course.get("max_students", 50)}},
        {"$inc": {"enrollment_count": 1}}
    )
    if seat.modified_count == 0:
        raise ConflictError("Course is full")

    enrollment = Enrollment(
        enrollment_id=generate_id("ENR"),
        student_id=student_id,
        course_id=course_id,
        student_name=display_name(student),
        student_email=student["email"],
        course_title=course["title"]
    )
    doc = enrollment.model_dump()

    try:
        await db.enrollments.insert_one(doc)
    except DuplicateKeyError:
        await _release_seat(db, course_id)
        raise ConflictError("Student is already enrolled in this course")

    doc.pop("_id", None)
    logger.info("Student %s enrolled in %s (%s)", student_id, course_id, doc["enrollment_id"])
    return doc


async def get_enrollment(db: AsyncIOMotorDatabase, enrollment_id: str) -> dict:
    enrollment = await db.enrollments.find_one({"enrollment_id": enrollment_id}, {"_id": 0})
    if not enrollment:
        raise NotFoundError("Enrollment not found")
    return enrollment


async def list_enrollments(
    db: AsyncIOMotorDatabase,
    page: int = 1,
    limit: Optional[int] = None,
    status: Optional[str] = None
) -> dict:
    page, limit, skip = page_window(page, limit)
    query = {"status": status} if status else {}

    cursor = db.enrollments.find(query, {"_id": 0}).sort("enrollment_date", -1).skip(skip).limit(limit)
    enrollments = await cursor.to_list(length=limit)
    total = await db.enrollments.count_documents(query)

    return {
        "enrollments": enrollments,
        "pagination": pagination_block(page, limit, total, "total_enrollments")
    }


async def list_student_enrollments(db: AsyncIOMotorDatabase, student_id: str) -> List[dict]:
    cursor = db.enrollments.find({"student_id": student_id}, {"_id": 0}).sort("enrollment_date", -1)
    return await cursor.to_list(length=None)


async def list_course_enrollments(db: AsyncIOMotorDatabase, course_id: str) -> List[dict]:
    cursor = db.enrollments.find({"course_id": course_id}, {"_id": 0}).sort("enrollment_date", -1)
    return await cursor.to_list(length=None)


async def search_enrollments(
    db: AsyncIOMotorDatabase,
    query: Optional[str] = None,
    status: Optional[str] = None
) -> dict:
    """
    Raises:
        400: Neither query nor status given
    """
    if not (query and query.strip()) and not status:
        raise ValidationError("Search query or status filter is required")

    mongo_filter = search_filter(query, SEARCH_FIELDS)
    if status:
        mongo_filter["status"] = status

    cursor = db.enrollments.find(mongo_filter, {"_id": 0}).sort("enrollment_date", -1).limit(SEARCH_RESULT_LIMIT)
    results = await cursor.to_list(length=SEARCH_RESULT_LIMIT)
    return {
        "search_results": results,
        "total_results": len(results),
        "search_query": query,
        "status_filter": status
    }


async def enrollment_stats(db: AsyncIOMotorDatabase) -> dict:
    """
    Totals, per-status distribution and the five most recent enrollments
    """
    cursor = db.enrollments.aggregate([
        {"$group": {"_id": "$status", "count": {"$sum": 1}}},
        {"$sort": {"count": -1}}
    ])
    distribution = [
        {"status": row["_id"], "count": row["count"]}
        for row in await cursor.to_list(length=None)
    ]
    by_status = {row["status"]: row["count"] for row in distribution}

    recent_cursor = db.enrollments.find({}, {"_id": 0}).sort("enrollment_date", -1).limit(5)

    return {
        "statistics": {
            "total": sum(by_status.values()),
            "active": by_status.get(EnrollmentStatus.ENROLLED.value, 0)
            + by_status.get(EnrollmentStatus.IN_PROGRESS.value, 0),
            "completed": by_status.get(EnrollmentStatus.COMPLETED.value, 0),
            "dropped": by_status.get(EnrollmentStatus.DROPPED.value, 0),
        },
        "status_distribution": distribution,
        "recent_enrollments": await recent_cursor.to_list(length=5)
    }

# ==================== UPDATES ====================


async def update_enrollment_status(db: AsyncIOMotorDatabase, enrollment_id: str, status: EnrollmentStatus) -> dict:
    """
    COMPLETED also stamps completion_date and sets progress to 100
    """
    updates = {"status": status.value}
    if status == EnrollmentStatus.COMPLETED:
        updates["completion_date"] = datetime.utcnow()
        updates["progress"] = 100

    return await _apply_update(db, enrollment_id, updates)


async def update_enrollment_grade(db: AsyncIOMotorDatabase, enrollment_id: str, grade: str) -> dict:
    return await _apply_update(db, enrollment_id, {"grade": grade})


async def update_enrollment_progress(db: AsyncIOMotorDatabase, enrollment_id: str, progress: float) -> dict:
    """
    100 completes the enrollment; any progress moves ENROLLED to IN PROGRESS

    Raises:
        400: progress outside 0-100
        404: Enrollment not found
    """
    if progress < 0 or progress > 100:
        raise ValidationError("Progress must be a number between 0 and 100")

    current = await get_enrollment(db, enrollment_id)

    updates = {"progress": progress}
    if progress == 100:
        updates["status"] = EnrollmentStatus.COMPLETED.value
        updates["completion_date"] = datetime.utcnow()
    elif progress > 0 and current["status"] == EnrollmentStatus.ENROLLED.value:
        updates["status"] = EnrollmentStatus.IN_PROGRESS.value

    return await _apply_update(db, enrollment_id, updates)


async def update_enrollment(db: AsyncIOMotorDatabase, enrollment_id: str, updates: dict) -> dict:
    """
    General update over status, grade and progress

    An explicit status wins over the progress rules; without one, progress
    moves the status the same way update_enrollment_progress does.

    Raises:
        400: Nothing to update, or progress outside 0-100
        404: Enrollment not found
    """
    updates = {k: v for k, v in updates.items() if k in ("status", "grade", "progress") and v is not None}
    if not updates:
        raise ValidationError("No fields to update")

    progress = updates.get("progress")
    if progress is not None and (progress < 0 or progress > 100):
        raise ValidationError("Progress must be a number between 0 and 100")

    current = await get_enrollment(db, enrollment_id)

    status = updates.get("status")
    if status == EnrollmentStatus.COMPLETED.value or (status is None and progress == 100):
        updates["status"] = EnrollmentStatus.COMPLETED.value
        updates["completion_date"] = datetime.utcnow()
        updates["progress"] = 100
    elif status is None and progress and current["status"] == EnrollmentStatus.ENROLLED.value:
        updates["status"] = EnrollmentStatus.IN_PROGRESS.value

    logger.info("Enrollment %s updated: %s", enrollment_id, sorted(updates))
    return await _apply_update(db, enrollment_id, updates)


async def delete_enrollment(db: AsyncIOMotorDatabase, enrollment_id: str):
    """Removes the enrollment and frees its seat"""
    enrollment = await db.enrollments.find_one_and_delete({"enrollment_id": enrollment_id})
    if not enrollment:
        raise NotFoundError("Enrollment not found")

    await _release_seat(db, enrollment["course_id"])
    logger.info("Enrollment %s deleted", enrollment_id)


async def _release_seat(db: AsyncIOMotorDatabase, course_id: str):
    await db.courses.update_one(
        {"course_id": course_id, "enrollment_count": {"$gt": 0}},
        {"$inc": {"enrollment_count": -1}}
    )


async def _apply_update(db: AsyncIOMotorDatabase, enrollment_id: str, updates: dict) -> dict:
    updates["updated_at"] = datetime.utcnow()
    enrollment = await db.enrollments.find_one_and_update(
        {"enrollment_id": enrollment_id},
        {"$set": updates},
        projection={"_id": 0},
        return_document=ReturnDocument.AFTER
    )
    if not enrollment:
        raise NotFoundError("Enrollment not found")
    return enrollment
