from motor.motor_asyncio import AsyncIOMotorDatabase

from lms_backend.auth.permissions import CallerContext
from lms_backend.errors import AccessDeniedError, NotFoundError
from lms_backend.identity.identity_models import IdentityVariant


async def verify_course_owner(db: AsyncIOMotorDatabase, course_id: str, caller: CallerContext) -> dict:
    """
    Validates the caller is the instructor who owns the course

    Raises:
        404: Course not found
        403: Caller does not own the course
    """
    course = await db.courses.find_one({"course_id": course_id}, {"_id": 0, "instructor_id": 1})
    if not course:
        raise NotFoundError("Course not found")

    if caller.variant != IdentityVariant.INSTRUCTOR or course["instructor_id"] != caller.identity_id:
        raise AccessDeniedError("Not authorized to manage this course")

    return course
