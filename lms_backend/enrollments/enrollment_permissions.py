from motor.motor_asyncio import AsyncIOMotorDatabase

from lms_backend.auth.permissions import CallerContext
from lms_backend.errors import AccessDeniedError
from lms_backend.identity.identity_models import IdentityVariant


async def verify_enrollment_actor(
    db: AsyncIOMotorDatabase,
    caller: CallerContext,
    student_id: str,
    course_id: str,
    allow_student: bool = True
):
    """
    Students act on their own enrollments, instructors on enrollments in
    courses they own

    Raises:
        403: Neither applies
    """
    if allow_student and caller.variant == IdentityVariant.STUDENT and caller.identity_id == student_id:
        return

    if caller.variant == IdentityVariant.INSTRUCTOR:
        course = await db.courses.find_one({"course_id": course_id}, {"_id": 0, "instructor_id": 1})
        if course and course["instructor_id"] == caller.identity_id:
            return

    raise AccessDeniedError("Not authorized to manage this enrollment")
