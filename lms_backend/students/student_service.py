import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from lms_backend.config import SEARCH_RESULT_LIMIT
from lms_backend.database import generate_id, page_window, pagination_block, search_filter
from lms_backend.errors import NotFoundError, ValidationError
from lms_backend.identity import account_service as accounts
from lms_backend.identity.identity_models import IdentityVariant
from lms_backend.identity.identity_store import PRIVATE_FIELDS
from lms_backend.students.student_models import Student
from lms_backend.students.student_schemas import StudentRegister, StudentUpdate

logger = logging.getLogger(__name__)

STUDENT = IdentityVariant.STUDENT
SEARCH_FIELDS = ("first_name", "last_name", "email", "student_number")

# ==================== REGISTRATION / LOGIN ====================


async def register_student(db: AsyncIOMotorDatabase, data: StudentRegister) -> dict:
    """
    Create a student account and log it in

    Raises:
        409: Email or student number already registered
    """
    student = Student(
        student_id=generate_id("STU"),
        student_number=data.student_number,
        first_name=data.first_name,
        last_name=data.last_name,
        email=data.email.lower(),
        password=data.password,
        phone=data.phone or "NOT GIVEN",
        date_of_birth=data.date_of_birth,
        address=data.address or "",
        academic_level=data.academic_level
    )

    record = await accounts.insert_identity(
        db,
        STUDENT,
        student.model_dump(),
        {"email": "email", "student_number": "student number"}
    )
    return {
        "token": accounts.issue_token(record, STUDENT),
        "student": record,
        "message": "Student registered and logged in successfully"
    }


async def login_student(db: AsyncIOMotorDatabase, email: str, password: str) -> dict:
    record = await accounts.authenticate(db, STUDENT, email, password)
    return {
        "token": accounts.issue_token(record, STUDENT),
        "student": record,
        "message": "Login successful"
    }

# ==================== LOOKUPS ====================


async def list_students(
    db: AsyncIOMotorDatabase,
    page: int = 1,
    limit: Optional[int] = None,
    status: Optional[str] = None,
    academic_level: Optional[str] = None
) -> dict:
    page, limit, skip = page_window(page, limit)

    query = {}
    if status:
        query["status"] = status
    if academic_level:
        query["academic_level"] = academic_level

    cursor = db.students.find(query, PRIVATE_FIELDS).sort("created_at", -1).skip(skip).limit(limit)
    students = await cursor.to_list(length=limit)
    total = await db.students.count_documents(query)

    return {
        "students": students,
        "pagination": pagination_block(page, limit, total, "total_students")
    }


async def search_students(
    db: AsyncIOMotorDatabase,
    query: Optional[str] = None,
    status: Optional[str] = None,
    academic_level: Optional[str] = None
) -> dict:
    """
    Free-text search over names, email and student number

    Raises:
        400: No query and no filter given
    """
    if not (query and query.strip()) and not status and not academic_level:
        raise ValidationError("Search query or filter is required")

    mongo_filter = search_filter(query, SEARCH_FIELDS)
    if status:
        mongo_filter["status"] = status
    if academic_level:
        mongo_filter["academic_level"] = academic_level

    cursor = db.students.find(mongo_filter, PRIVATE_FIELDS).sort("enrollment_date", -1).limit(SEARCH_RESULT_LIMIT)
    results = await cursor.to_list(length=SEARCH_RESULT_LIMIT)

    return {
        "search_results": results,
        "total_results": len(results),
        "search_query": query,
        "filters": {"status": status, "academic_level": academic_level}
    }


async def get_student(db: AsyncIOMotorDatabase, student_id: str) -> dict:
    return await accounts.get_identity(db, STUDENT, student_id)


async def get_student_by_number(db: AsyncIOMotorDatabase, student_number: str) -> dict:
    student = await db.students.find_one({"student_number": student_number}, PRIVATE_FIELDS)
    if not student:
        raise NotFoundError("Student not found")
    return student

# ==================== UPDATES ====================


async def update_student(db: AsyncIOMotorDatabase, student_id: str, data: StudentUpdate) -> dict:
    updates = data.model_dump(exclude_unset=True, exclude_none=True, mode="json")
    # dates must stay datetimes in Mongo
    if data.date_of_birth is not None:
        updates["date_of_birth"] = data.date_of_birth

    student = await accounts.update_identity(db, STUDENT, student_id, updates)
    return {"message": "Student profile updated successfully", "student": student}


async def update_student_status(db: AsyncIOMotorDatabase, student_id: str, status: str) -> dict:
    await accounts.update_identity(db, STUDENT, student_id, {"status": status})
    logger.info("Student %s status set to %s", student_id, status)
    return {"message": "Student status updated successfully"}


async def change_student_password(
    db: AsyncIOMotorDatabase,
    student_id: str,
    current_password: str,
    new_password: str
) -> dict:
    await accounts.change_password(db, STUDENT, student_id, current_password, new_password)
    return {"message": "Password updated successfully"}


async def delete_student(db: AsyncIOMotorDatabase, student_id: str) -> dict:
    await accounts.delete_identity(db, STUDENT, student_id)
    return {"message": "Student deleted successfully"}
