import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from lms_backend.config import SEARCH_RESULT_LIMIT
from lms_backend.database import generate_id, page_window, pagination_block, search_filter
from lms_backend.errors import ValidationError
from lms_backend.identity import account_service as accounts
from lms_backend.identity.identity_store import PRIVATE_FIELDS
from lms_backend.identity.identity_models import IdentityVariant
from lms_backend.instructors.instructor_models import Instructor, SocialLinks
from lms_backend.instructors.instructor_schemas import InstructorRegister, InstructorUpdate

logger = logging.getLogger(__name__)

INSTRUCTOR = IdentityVariant.INSTRUCTOR
SEARCH_FIELDS = ("first_name", "last_name", "bio", "qualification")


async def register_instructor(db: AsyncIOMotorDatabase, data: InstructorRegister) -> dict:
    """
    Raises:
        409: Email already registered
    """
    instructor = Instructor(
        instructor_id=generate_id("INS"),
        first_name=data.first_name,
        last_name=data.last_name,
        email=data.email.lower(),
        password=data.password,
        phone=data.phone or "NOT GIVEN",
        bio=data.bio,
        expertise=data.expertise,
        experience=data.experience,
        qualification=data.qualification,
        social_links=SocialLinks(**data.social_links.model_dump())
    )

    record = await accounts.insert_identity(db, INSTRUCTOR, instructor.model_dump(), {"email": "email"})
    return {
        "token": accounts.issue_token(record, INSTRUCTOR),
        "instructor": record,
        "message": "Instructor registered successfully"
    }


async def login_instructor(db: AsyncIOMotorDatabase, email: str, password: str) -> dict:
    record = await accounts.authenticate(db, INSTRUCTOR, email, password)
    return {
        "token": accounts.issue_token(record, INSTRUCTOR),
        "instructor": record,
        "message": "Login successful"
    }


async def list_instructors(
    db: AsyncIOMotorDatabase,
    page: int = 1,
    limit: Optional[int] = None,
    expertise: Optional[str] = None,
    min_experience: Optional[int] = None
) -> dict:
    page, limit, skip = page_window(page, limit)

    query = {}
    if expertise:
        query["expertise"] = {"$in": [expertise]}
    if min_experience is not None:
        query["experience"] = {"$gte": min_experience}

    cursor = db.instructors.find(query, PRIVATE_FIELDS).sort("created_at", -1).skip(skip).limit(limit)
    instructors = await cursor.to_list(length=limit)
    total = await db.instructors.count_documents(query)

    return {
        "instructors": instructors,
        "pagination": pagination_block(page, limit, total, "total_instructors")
    }


async def search_instructors(
    db: AsyncIOMotorDatabase,
    query: Optional[str] = None,
    expertise: Optional[str] = None
) -> dict:
    """
    Raises:
        400: Neither query nor expertise given
    """
    if not (query and query.strip()) and not expertise:
        raise ValidationError("Search query or expertise filter is required")

    mongo_filter = search_filter(query, SEARCH_FIELDS)
    if expertise:
        mongo_filter["expertise"] = {"$in": [expertise]}

    cursor = db.instructors.find(mongo_filter, PRIVATE_FIELDS).sort("experience", -1).limit(SEARCH_RESULT_LIMIT)
    results = await cursor.to_list(length=SEARCH_RESULT_LIMIT)

    return {
        "search_results": results,
        "total_results": len(results),
        "search_query": query,
        "expertise_filter": expertise
    }


async def get_instructor(db: AsyncIOMotorDatabase, instructor_id: str) -> dict:
    return await accounts.get_identity(db, INSTRUCTOR, instructor_id)


async def update_instructor(db: AsyncIOMotorDatabase, instructor_id: str, data: InstructorUpdate) -> dict:
    updates = data.model_dump(exclude_unset=True, exclude_none=True)
    instructor = await accounts.update_identity(db, INSTRUCTOR, instructor_id, updates)
    logger.info("Instructor %s updated fields: %s", instructor_id, sorted(updates))
    return {"message": "Instructor profile updated successfully", "instructor": instructor}


async def change_instructor_password(
    db: AsyncIOMotorDatabase,
    instructor_id: str,
    current_password: str,
    new_password: str
) -> dict:
    await accounts.change_password(db, INSTRUCTOR, instructor_id, current_password, new_password)
    return {"message": "Password updated successfully"}


async def delete_instructor(db: AsyncIOMotorDatabase, instructor_id: str) -> dict:
    await accounts.delete_identity(db, INSTRUCTOR, instructor_id)
    return {"message": "Instructor deleted successfully"}
