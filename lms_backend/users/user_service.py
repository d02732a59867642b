import logging
from datetime import datetime
from typing import List

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from lms_backend.auth.auth_utils import create_access_token, hash_password, verify_password
from lms_backend.config import ADMIN_EMAILS
from lms_backend.database import generate_id
from lms_backend.errors import AuthenticationError, ConflictError, NotFoundError
from lms_backend.identity.identity_store import PRIVATE_FIELDS
from lms_backend.users.user_models import User, UserRole
from lms_backend.users.user_schemas import UserCreate

logger = logging.getLogger(__name__)


def _public(record: dict) -> dict:
    return {k: v for k, v in record.items() if k not in PRIVATE_FIELDS}

# ==================== SIGNUP / LOGIN ====================


async def create_user(db: AsyncIOMotorDatabase, data: UserCreate) -> dict:
    """
    Signup always yields the user role, unless the email is configured
    as an admin email

    Raises:
        409: Email already registered
    """
    email = data.email.strip().lower()
    if await db.users.find_one({"email": email}, {"_id": 1}):
        raise ConflictError("User with this email already exists")

    user = User(
        user_id=generate_id("USR"),
        first_name=data.first_name,
        last_name=(data.last_name or "").strip(),
        email=email,
        password=hash_password(data.password),
        role=UserRole.ADMIN if email in ADMIN_EMAILS else UserRole.USER
    )
    record = user.model_dump()

    try:
        await db.users.insert_one(record)
    except DuplicateKeyError:
        raise ConflictError("User with this email already exists")

    logger.info("Created %s account %s", record["role"], record["user_id"])
    return {"message": "User created successfully", "user": _public(record)}


async def login_user(db: AsyncIOMotorDatabase, email: str, password: str) -> dict:
    """
    Raises:
        401: Unknown email or wrong password
    """
    record = await db.users.find_one({"email": email.strip().lower()})
    if not record or not verify_password(password, record.get("password", "")):
        logger.info("Failed user login for %s", email)
        raise AuthenticationError("Invalid credentials")

    token = create_access_token(record["user_id"], record["role"], record["email"])
    logger.info("User %s logged in", record["user_id"])
    return {"token": token, "message": "Login successful", "user": _public(record)}

# ==================== ADMINISTRATION ====================


async def list_users(db: AsyncIOMotorDatabase) -> List[dict]:
    cursor = db.users.find({}, PRIVATE_FIELDS).sort("created_at", -1)
    return await cursor.to_list(length=None)


async def delete_user(db: AsyncIOMotorDatabase, user_id: str) -> dict:
    result = await db.users.delete_one({"user_id": user_id})
    if result.deleted_count == 0:
        raise NotFoundError("User not found")

    logger.info("Deleted user %s", user_id)
    return {"message": "User deleted successfully"}


async def update_user_role(db: AsyncIOMotorDatabase, user_id: str, role: UserRole) -> dict:
    result = await db.users.update_one(
        {"user_id": user_id},
        {"$set": {"role": role.value, "updated_at": datetime.utcnow()}}
    )
    if result.matched_count == 0:
        raise NotFoundError("User not found")

    logger.info("User %s role set to %s", user_id, role.value)
    return {"message": "User role updated successfully"}
