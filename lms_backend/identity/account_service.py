"""
Account operations shared by students and instructors

Both identity tables store the same account fields (email, bcrypt password,
names, timestamps); everything table specific is passed in by the caller.
"""

import logging
from datetime import datetime
from typing import Dict

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from lms_backend.auth.auth_utils import hash_password, verify_password, create_access_token
from lms_backend.errors import AccessDeniedError, AuthenticationError, ConflictError, NotFoundError
from lms_backend.identity.identity_models import IdentityVariant, IDENTITY_TABLES
from lms_backend.identity.identity_store import PRIVATE_FIELDS

logger = logging.getLogger(__name__)


def _table(db: AsyncIOMotorDatabase, variant: IdentityVariant):
    collection, id_field = IDENTITY_TABLES[variant]
    return db[collection], id_field


def public_record(record: dict) -> dict:
    """Copy of an identity record that is safe to return"""
    return {k: v for k, v in record.items() if k not in PRIVATE_FIELDS}


def issue_token(record: dict, variant: IdentityVariant) -> str:
    _, id_field = IDENTITY_TABLES[variant]
    return create_access_token(record[id_field], variant.value, record["email"])

# ==================== REGISTRATION / LOGIN ====================


async def insert_identity(
    db: AsyncIOMotorDatabase,
    variant: IdentityVariant,
    record: dict,
    unique_fields: Dict[str, str]
) -> dict:
    """
    Insert a new identity after checking its unique fields

    Args:
        record: full document, password still in plain text
        unique_fields: field -> label used in the conflict message

    Raises:
        409: email (or another unique field) already registered
    """
    collection, id_field = _table(db, variant)
    label = variant.value.capitalize()

    for field, field_label in unique_fields.items():
        if await collection.find_one({field: record[field]}, {"_id": 1}):
            raise ConflictError(f"{label} with this {field_label} already exists")

    record["password"] = hash_password(record["password"])
    try:
        await collection.insert_one(record)
    except DuplicateKeyError:
        # Concurrent registration slipped past the pre-check
        raise ConflictError(f"{label} with these details already exists")

    logger.info("Registered %s %s", variant.value, record[id_field])
    return public_record(record)


async def authenticate(db: AsyncIOMotorDatabase, variant: IdentityVariant, email: str, password: str) -> dict:
    """
    Raises:
        401: Unknown email or wrong password
    """
    collection, id_field = _table(db, variant)
    record = await collection.find_one({"email": email.strip().lower()})

    if not record or not verify_password(password, record.get("password", "")):
        logger.info("Failed %s login for %s", variant.value, email)
        raise AuthenticationError("Invalid credentials")

    logger.info("%s %s logged in", variant.value.capitalize(), record[id_field])
    return public_record(record)

# ==================== PROFILE ====================


async def get_identity(db: AsyncIOMotorDatabase, variant: IdentityVariant, identity_id: str) -> dict:
    collection, id_field = _table(db, variant)
    record = await collection.find_one({id_field: identity_id}, PRIVATE_FIELDS)
    if not record:
        raise NotFoundError(f"{variant.value.capitalize()} not found")
    return record


async def update_identity(
    db: AsyncIOMotorDatabase,
    variant: IdentityVariant,
    identity_id: str,
    updates: dict
) -> dict:
    """
    Apply a partial profile update (password is never updated here)

    Raises:
        404: Identity not found
        409: New email already used by another identity of this variant
    """
    collection, id_field = _table(db, variant)
    updates = {k: v for k, v in updates.items() if k != "password"}

    if updates.get("email"):
        updates["email"] = updates["email"].strip().lower()
        taken = await collection.find_one(
            {"email": updates["email"], id_field: {"$ne": identity_id}},
            {"_id": 1}
        )
        if taken:
            raise ConflictError("Email is already in use")

    updates["updated_at"] = datetime.utcnow()
    try:
        record = await collection.find_one_and_update(
            {id_field: identity_id},
            {"$set": updates},
            projection=PRIVATE_FIELDS,
            return_document=ReturnDocument.AFTER
        )
    except DuplicateKeyError:
        # Concurrent email change slipped past the pre-check
        raise ConflictError("Email is already in use")
    if not record:
        raise NotFoundError(f"{variant.value.capitalize()} not found")
    return record


async def change_password(
    db: AsyncIOMotorDatabase,
    variant: IdentityVariant,
    identity_id: str,
    current_password: str,
    new_password: str
):
    """
    Raises:
        404: Identity not found
        403: Current password is incorrect
    """
    collection, id_field = _table(db, variant)
    record = await collection.find_one({id_field: identity_id})
    if not record:
        raise NotFoundError(f"{variant.value.capitalize()} not found")

    if not verify_password(current_password, record.get("password", "")):
        raise AccessDeniedError("Current password is incorrect")

    await collection.update_one(
        {id_field: identity_id},
        {"$set": {"password": hash_password(new_password), "updated_at": datetime.utcnow()}}
    )
    logger.info("Password changed for %s %s", variant.value, identity_id)


async def delete_identity(db: AsyncIOMotorDatabase, variant: IdentityVariant, identity_id: str):
    """
    The profile goes with the identity. Conversations that reference it are
    kept, their references simply stop resolving.
    """
    collection, id_field = _table(db, variant)
    result = await collection.delete_one({id_field: identity_id})
    if result.deleted_count == 0:
        raise NotFoundError(f"{variant.value.capitalize()} not found")
    await db.profiles.delete_one({"owner_id": identity_id, "owner_variant": variant.value})
    logger.info("Deleted %s %s", variant.value, identity_id)
