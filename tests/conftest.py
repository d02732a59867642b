import os

os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

import httpx
import pytest
from mongomock_motor import AsyncMongoMockClient

from lms_backend.auth.auth_utils import create_access_token, hash_password
from lms_backend.database import create_indexes, generate_id, get_db
from lms_backend.identity.identity_models import IdentityVariant
from lms_backend.instructors.instructor_models import Instructor
from lms_backend.main import app
from lms_backend.students.student_models import Student

PASSWORD = "secret123"


@pytest.fixture()
async def db():
    """Fresh in-memory database with every index in place"""
    database = AsyncMongoMockClient()["lms_test"]
    await create_indexes(database)
    return database


@pytest.fixture()
async def client(db):
    async def override_get_db():
        return db

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()

# ==================== SEED HELPERS ====================


async def seed_student(db, first_name="Ada", last_name="Lovelace", email="ada@campus.org", student_number="S-1001"):
    record = Student(
        student_id=generate_id("STU"),
        student_number=student_number,
        first_name=first_name,
        last_name=last_name,
        email=email,
        password=hash_password(PASSWORD)
    ).model_dump()
    await db.students.insert_one(record)
    record.pop("_id", None)
    return record


async def seed_instructor(db, first_name="Alan", last_name="Turing", email="alan@campus.org", expertise=None):
    record = Instructor(
        instructor_id=generate_id("INS"),
        first_name=first_name,
        last_name=last_name,
        email=email,
        password=hash_password(PASSWORD),
        expertise=expertise or ["Computing"],
        experience=12
    ).model_dump()
    await db.instructors.insert_one(record)
    record.pop("_id", None)
    return record


def bearer(record: dict, variant: IdentityVariant) -> dict:
    identity_id = record["student_id"] if variant == IdentityVariant.STUDENT else record["instructor_id"]
    token = create_access_token(identity_id, variant.value, record["email"])
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
async def student(db):
    return await seed_student(db)


@pytest.fixture()
async def instructor(db):
    return await seed_instructor(db)


@pytest.fixture()
def student_headers(student):
    return bearer(student, IdentityVariant.STUDENT)


@pytest.fixture()
def instructor_headers(instructor):
    return bearer(instructor, IdentityVariant.INSTRUCTOR)
