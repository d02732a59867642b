import pytest

from conftest import seed_student
from lms_backend.errors import ConflictError
from lms_backend.identity import account_service as accounts
from lms_backend.identity.identity_models import IdentityVariant


class UncommittedLookups:
    """Students collection whose reads miss, as if a concurrent write had not landed yet"""

    def __init__(self, collection):
        self.collection = collection

    async def find_one(self, *args, **kwargs):
        return None

    def __getattr__(self, name):
        return getattr(self.collection, name)


async def test_update_identity_email_race_is_a_conflict(db, student, monkeypatch):
    other = await seed_student(db, "Grace", "Hopper", "grace@campus.org", "S-2002")
    monkeypatch.setattr(
        accounts, "_table",
        lambda database, variant: (UncommittedLookups(database.students), "student_id")
    )

    with pytest.raises(ConflictError):
        await accounts.update_identity(db, IdentityVariant.STUDENT, student["student_id"], {"email": other["email"]})

    stored = await db.students.find_one({"student_id": student["student_id"]})
    assert stored["email"] == student["email"]


async def test_update_identity_lowercases_email(db, student):
    record = await accounts.update_identity(
        db, IdentityVariant.STUDENT, student["student_id"], {"email": " Ada.L@Campus.org "}
    )
    assert record["email"] == "ada.l@campus.org"
    assert "password" not in record
