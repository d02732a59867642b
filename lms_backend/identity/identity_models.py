from enum import Enum
from typing import Optional


class IdentityVariant(str, Enum):
    """Which identity table a reference points into"""
    STUDENT = "student"
    INSTRUCTOR = "instructor"


# variant -> (collection, id field)
IDENTITY_TABLES = {
    IdentityVariant.STUDENT: ("students", "student_id"),
    IdentityVariant.INSTRUCTOR: ("instructors", "instructor_id"),
}


def display_name(record: dict) -> str:
    return f"{record.get('first_name', '')} {record.get('last_name', '')}".strip()


def make_ref(identity_id: str, variant: IdentityVariant) -> dict:
    """Tagged (id, variant) reference as stored inside conversations"""
    return {"id": identity_id, "variant": IdentityVariant(variant).value}


def resolved_ref(ref: dict, record: Optional[dict]) -> dict:
    """
    Replace a bare reference with display fields
    A missing record leaves the reference unresolved (display fields None)
    """
    return {
        "id": ref["id"],
        "variant": ref["variant"],
        "display_name": display_name(record) if record else None,
        "email": record.get("email") if record else None,
    }
