from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

# ==================== ENUMS ====================


class StudentStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    GRADUATED = "Graduated"
    SUSPENDED = "Suspended"


class AcademicLevel(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"

# ==================== DATABASE MODELS ====================


class Student(BaseModel):
    """
    Student identity record (collection: students)
    password holds the bcrypt hash and never leaves the service layer
    """
    model_config = ConfigDict(use_enum_values=True)

    student_id: str  # STU_XXXXXX
    student_number: str  # institution-issued, unique
    first_name: str
    last_name: str
    email: str  # lower-cased, unique
    password: str
    phone: str = "NOT GIVEN"
    date_of_birth: Optional[datetime] = None
    address: str = ""
    enrollment_date: datetime = Field(default_factory=datetime.utcnow)
    status: StudentStatus = StudentStatus.ACTIVE
    academic_level: AcademicLevel = AcademicLevel.BEGINNER
    profile_image: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
