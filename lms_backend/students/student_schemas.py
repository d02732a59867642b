from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field, field_validator

from lms_backend.config import MIN_PASSWORD_LENGTH
from lms_backend.schemas import ApiModel, Pagination, non_blank
from lms_backend.students.student_models import StudentStatus, AcademicLevel

# ==================== REQUEST SCHEMAS ====================


class StudentRegister(ApiModel):
    first_name: str = Field(..., max_length=100)
    last_name: str = Field(..., max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)
    student_number: str
    phone: Optional[str] = None
    date_of_birth: Optional[datetime] = None
    address: Optional[str] = None
    academic_level: AcademicLevel = AcademicLevel.BEGINNER

    @field_validator("first_name", "last_name", "student_number")
    @classmethod
    def not_blank(cls, v):
        return non_blank(v)


class StudentUpdate(ApiModel):
    """
    Profile fields a student may change
    Password, student number and status have their own endpoints
    """
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    date_of_birth: Optional[datetime] = None
    address: Optional[str] = None
    academic_level: Optional[AcademicLevel] = None
    profile_image: Optional[str] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def not_blank(cls, v):
        return non_blank(v)


class StudentStatusUpdate(ApiModel):
    status: StudentStatus

# ==================== RESPONSE SCHEMAS ====================


class StudentOut(ApiModel):
    student_id: str
    student_number: str
    first_name: str
    last_name: str
    email: str
    phone: str = "NOT GIVEN"
    date_of_birth: Optional[datetime] = None
    address: str = ""
    enrollment_date: Optional[datetime] = None
    status: StudentStatus
    academic_level: AcademicLevel
    profile_image: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class StudentAuthResponse(ApiModel):
    token: str
    student: StudentOut
    message: str


class StudentPagination(Pagination):
    total_students: int


class StudentList(ApiModel):
    students: List[StudentOut]
    pagination: StudentPagination


class StudentSearchFilters(ApiModel):
    status: Optional[StudentStatus] = None
    academic_level: Optional[AcademicLevel] = None


class StudentSearchResult(ApiModel):
    search_results: List[StudentOut]
    total_results: int
    search_query: Optional[str] = None
    filters: StudentSearchFilters


class StudentUpdated(ApiModel):
    message: str
    student: StudentOut
