from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from lms_backend.enrollments.enrollment_models import EnrollmentStatus
from lms_backend.schemas import ApiModel, Pagination, non_blank

# ==================== REQUEST SCHEMAS ====================


class EnrollmentCreate(ApiModel):
    student_id: str
    course_id: str

    @field_validator("student_id", "course_id")
    @classmethod
    def not_blank(cls, v):
        return non_blank(v)


class EnrollmentStatusUpdate(ApiModel):
    status: EnrollmentStatus


class EnrollmentGradeUpdate(ApiModel):
    grade: str = Field(..., max_length=20)

    @field_validator("grade")
    @classmethod
    def not_blank(cls, v):
        return non_blank(v)


class EnrollmentProgressUpdate(ApiModel):
    """Range is checked by the service (400 outside 0-100)"""
    progress: float


class EnrollmentUpdate(ApiModel):
    """
    General update, any subset of status/grade/progress
    Progress range is checked by the service
    """
    status: Optional[EnrollmentStatus] = None
    grade: Optional[str] = Field(None, max_length=20)
    progress: Optional[float] = None

    @field_validator("grade")
    @classmethod
    def not_blank(cls, v):
        return non_blank(v)

# ==================== RESPONSE SCHEMAS ====================


class EnrollmentOut(ApiModel):
    enrollment_id: str
    student_id: str
    course_id: str
    student_name: str
    student_email: str
    course_title: str
    status: EnrollmentStatus
    grade: str
    progress: float
    enrollment_date: datetime
    completion_date: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class EnrollmentResult(ApiModel):
    message: str
    enrollment: EnrollmentOut


class EnrollmentPagination(Pagination):
    total_enrollments: int


class EnrollmentList(ApiModel):
    enrollments: List[EnrollmentOut]
    pagination: EnrollmentPagination


class EnrollmentCollection(ApiModel):
    enrollments: List[EnrollmentOut]
    total: int


class EnrollmentTotals(ApiModel):
    total: int
    active: int
    completed: int
    dropped: int


class StatusCount(ApiModel):
    status: str
    count: int


class EnrollmentStats(ApiModel):
    statistics: EnrollmentTotals
    status_distribution: List[StatusCount]
    recent_enrollments: List[EnrollmentOut]


class EnrollmentSearchResult(ApiModel):
    search_results: List[EnrollmentOut]
    total_results: int
    search_query: Optional[str] = None
    status_filter: Optional[EnrollmentStatus] = None
