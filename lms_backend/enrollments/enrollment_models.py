from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class EnrollmentStatus(str, Enum):
    ENROLLED = "ENROLLED"
    NOT_ENROLLED = "NOT ENROLLED"
    IN_PROGRESS = "IN PROGRESS"
    COMPLETED = "COMPLETED"
    DROPPED = "DROPPED"
    SUSPENDED = "SUSPENDED"


class Enrollment(BaseModel):
    """
    One student in one course (unique on student_id + course_id)
    Names and title are snapshots taken at enrollment time
    """
    model_config = ConfigDict(use_enum_values=True)

    enrollment_id: str  # ENR_XXXXXX
    student_id: str
    course_id: str
    student_name: str
    student_email: str
    course_title: str
    status: EnrollmentStatus = EnrollmentStatus.ENROLLED
    grade: str = "Not Given"
    progress: float = 0  # percentage
    enrollment_date: datetime = Field(default_factory=datetime.utcnow)
    completion_date: Optional[datetime] = None
    updated_at: datetime = Field(default_factory=datetime.utcnow)
