from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from lms_backend.courses.course_models import CourseLevel, CourseStatus
from lms_backend.schemas import ApiModel, Pagination, RatingSummary, non_blank

# ==================== REQUEST SCHEMAS ====================


class SyllabusItemIn(ApiModel):
    title: str
    description: str = ""
    duration: int = Field(0, ge=0)


class CourseCreate(ApiModel):
    title: str = Field(..., max_length=200)
    description: str
    instructor_id: str
    category: str = "General"
    duration: float = Field(0, ge=0)
    price: float = Field(0, ge=0)
    level: CourseLevel = CourseLevel.BEGINNER
    status: CourseStatus = CourseStatus.DRAFT
    max_students: int = Field(50, ge=1)
    syllabus: List[SyllabusItemIn] = []
    requirements: List[str] = []
    tags: List[str] = []
    thumbnail: Optional[str] = None
    is_featured: bool = False

    @field_validator("title", "description", "instructor_id", "category")
    @classmethod
    def not_blank(cls, v):
        return non_blank(v)


class CourseUpdate(ApiModel):
    """
    instructor_id and enrollment_count cannot be changed here
    """
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = None
    duration: Optional[float] = Field(None, ge=0)
    price: Optional[float] = Field(None, ge=0)
    level: Optional[CourseLevel] = None
    max_students: Optional[int] = Field(None, ge=1)
    syllabus: Optional[List[SyllabusItemIn]] = None
    requirements: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    thumbnail: Optional[str] = None
    is_featured: Optional[bool] = None

    @field_validator("title", "description", "category")
    @classmethod
    def not_blank(cls, v):
        return non_blank(v)


class CourseStatusUpdate(ApiModel):
    status: CourseStatus

# ==================== RESPONSE SCHEMAS ====================


class InstructorBrief(ApiModel):
    id: str
    display_name: Optional[str] = None
    email: Optional[str] = None


class CourseOut(ApiModel):
    course_id: str
    title: str
    description: str
    instructor_id: str
    instructor: Optional[InstructorBrief] = None
    category: str
    duration: float = 0
    price: float = 0
    level: CourseLevel
    status: CourseStatus
    max_students: int
    enrollment_count: int = 0
    syllabus: List[SyllabusItemIn] = []
    requirements: List[str] = []
    tags: List[str] = []
    thumbnail: Optional[str] = None
    is_featured: bool = False
    rating: RatingSummary = Field(default_factory=RatingSummary)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CourseCreated(ApiModel):
    message: str
    course: CourseOut


class CoursePagination(Pagination):
    total_courses: int


class CourseList(ApiModel):
    courses: List[CourseOut]
    pagination: CoursePagination


class CourseCollection(ApiModel):
    courses: List[CourseOut]


class InstructorStats(ApiModel):
    total_courses: int
    published_courses: int
    draft_courses: int
    archived_courses: int
    total_enrollments: int


class InstructorCourses(ApiModel):
    courses: List[CourseOut]
    total_courses: int
    instructor_stats: InstructorStats
