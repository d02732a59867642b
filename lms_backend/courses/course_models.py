from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

# ==================== ENUMS ====================


class CourseLevel(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class CourseStatus(str, Enum):
    DRAFT = "Draft"
    PUBLISHED = "Published"
    ARCHIVED = "Archived"
    SUSPENDED = "Suspended"

# ==================== DATABASE MODELS ====================


class SyllabusItem(BaseModel):
    title: str
    description: str = ""
    duration: int = 0  # minutes


class Course(BaseModel):
    """
    Course record (collection: courses)
    enrollment_count is maintained by the enrollment service
    """
    model_config = ConfigDict(use_enum_values=True)

    course_id: str  # CRS_XXXXXX
    title: str  # unique
    description: str
    instructor_id: str
    category: str = "General"
    duration: float = 0  # hours
    price: float = 0
    level: CourseLevel = CourseLevel.BEGINNER
    status: CourseStatus = CourseStatus.DRAFT
    max_students: int = 50
    enrollment_count: int = 0
    syllabus: List[SyllabusItem] = []
    requirements: List[str] = []
    tags: List[str] = []
    thumbnail: Optional[str] = None
    is_featured: bool = False
    rating: dict = Field(default_factory=lambda: {"average": 0.0, "count": 0})
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
