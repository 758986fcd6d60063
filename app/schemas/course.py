from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from app.core.constants import CourseStatusEnum, LectureTypeEnum


class LectureBase(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    lecture_type: LectureTypeEnum = LectureTypeEnum.VIDEO
    video_duration: Optional[int] = Field(default=None, ge=0)

class LectureCreate(LectureBase):
    pass

class LectureUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    lecture_type: Optional[LectureTypeEnum] = None
    video_duration: Optional[int] = Field(default=None, ge=0)

class Lecture(LectureBase):
    id: int
    section_id: int
    position: int

    model_config = ConfigDict(from_attributes=True)


class SectionBase(BaseModel):
    title: str = Field(..., min_length=1)

class SectionCreate(SectionBase):
    pass

class SectionUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)

class Section(SectionBase):
    id: int
    course_id: int
    position: int
    lectures: List[Lecture] = []

    model_config = ConfigDict(from_attributes=True)


class CourseBase(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    thumbnail: Optional[str] = None
    is_free: bool = True
    price: Decimal = Field(default=Decimal("0"), ge=0)
    cpd_points: int = Field(default=0, ge=0)
    estimated_hours: Optional[float] = Field(default=None, ge=0)

class CourseCreate(CourseBase):
    status: CourseStatusEnum = CourseStatusEnum.DRAFT

class CourseUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    thumbnail: Optional[str] = None
    status: Optional[CourseStatusEnum] = None
    is_free: Optional[bool] = None
    price: Optional[Decimal] = Field(default=None, ge=0)
    cpd_points: Optional[int] = Field(default=None, ge=0)
    estimated_hours: Optional[float] = Field(default=None, ge=0)

class ReorderRequest(BaseModel):
    ordered_ids: List[int] = Field(..., min_length=1)

class CourseSummary(CourseBase):
    id: int
    slug: str
    status: CourseStatusEnum
    instructor_id: int
    total_lectures: int = 0
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class Course(CourseSummary):
    sections: List[Section] = []
