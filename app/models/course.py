from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Enum, Numeric, Float
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
from app.core.constants import CourseStatusEnum

class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, index=True, nullable=False)
    slug = Column(String, unique=True, index=True, nullable=False)
    description = Column(String, nullable=True)
    thumbnail = Column(String, nullable=True)
    status = Column(Enum(CourseStatusEnum), nullable=False, default=CourseStatusEnum.DRAFT)
    is_free = Column(Boolean, nullable=False, default=True)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    cpd_points = Column(Integer, nullable=False, default=0)
    estimated_hours = Column(Float, nullable=True)
    instructor_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    instructor = relationship("User", back_populates="teaching_courses")
    sections = relationship("Section", back_populates="course", order_by="Section.position", cascade="all, delete-orphan")
    enrollments = relationship("Enrollment", back_populates="course")
    assignments = relationship("CourseAssignment", back_populates="course")

    @property
    def total_lectures(self):
        return sum(len(section.lectures) for section in self.sections)
