from sqlalchemy import Boolean, Column, String, Integer, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
from app.core.constants import UserRoleEnum

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=True)
    role = Column(Enum(UserRoleEnum), nullable=False, default=UserRoleEnum.LEARNER)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=True)
    job_title = Column(String, nullable=True)
    staff_id = Column(String, nullable=True)
    is_active = Column(Boolean(), default=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    organization = relationship("Organization", back_populates="users")
    teaching_courses = relationship("Course", back_populates="instructor")
    enrollments = relationship("Enrollment", back_populates="user", foreign_keys="Enrollment.user_id")
    lecture_progress = relationship("LectureProgress", back_populates="user")
    certificates = relationship("Certificate", back_populates="user")
    assignments = relationship("CourseAssignment", back_populates="learner", foreign_keys="CourseAssignment.learner_id")
