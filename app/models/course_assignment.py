from sqlalchemy import Column, Integer, ForeignKey, DateTime, Text, Enum, UniqueConstraint, func
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.core.constants import AssignmentStatusEnum


class CourseAssignment(Base):
    __tablename__ = "course_assignments"
    __table_args__ = (UniqueConstraint("learner_id", "course_id", name="uq_course_assignments_learner_course"),)

    id = Column(Integer, primary_key=True, index=True)
    learner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    assigned_by_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    # Last progress-driven state; OVERDUE is derived at read time and never stored here.
    status = Column(Enum(AssignmentStatusEnum), nullable=False, default=AssignmentStatusEnum.ASSIGNED)
    deadline = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)
    assigned_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)

    learner = relationship("User", back_populates="assignments", foreign_keys=[learner_id])
    assigned_by = relationship("User", foreign_keys=[assigned_by_id])
    course = relationship("Course", back_populates="assignments")
    organization = relationship("Organization", back_populates="assignments")
