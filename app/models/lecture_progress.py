from sqlalchemy import Column, Integer, ForeignKey, DateTime, Boolean, UniqueConstraint, func
from sqlalchemy.orm import relationship
from app.core.database import Base


class LectureProgress(Base):
    __tablename__ = "lecture_progress"
    __table_args__ = (UniqueConstraint("user_id", "lecture_id", name="uq_lecture_progress_user_lecture"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    lecture_id = Column(Integer, ForeignKey("lectures.id"), nullable=False, index=True)
    is_completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    watched_duration = Column(Integer, nullable=False, default=0)
    last_position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)

    user = relationship("User", back_populates="lecture_progress")
    lecture = relationship("Lecture", back_populates="progress_records")
