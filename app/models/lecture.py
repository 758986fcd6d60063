from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
from app.core.constants import LectureTypeEnum

class Lecture(Base):
    __tablename__ = "lectures"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    lecture_type = Column(Enum(LectureTypeEnum), nullable=False, default=LectureTypeEnum.VIDEO)
    video_duration = Column(Integer, nullable=True) # Duration in seconds
    position = Column(Integer, nullable=False, default=0)
    section_id = Column(Integer, ForeignKey("sections.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    section = relationship("Section", back_populates="lectures")
    progress_records = relationship("LectureProgress", back_populates="lecture", cascade="all, delete-orphan")
