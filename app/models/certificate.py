from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, UniqueConstraint, func
from sqlalchemy.orm import relationship
from app.core.database import Base


class Certificate(Base):
    """Point-in-time snapshot of a completion; course edits never touch issued rows."""
    __tablename__ = "certificates"
    __table_args__ = (UniqueConstraint("user_id", "course_id", name="uq_certificates_user_course"),)

    id = Column(Integer, primary_key=True, index=True)
    certificate_id = Column(String(32), unique=True, index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False)
    course_name = Column(String, nullable=False)
    instructor_name = Column(String, nullable=True)
    organization_name = Column(String, nullable=False)
    cpd_points = Column(Integer, nullable=False, default=0)
    issued_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    user = relationship("User", back_populates="certificates")
    course = relationship("Course")
