from sqlalchemy import Column, String, Float, Boolean, DateTime, ForeignKey, UniqueConstraint

from .base import Base
from ._ids import new_id, utcnow


class Result(Base):
    __tablename__ = "results"
    __table_args__ = (
        UniqueConstraint("student_id", "subject_id", name="uq_results_student_subject"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    student_id = Column(String(36), nullable=False, index=True)
    subject_id = Column(String(36), ForeignKey("subjects.id"), nullable=False)
    examiner_id = Column(String(36))
    score = Column(Float, nullable=False)
    verified = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
