from sqlalchemy import Column, String, Text, Float, Integer, DateTime, ForeignKey, UniqueConstraint

from .base import Base
from ._ids import new_id, utcnow


class Recommendation(Base):
    __tablename__ = "recommendations"
    __table_args__ = (
        UniqueConstraint("student_id", "pathway_id", name="uq_recommendations_student_pathway"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    student_id = Column(String(36), nullable=False, index=True)
    pathway_id = Column(String(36), ForeignKey("pathways.id"), nullable=False)

    # Scores (0-100)
    academic_score = Column(Float, nullable=False, default=0.0)
    interest_score = Column(Float, nullable=False, default=0.0)
    final_score = Column(Float, nullable=False, default=0.0)
    confidence = Column(Integer, nullable=False, default=0)

    explanation = Column(Text)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow)
