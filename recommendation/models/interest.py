from sqlalchemy import Column, String, Text, Integer, JSON, DateTime, ForeignKey, UniqueConstraint

from .base import Base
from ._ids import new_id, utcnow


class InterestQuestion(Base):
    __tablename__ = "interest_questions"

    id = Column(String(36), primary_key=True, default=new_id)
    question_text = Column(Text, nullable=False)
    sort_order = Column(Integer, nullable=False, default=0)

    # {"<pathway name>": weight, ...}
    pathway_weights = Column(JSON, nullable=False, default=dict)


class InterestResponse(Base):
    __tablename__ = "interest_responses"
    __table_args__ = (
        UniqueConstraint("student_id", "question_id", name="uq_interest_responses_student_question"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    student_id = Column(String(36), nullable=False, index=True)
    question_id = Column(String(36), ForeignKey("interest_questions.id"), nullable=False)
    answer_value = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow)
