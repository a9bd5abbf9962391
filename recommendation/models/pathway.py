from sqlalchemy import Column, String, Text, Float, ForeignKey, UniqueConstraint

from .base import Base
from ._ids import new_id


class Pathway(Base):
    __tablename__ = "pathways"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    color = Column(String, nullable=False, default="#3b82f6")
    description = Column(Text)


class PathwayWeight(Base):
    __tablename__ = "pathway_weights"
    __table_args__ = (
        UniqueConstraint("pathway_id", "subject_id", name="uq_pathway_weights_pathway_subject"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    pathway_id = Column(String(36), ForeignKey("pathways.id"), nullable=False)
    subject_id = Column(String(36), ForeignKey("subjects.id"), nullable=False)
    weight_value = Column(Float, nullable=False, default=1.0)
