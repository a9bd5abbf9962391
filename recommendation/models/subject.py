from sqlalchemy import Column, String

from .base import Base
from ._ids import new_id


class Subject(Base):
    __tablename__ = "subjects"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False, unique=True)
