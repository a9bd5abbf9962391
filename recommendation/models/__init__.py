# Export all recommendation models for easy imports
from .base import Base
from .subject import Subject
from .pathway import Pathway, PathwayWeight
from .result import Result
from .interest import InterestQuestion, InterestResponse
from .recommendation import Recommendation

__all__ = [
    "Base",
    "Subject",
    "Pathway",
    "PathwayWeight",
    "Result",
    "InterestQuestion",
    "InterestResponse",
    "Recommendation",
]
