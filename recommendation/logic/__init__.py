"""
Recommendation Logic Module

Provides the deterministic scoring engine for senior-school pathway recommendations.
"""

from .contracts import (
    StudentSnapshot,
    PathwayRecord,
    PathwayWeightRecord,
    InterestQuestionRecord,
    InterestResponseRecord,
    ResultRecord,
    SubjectRecord,
    PathwayScore,
    RecommendationRow,
    RecommendationOutput,
    PathwayRecommendation,
    StoredRecommendations,
    InterestAnswer,
    ResultUpload,
    WeightUpdate,
)
from .engine import RecommendationEngine, compute_recommendations
from .errors import (
    RecommendationError,
    MissingAcademicData,
    MissingInterestData,
    PersistenceFailure,
    UnresolvedPathwayKey,
    InvalidSubmission,
    InvalidConfiguration,
)
from .store import RecommendationStore, InMemoryStore, SqlAlchemyStore
from .constants import InterestWeightKeying

__all__ = [
    # Main engine
    "RecommendationEngine",
    "compute_recommendations",

    # Stores
    "RecommendationStore",
    "InMemoryStore",
    "SqlAlchemyStore",

    # Contracts
    "StudentSnapshot",
    "PathwayRecord",
    "PathwayWeightRecord",
    "InterestQuestionRecord",
    "InterestResponseRecord",
    "ResultRecord",
    "SubjectRecord",
    "PathwayScore",
    "RecommendationRow",
    "RecommendationOutput",
    "PathwayRecommendation",
    "StoredRecommendations",
    "InterestAnswer",
    "ResultUpload",
    "WeightUpdate",

    # Errors
    "RecommendationError",
    "MissingAcademicData",
    "MissingInterestData",
    "PersistenceFailure",
    "UnresolvedPathwayKey",
    "InvalidSubmission",
    "InvalidConfiguration",

    # Enums
    "InterestWeightKeying",
]
