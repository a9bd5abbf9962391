"""
Data Contracts for the Pathway Scoring Engine

Defines Pydantic models for the catalog/student records the engine reads
(input) and the recommendation rows it produces (output).
These contracts are the API boundary for the scoring engine.
"""

from typing import List, Optional, Dict
from pydantic import BaseModel, Field

from .constants import (
    MIN_SCORE,
    MAX_SCORE,
    MIN_CONFIDENCE,
    MAX_CONFIDENCE,
    MIN_ANSWER_VALUE,
    MAX_ANSWER_VALUE,
    DEFAULT_WEIGHT_VALUE,
    ENGINE_VERSION,
)


# =============================================================================
# CATALOG CONTRACTS
# =============================================================================

class SubjectRecord(BaseModel):
    id: str
    name: str


class PathwayRecord(BaseModel):
    """A senior-school track a student can be placed into."""
    id: str
    name: str
    color: str = "#3b82f6"  # display only
    description: Optional[str] = None


class PathwayWeightRecord(BaseModel):
    """How much one subject contributes to one pathway's academic score."""
    pathway_id: str
    subject_id: str
    weight_value: float = Field(default=DEFAULT_WEIGHT_VALUE, ge=0.0)


class InterestQuestionRecord(BaseModel):
    """
    Questionnaire item. `pathway_weights` maps a pathway key (its name unless
    the engine is configured otherwise) to a non-negative weight.
    """
    id: str
    question_text: str = ""
    sort_order: int = 0
    pathway_weights: Dict[str, float] = Field(default_factory=dict)


# =============================================================================
# STUDENT CONTRACTS
# =============================================================================

class ResultRecord(BaseModel):
    subject_id: str
    score: float = Field(ge=MIN_SCORE, le=MAX_SCORE)
    verified: bool = False


class InterestResponseRecord(BaseModel):
    question_id: str
    answer_value: int = Field(ge=MIN_ANSWER_VALUE, le=MAX_ANSWER_VALUE)


class StudentSnapshot(BaseModel):
    """
    Read-only snapshot of everything one computation needs.
    Catalog lists keep the order the store returned them in.
    """
    student_id: str
    results: List[ResultRecord] = Field(default_factory=list)
    responses: List[InterestResponseRecord] = Field(default_factory=list)
    pathways: List[PathwayRecord] = Field(default_factory=list)
    weights: List[PathwayWeightRecord] = Field(default_factory=list)
    questions: List[InterestQuestionRecord] = Field(default_factory=list)


# =============================================================================
# OUTPUT CONTRACTS
# =============================================================================

class PathwayScore(BaseModel):
    """Unrounded aggregator output for one pathway."""
    pathway_id: str
    academic_score: float = 0.0
    interest_score: float = 0.0


class RecommendationRow(BaseModel):
    """One persisted recommendation, keyed by (student_id, pathway_id)."""
    student_id: str
    pathway_id: str
    academic_score: float = Field(ge=MIN_SCORE, le=MAX_SCORE)
    interest_score: float = Field(ge=MIN_SCORE, le=MAX_SCORE)
    final_score: float = Field(ge=MIN_SCORE, le=MAX_SCORE)
    confidence: int = Field(ge=MIN_CONFIDENCE, le=MAX_CONFIDENCE)
    explanation: str = ""


class RecommendationOutput(BaseModel):
    """
    Output contract for one computation.
    `recommendations` follows catalog order; `top_recommendation` is the
    strictly greatest final score, first in catalog order on ties.
    """
    # Request tracking
    request_id: Optional[str] = None
    student_id: str

    recommendations: List[RecommendationRow] = Field(default_factory=list)
    top_recommendation: Optional[RecommendationRow] = None

    # Summary
    total_pathways: int = 0
    pruned_pathway_ids: List[str] = Field(default_factory=list)

    # Processing metadata
    processing_time_ms: Optional[float] = None
    engine_version: str = ENGINE_VERSION

    warnings: List[str] = Field(default_factory=list)


class PathwayRecommendation(BaseModel):
    """Stored recommendation joined with its pathway, ready for display."""
    pathway_id: str
    pathway_name: str
    color: str = "#3b82f6"
    academic_score: float
    interest_score: float
    final_score: float
    confidence: int
    explanation: str = ""
    rank: int = 0


class StoredRecommendations(BaseModel):
    student_id: str
    recommendations: List[PathwayRecommendation] = Field(default_factory=list)
    top_recommendation: Optional[PathwayRecommendation] = None


# =============================================================================
# WRITE CONTRACTS
# =============================================================================

class InterestAnswer(BaseModel):
    question_id: str
    answer_value: int = Field(ge=MIN_ANSWER_VALUE, le=MAX_ANSWER_VALUE)


class ResultUpload(BaseModel):
    student_id: str
    subject_id: str
    score: float = Field(ge=MIN_SCORE, le=MAX_SCORE)
    examiner_id: Optional[str] = None


class WeightUpdate(BaseModel):
    pathway_id: str
    subject_id: str
    weight_value: float = Field(default=DEFAULT_WEIGHT_VALUE, ge=0.0)
